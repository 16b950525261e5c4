"""
Top-level interview flow.
Wires resume intake, profile collection, the session state machine, the
question timer and the evaluator together, and keeps the chat transcript.
"""
import logging
from typing import List, Optional, Tuple

from interview.agents import Evaluator, FALLBACK_FEEDBACK
from interview.profile import ProfileCollector
from interview.registry import CandidateRegistry, CompletedInterviewLog
from interview.scoring import ScoreAggregator
from interview.stages import resolve_stage
from interview.state import InterviewStateMachine
from interview.timer import TimerEngine
from models.schemas import (
    CandidateProfile,
    ChatMessage,
    CompletedInterview,
    Evaluation,
    InterviewSession,
    InterviewSnapshot,
    InterviewStatus,
    ParsedResume,
    ReviewSort,
    ScoreBand,
    ScoreReport,
    SessionStatus,
    Stage,
    StageView,
    TimerState,
)
from resume import ResumeParser, resume_parser

logger = logging.getLogger(__name__)

TIMEOUT_ANSWER = "No answer provided (time expired)"


class StageController:
    """
    Drives one candidate at a time through upload, profile, interview and
    completion.

    The user path (submit_answer) and the timer path (handle_time_up) both
    claim the question index before writing. Whichever claims first wins;
    the other becomes a no-op.
    """

    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        parser: Optional[ResumeParser] = None,
        tick_interval: Optional[float] = None,
    ):
        self.store = InterviewStateMachine()
        self.candidates = CandidateRegistry()
        self.completed = CompletedInterviewLog()
        self.evaluator = evaluator or Evaluator()
        self.parser = parser or resume_parser
        self.timer = TimerEngine(
            on_expire=self.handle_time_up,
            on_warning=self._on_timer_warning,
            tick_interval=tick_interval,
        )

        self.current_candidate_id: Optional[str] = None
        self.collector: Optional[ProfileCollector] = None
        self.messages: List[ChatMessage] = []
        self._claimed: Optional[Tuple[str, int]] = None

    # ========================================
    # Queries
    # ========================================

    @property
    def candidate(self) -> Optional[CandidateProfile]:
        if self.current_candidate_id is None:
            return None
        return self.candidates.get(self.current_candidate_id)

    @property
    def session(self) -> Optional[InterviewSession]:
        return self.store.session

    @property
    def stage(self) -> StageView:
        return resolve_stage(self.candidate, self.store.session)

    @property
    def timer_state(self) -> TimerState:
        return self.timer.state

    def status(self) -> InterviewStatus:
        collector = self._ensure_collector()
        return InterviewStatus(
            stage=self.stage,
            candidate=self.candidate,
            session=self.store.session,
            timer=self.timer.state,
            missing_fields=list(collector.missing_fields) if collector else [],
            messages=list(self.messages),
        )

    # ========================================
    # Intake and profile collection
    # ========================================

    def upload_resume(self, data: bytes, filename: str) -> Optional[CandidateProfile]:
        """
        Parse a resume and register its candidate.

        Raises:
            UnsupportedResumeError: the file type is not supported
        """
        if self._has_unfinished_session():
            logger.info("upload ignored: an interview is still unfinished")
            return None

        parsed = self.parser.parse(data, filename)
        validation = self.parser.validate(parsed)
        return self.register_candidate(parsed, validation.missing_fields, filename)

    def register_candidate(
        self,
        parsed: ParsedResume,
        missing_fields: List[str],
        filename: Optional[str] = None,
    ) -> Optional[CandidateProfile]:
        """Create the candidate record and open profile collection."""
        if self._has_unfinished_session():
            logger.info("register ignored: an interview is still unfinished")
            return None

        profile = self.candidates.add(CandidateProfile(
            name=parsed.name,
            email=parsed.email,
            phone=parsed.phone,
            resume_file_name=filename,
            resume_content=parsed.content or None,
        ))
        self.store.clear()
        self.current_candidate_id = profile.id
        self.messages = []
        self.collector = self._new_collector(profile, missing_fields)
        self._say(self.collector.opening_prompt())
        return profile

    async def handle_profile_message(self, text: str) -> Optional[InterviewSession]:
        """
        Feed one chat message into profile collection.

        Returns:
            The started session once the candidate confirms they are ready
        """
        if self.stage.stage != Stage.PROFILE:
            logger.debug(f"profile message ignored in stage {self.stage.stage.value}")
            return None

        collector = self._ensure_collector()
        self._hear(text)

        if not collector.is_complete:
            prompt = collector.accept(text)
            self._say(prompt if prompt is not None else collector.ready_prompt())
            return None

        if "ready" in text.lower():
            return await self.begin_interview()

        self._say("Please type \"ready\" when you're prepared to begin the interview.")
        return None

    async def begin_interview(self) -> Optional[InterviewSession]:
        """Generate questions for the current candidate and start the session."""
        profile = self.candidate
        if profile is None or profile.missing_fields() or self._has_unfinished_session():
            logger.debug("begin_interview ignored: profile incomplete or session running")
            return None

        self._say("Excellent! Generating your personalized interview questions...")
        questions, is_fallback = await self.evaluator.generate_questions(profile)
        if is_fallback:
            self._say("There was an issue generating questions. Using standard questions instead.")

        session = self.store.start_interview(profile.id, questions)
        if session is None:
            return None

        self._claimed = None
        self._say("Questions generated successfully! Starting your interview now...")
        self._announce_question()
        self._sync_timer()
        return session

    # ========================================
    # Answering
    # ========================================

    def update_draft(self, text: str):
        self.store.update_current_answer(text)

    async def submit_answer(self, answer: str, index: Optional[int] = None) -> Optional[Evaluation]:
        """
        Candidate-initiated submission of the current question.

        The countdown stops as soon as the question is claimed, so a slow
        evaluator cannot let the timer submit the same question again.

        Args:
            answer: Answer text
            index: Question the answer was written for; ignored if stale

        Returns:
            The evaluation applied, or None if nothing was submitted
        """
        session = self.store.session
        if session is None or session.status != SessionStatus.IN_PROGRESS:
            logger.debug("submit ignored: no in-progress session")
            return None

        if index is not None and index != session.current_question_index:
            logger.debug(f"submit for question {index} ignored: no longer current")
            return None

        index = session.current_question_index
        question = session.current_question
        if question is None or not self._claim(session.session_id, index):
            return None

        time_spent = self.timer.elapsed if self.timer.question_index == index else 0
        self.timer.stop()
        self._hear(answer)

        evaluation = await self.evaluator.evaluate_answer(question, answer, time_spent)

        if self.store.session is not session or not self.store.submit_answer(
            answer, time_spent, evaluation.score, index=index
        ):
            logger.info(f"Evaluation for question {index} discarded: session moved on")
            return None

        if evaluation.is_fallback and evaluation.feedback == FALLBACK_FEEDBACK:
            self._say("Answer recorded. Moving to the next question...")
        else:
            self._say(f"Thank you for your answer! {evaluation.feedback}")

        await self._advance(session, index)
        return evaluation

    async def handle_time_up(self, index: int, elapsed: int):
        """
        Forced submission when the countdown for `index` reaches zero.

        Records the draft (or a placeholder) with score 0 without asking the
        evaluator, then moves on.
        """
        session = self.store.session
        if session is None or session.status != SessionStatus.IN_PROGRESS \
                or not self.store.is_current(index):
            logger.debug(f"expiry for question {index} ignored: no longer current")
            return
        if not self._claim(session.session_id, index):
            return

        answer = self.store.current_answer.strip() or TIMEOUT_ANSWER
        self.store.submit_answer(answer, elapsed, 0, index=index)
        self._say("Time's up! Your answer has been submitted automatically.")
        await self._advance(session, index)

    # ========================================
    # Pause, resume, restart, completion
    # ========================================

    def pause(self) -> bool:
        if not self.store.pause():
            return False
        self.timer.stop()
        return True

    def resume(self) -> bool:
        """Continue a paused session at the same question with its full time limit."""
        if not self.store.resume():
            return False
        self._say("Welcome back! Let's continue where you left off.")
        self._announce_question()
        self._sync_timer()
        return True

    def restart(self):
        """Discard the unfinished session and candidate; back to upload."""
        self.timer.stop()
        self.store.clear()
        self.current_candidate_id = None
        self.collector = None
        self.messages = []
        self._claimed = None
        logger.info("Interview restarted")

    async def end_interview(self) -> Optional[InterviewSession]:
        """Finalize the running session now, scoring unanswered questions as 0."""
        session = self.store.session
        if session is None or session.status not in (SessionStatus.IN_PROGRESS, SessionStatus.PAUSED):
            return None
        self.timer.stop()
        await self._finalize(session)
        return session

    def report(self, session_id: Optional[str] = None) -> Optional[ScoreReport]:
        """
        Score report for a logged interview, or for the active session when
        no id is given.
        """
        if session_id is not None:
            entry = self.completed.get(session_id)
            if entry is None:
                return None
            return ScoreAggregator.build_report(entry.questions, entry.total_score)

        session = self.store.session
        if session is None:
            return None
        return ScoreAggregator.build_report(session.questions, session.total_score)

    def review_completed(
        self,
        search: Optional[str] = None,
        sort_by: ReviewSort = ReviewSort.SCORE,
        band: Optional[ScoreBand] = None,
    ) -> List[CompletedInterview]:
        """
        Completed interviews for operator review.

        Args:
            search: Case-insensitive match on candidate name or email
            sort_by: score, date or name
            band: Keep only entries in this score band

        Returns:
            Matching entries in review order
        """
        term = (search or "").strip().lower()

        def matches(entry: CompletedInterview) -> bool:
            if band is not None and ScoreAggregator.score_band(entry.total_score) != band:
                return False
            if not term:
                return True
            candidate = self.candidates.get(entry.candidate_id)
            if candidate is None:
                return False
            return any(term in (value or "").lower() for value in (candidate.name, candidate.email))

        return ScoreAggregator.rank_interviews(
            [entry for entry in self.completed.all() if matches(entry)],
            sort_by=sort_by,
            name_of=self._candidate_name,
        )

    def candidate_results(self, candidate_id: str) -> List[CompletedInterview]:
        """Every logged interview of one candidate, newest first."""
        return ScoreAggregator.rank_interviews(
            self.completed.for_candidate(candidate_id), sort_by=ReviewSort.DATE
        )

    def shutdown(self):
        self.timer.stop()

    # ========================================
    # Persistence surface
    # ========================================

    def snapshot(self) -> InterviewSnapshot:
        session = self.store.session
        return InterviewSnapshot(
            candidates=[c.model_copy(deep=True) for c in self.candidates.all()],
            current_candidate_id=self.current_candidate_id,
            current_session=session.model_copy(deep=True) if session else None,
            current_answer=self.store.current_answer,
            completed_interviews=[c.model_copy(deep=True) for c in self.completed.all()],
        )

    @classmethod
    def from_snapshot(cls, snapshot: InterviewSnapshot, **kwargs) -> "StageController":
        """
        Rebuild a controller from saved state. The countdown is not started;
        call sync_timer() from inside the event loop.
        """
        controller = cls(**kwargs)
        for candidate in snapshot.candidates:
            controller.candidates.add(candidate.model_copy(deep=True))
        for entry in snapshot.completed_interviews:
            controller.completed.record(entry)
        if snapshot.current_candidate_id in controller.candidates:
            controller.current_candidate_id = snapshot.current_candidate_id
        session = snapshot.current_session
        controller.store.restore(
            session.model_copy(deep=True) if session else None,
            snapshot.current_answer,
        )
        return controller

    def sync_timer(self):
        self._sync_timer()

    # ========================================
    # Internals
    # ========================================

    async def _advance(self, session: InterviewSession, index: int):
        if not self.store.next_question(index=index):
            return
        if session.status == SessionStatus.COMPLETED:
            await self._finalize(session)
            return
        if session.status == SessionStatus.IN_PROGRESS:
            self._announce_question()
        self._sync_timer()

    async def _finalize(self, session: InterviewSession):
        """
        Complete the session, then attach the summary.

        Status and total are fixed before the summary is awaited; the store
        rejects any submit that arrives after that point.
        """
        self.timer.stop()
        total = ScoreAggregator.total_score(session.questions)
        self.store.complete_interview(total, None)
        total = session.total_score

        summary, _ = await self.evaluator.generate_summary(session.questions, total)

        if self.store.session is not session:
            logger.info(f"{session.session_id} was cleared while its summary was generated")
            self.completed.record(session.model_copy(update={"summary": summary}))
            return

        self.store.complete_interview(total, summary)
        self.completed.record(session)
        self._say(f"Interview completed! Your final score is {total}/600. Thank you for participating.")

    def _claim(self, session_id: str, index: int) -> bool:
        if self._claimed == (session_id, index):
            logger.debug(f"question {index} already claimed")
            return False
        self._claimed = (session_id, index)
        return True

    def _sync_timer(self):
        """Run the countdown exactly when an in-progress question is waiting for an answer."""
        session = self.store.session
        question = self.store.current_question
        waiting = (
            session is not None
            and question is not None
            and session.status == SessionStatus.IN_PROGRESS
            and self.store.timer_running
            and self._claimed != (session.session_id, session.current_question_index)
        )
        if not waiting:
            self.timer.stop()
            return

        index = session.current_question_index
        if not (self.timer.running and self.timer.question_index == index):
            self.timer.activate(index, question.time_limit)

    def _announce_question(self):
        session = self.store.session
        question = self.store.current_question
        if session is None or question is None:
            return
        self._say(
            f"Question {session.current_question_index + 1} "
            f"({question.difficulty.value}): {question.question}"
        )
        self._say(f"You have {question.time_limit} seconds to answer.")

    def _has_unfinished_session(self) -> bool:
        return self.store.status in (SessionStatus.IN_PROGRESS, SessionStatus.PAUSED)

    def _new_collector(self, profile: CandidateProfile, missing_fields: Optional[List[str]] = None):
        return ProfileCollector(
            profile,
            missing_fields=missing_fields,
            on_field=lambda field, value: self.candidates.update(profile.id, **{field: value}),
        )

    def _ensure_collector(self) -> Optional[ProfileCollector]:
        profile = self.candidate
        if profile is None:
            return None
        if self.collector is None or self.collector.profile.id != profile.id:
            self.collector = self._new_collector(profile)
        return self.collector

    def _candidate_name(self, entry: CompletedInterview) -> Optional[str]:
        candidate = self.candidates.get(entry.candidate_id)
        return candidate.name if candidate else None

    def _on_timer_warning(self, state: TimerState):
        logger.info(f"Question {state.question_index}: {state.remaining}s remaining")

    def _say(self, content: str):
        self.messages.append(ChatMessage(role="ai", content=content))

    def _hear(self, content: str):
        self.messages.append(ChatMessage(role="user", content=content))
