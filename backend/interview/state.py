"""
Interview session state machine.
Holds the authoritative session and exposes the only operations allowed to
change it: start, submit, advance, complete, pause/resume and clear.
"""
import logging
import threading
from datetime import datetime
from typing import List, Optional

from models.schemas import (
    DIFFICULTY_PLAN,
    InterviewSession,
    MAX_QUESTION_SCORE,
    Question,
    SessionStatus,
)

logger = logging.getLogger(__name__)


class InterviewStateMachine:
    """
    Owns the active InterviewSession.

    Status transitions:
        not_started -> in_progress <-> paused -> completed

    Every public operation runs under one lock, so callers never observe a
    half-applied transition. Operations that do not apply to the current
    state are ignored and report that through their return value.
    """

    def __init__(self):
        self.session: Optional[InterviewSession] = None
        self.current_answer: str = ""
        self.timer_running: bool = False
        self._lock = threading.RLock()

    # ========================================
    # Lifecycle
    # ========================================

    def start_interview(self, candidate_id: str, questions: List[Question]) -> Optional[InterviewSession]:
        """
        Create a fresh in-progress session.

        Args:
            candidate_id: The candidate taking the interview
            questions: Exactly six questions in Easy/Medium/Hard plan order

        Returns:
            The new session, or None if another candidate holds an unfinished one
        """
        if [q.difficulty for q in questions] != DIFFICULTY_PLAN:
            raise ValueError("questions must follow the Easy, Easy, Medium, Medium, Hard, Hard plan")

        with self._lock:
            existing = self.session
            if (
                existing is not None
                and existing.candidate_id != candidate_id
                and existing.status != SessionStatus.COMPLETED
            ):
                logger.info(
                    f"Refusing to start for {candidate_id}: "
                    f"{existing.candidate_id} has an unfinished session"
                )
                return None

            self.session = InterviewSession(
                candidate_id=candidate_id,
                status=SessionStatus.IN_PROGRESS,
                questions=[q.model_copy(deep=True) for q in questions],
                current_question_index=0,
                start_time=datetime.now(),
            )
            self.current_answer = ""
            self.timer_running = True
            logger.info(f"Started {self.session.session_id} for {candidate_id}")
            return self.session

    def pause(self) -> bool:
        with self._lock:
            if not self.session or self.session.status != SessionStatus.IN_PROGRESS:
                logger.debug("pause ignored: no in-progress session")
                return False
            self.session.status = SessionStatus.PAUSED
            self.timer_running = False
            logger.info(f"Paused {self.session.session_id} at question {self.session.current_question_index}")
            return True

    def resume(self) -> bool:
        with self._lock:
            if not self.session or self.session.status != SessionStatus.PAUSED:
                logger.debug("resume ignored: no paused session")
                return False
            self.session.status = SessionStatus.IN_PROGRESS
            self.timer_running = True
            logger.info(f"Resumed {self.session.session_id} at question {self.session.current_question_index}")
            return True

    def clear(self):
        """Drop the active session. Completed records live elsewhere."""
        with self._lock:
            if self.session:
                logger.info(f"Cleared {self.session.session_id}")
            self.session = None
            self.current_answer = ""
            self.timer_running = False

    # ========================================
    # Answers and progression
    # ========================================

    def update_current_answer(self, text: str):
        with self._lock:
            self.current_answer = text

    def is_current(self, index: int) -> bool:
        """True if `index` is the question the session is waiting on."""
        with self._lock:
            return (
                self.session is not None
                and self.session.status in (SessionStatus.IN_PROGRESS, SessionStatus.PAUSED)
                and self.session.current_question_index == index
            )

    def submit_answer(
        self,
        answer: str,
        time_spent: int,
        score: Optional[int],
        index: Optional[int] = None,
    ) -> bool:
        """
        Record the result for the current question.

        Submitting again before advancing overwrites the earlier result.

        Args:
            answer: Answer text
            time_spent: Seconds spent, >= 0
            score: 0-100; callers substitute a fallback before calling
            index: Question the caller believes is current; stale calls are ignored

        Returns:
            True if the result was written
        """
        with self._lock:
            if not self.session or self.session.status not in (
                SessionStatus.IN_PROGRESS, SessionStatus.PAUSED
            ):
                logger.debug("submit_answer ignored: no active session")
                return False

            current = self.session.current_question_index
            if index is not None and index != current:
                logger.debug(f"submit_answer ignored: question {index} is no longer current ({current})")
                return False

            assert 0 <= current < len(self.session.questions), f"question index {current} out of range"
            if time_spent < 0:
                raise ValueError("time_spent must be >= 0")
            if score is not None and not 0 <= score <= MAX_QUESTION_SCORE:
                raise ValueError(f"score must be within 0-{MAX_QUESTION_SCORE}")

            question = self.session.questions[current]
            question.answer = answer
            question.time_spent = time_spent
            question.score = score
            self.current_answer = ""
            logger.info(f"Recorded answer for {question.id} (score={score}, {time_spent}s)")
            return True

    def next_question(self, index: Optional[int] = None) -> bool:
        """
        Advance to the next question, completing the session after the last one.

        Args:
            index: Question the caller believes is current; stale calls are ignored

        Returns:
            True if the index moved
        """
        with self._lock:
            if not self.session or self.session.status not in (
                SessionStatus.IN_PROGRESS, SessionStatus.PAUSED
            ):
                logger.debug("next_question ignored: no active session")
                return False
            if index is not None and index != self.session.current_question_index:
                logger.debug(f"next_question ignored: question {index} is no longer current")
                return False

            self.session.current_question_index += 1
            if self.session.current_question_index >= len(self.session.questions):
                self.session.status = SessionStatus.COMPLETED
                self.session.end_time = datetime.now()
                self.timer_running = False
                logger.info(f"All questions answered in {self.session.session_id}")
            return True

    def complete_interview(self, total_score: int, summary: Optional[str]) -> bool:
        """
        Terminal write of the final score and summary.

        The summary may be None here and filled by a later call.

        On a session that is already completed this only fills fields that
        are still unset; a recorded score or summary is never replaced.

        Returns:
            True if anything changed
        """
        with self._lock:
            if not self.session:
                logger.debug("complete_interview ignored: no session")
                return False

            session = self.session
            if session.status != SessionStatus.COMPLETED:
                session.status = SessionStatus.COMPLETED
                session.end_time = datetime.now()
                session.total_score = total_score
                session.summary = summary
                self.timer_running = False
                logger.info(f"Completed {session.session_id} with score {total_score}")
                return True

            changed = False
            if session.total_score is None:
                session.total_score = total_score
                changed = True
            if session.summary is None:
                session.summary = summary
                changed = True
            if session.end_time is None:
                session.end_time = datetime.now()
                changed = True
            if changed:
                logger.info(f"Finalized {session.session_id} with score {session.total_score}")
            return changed

    # ========================================
    # Queries
    # ========================================

    @property
    def status(self) -> Optional[SessionStatus]:
        return self.session.status if self.session else None

    @property
    def current_question(self) -> Optional[Question]:
        return self.session.current_question if self.session else None

    def restore(self, session: Optional[InterviewSession], current_answer: str = ""):
        """Load a previously saved session as the active one."""
        with self._lock:
            self.session = session
            self.current_answer = current_answer
            self.timer_running = session is not None and session.status == SessionStatus.IN_PROGRESS
