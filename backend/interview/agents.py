"""
Evaluator agents for the interview flow.
Question generation, answer scoring and the final summary all go through
the LLM and fall back to fixed values when it fails, so the interview never
waits on an unhealthy model server.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from llm.client import llm_client
from llm.prompts import Prompts, FALLBACK_QUESTIONS
from models.schemas import (
    CandidateProfile,
    Difficulty,
    DIFFICULTY_PLAN,
    Evaluation,
    MAX_QUESTION_SCORE,
    Question,
    TIME_LIMITS,
)
from utils.config import config

logger = logging.getLogger(__name__)


# Fixed fallback values
FALLBACK_SCORE = 50
FALLBACK_FEEDBACK = "Unable to evaluate answer due to technical issues."
UNPARSED_SCORE = 70
UNPARSED_FEEDBACK = "Answer received and evaluated."


def fallback_questions() -> List[Question]:
    """Fresh copy of the canonical question set."""
    return [Question(**q) for q in FALLBACK_QUESTIONS]


def fallback_summary(total_score: int) -> str:
    return (
        f"Interview completed with a score of {total_score}/600. "
        "Unable to generate detailed summary due to technical issues."
    )


class _AgentBase:
    """Runs blocking LLM calls off the event loop under a deadline."""

    def __init__(self, llm=None, timeout: Optional[float] = None):
        self.llm = llm if llm is not None else llm_client
        self.timeout = timeout if timeout is not None else config.interview.evaluator_timeout

    async def _call(self, fn, *args, **kwargs):
        return await asyncio.wait_for(
            asyncio.to_thread(fn, *args, **kwargs),
            timeout=self.timeout
        )


class QuestionAgent(_AgentBase):
    """
    Generates the six-question set for a candidate.
    """

    async def generate_questions(self, profile: CandidateProfile) -> Tuple[List[Question], bool]:
        """
        Generate questions for the candidate.

        Args:
            profile: The completed candidate profile

        Returns:
            Tuple of (questions, is_fallback)
        """
        prompt = Prompts.generate_questions(
            job_role=config.interview.job_role,
            name=profile.name,
            email=profile.email,
            resume_content=profile.resume_content,
        )

        try:
            result, is_valid = await self._call(
                self.llm.generate_json, prompt, max_tokens=1200, expect="array"
            )
        except Exception as e:
            logger.warning(f"Question generation failed, using fallback set: {e!r}")
            return fallback_questions(), True

        questions = self.normalize_questions(result) if is_valid else None
        if questions is None:
            logger.warning("Question generation returned an unusable set, using fallback set")
            return fallback_questions(), True

        logger.info(f"Generated {len(questions)} questions for {profile.id}")
        return questions, False

    @classmethod
    def normalize_questions(cls, raw: Any) -> Optional[List[Question]]:
        """
        Coerce a generated payload into the fixed 2/2/2 plan.
        Time limits always come from the tier, never from the model.

        Returns:
            Ordered questions, or None if the payload cannot fill the plan
        """
        if not isinstance(raw, list):
            return None

        by_tier: Dict[Difficulty, List[Dict[str, Any]]] = {d: [] for d in Difficulty}
        for item in raw:
            if not isinstance(item, dict):
                continue
            text = str(item.get("question") or "").strip()
            try:
                difficulty = Difficulty(str(item.get("difficulty", "")).strip().capitalize())
            except ValueError:
                continue
            if text:
                by_tier[difficulty].append({**item, "question": text})

        questions = []
        for position, difficulty in enumerate(DIFFICULTY_PLAN, start=1):
            if not by_tier[difficulty]:
                return None
            item = by_tier[difficulty].pop(0)
            questions.append(Question(
                id=str(item.get("id") or f"q{position}"),
                question=item["question"],
                difficulty=difficulty,
                time_limit=TIME_LIMITS[difficulty],
                category=item.get("category"),
            ))

        return questions


class EvaluationAgent(_AgentBase):
    """
    Scores a single answer 0-100 with short feedback.
    """

    async def evaluate_answer(self, question: Question, answer: str, time_spent: int) -> Evaluation:
        prompt = Prompts.evaluate_answer(
            question=question.question,
            answer=answer,
            time_spent=time_spent,
            time_limit=question.time_limit,
        )

        try:
            result, is_valid = await self._call(self.llm.generate_json, prompt, max_tokens=300)
        except Exception as e:
            logger.warning(f"Answer evaluation failed for {question.id}: {e!r}")
            return Evaluation(score=FALLBACK_SCORE, feedback=FALLBACK_FEEDBACK, is_fallback=True)

        if is_valid and isinstance(result, dict):
            evaluation = self.validate_evaluation(result)
            if evaluation is not None:
                return evaluation

        logger.warning(f"Unparseable evaluation for {question.id}, using default score")
        return Evaluation(score=UNPARSED_SCORE, feedback=UNPARSED_FEEDBACK, is_fallback=True)

    @classmethod
    def validate_evaluation(cls, result: Dict[str, Any]) -> Optional[Evaluation]:
        """Clamp the score into range; None when there is no usable score."""
        try:
            score = int(round(float(result["score"])))
        except (KeyError, TypeError, ValueError):
            return None

        feedback = str(result.get("feedback") or UNPARSED_FEEDBACK).strip()
        return Evaluation(score=max(0, min(MAX_QUESTION_SCORE, score)), feedback=feedback)


class SummaryAgent(_AgentBase):

    async def generate_summary(self, questions: List[Question], total_score: int) -> Tuple[str, bool]:
        """Returns (summary, is_fallback)."""
        prompt = Prompts.generate_summary(questions, total_score)

        try:
            summary, is_valid = await self._call(self.llm.generate_text, prompt, max_tokens=400)
        except Exception as e:
            logger.warning(f"Summary generation failed: {e!r}")
            return fallback_summary(total_score), True

        if not is_valid or not summary:
            return fallback_summary(total_score), True
        return summary, False


class Evaluator:
    """
    Single entry point over all evaluator agents.
    """

    def __init__(self, llm=None, timeout: Optional[float] = None):
        self.questioner = QuestionAgent(llm, timeout)
        self.scorer = EvaluationAgent(llm, timeout)
        self.summarizer = SummaryAgent(llm, timeout)

    async def generate_questions(self, profile: CandidateProfile) -> Tuple[List[Question], bool]:
        return await self.questioner.generate_questions(profile)

    async def evaluate_answer(self, question: Question, answer: str, time_spent: int) -> Evaluation:
        return await self.scorer.evaluate_answer(question, answer, time_spent)

    async def generate_summary(self, questions: List[Question], total_score: int) -> Tuple[str, bool]:
        return await self.summarizer.generate_summary(questions, total_score)
