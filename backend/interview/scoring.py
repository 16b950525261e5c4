"""
Score aggregation for completed interviews.
Shared by the live completion path and read-only reports.
"""
from typing import Callable, Iterable, List, Optional

from models.schemas import (
    CompletedInterview,
    MAX_QUESTION_SCORE,
    Question,
    QuestionScore,
    QUESTION_COUNT,
    ReviewSort,
    ScoreBand,
    ScoreReport,
)


class ScoreAggregator:
    """
    Derives totals, pass/fail and performance tier from question results.
    """

    MAX_SCORE = QUESTION_COUNT * MAX_QUESTION_SCORE  # 600
    PASS_SCORE = 360  # 60%

    # Percentage floor -> tier, checked top down
    PERFORMANCE_TIERS = [
        (80, "Excellent"),
        (60, "Good"),
        (40, "Average"),
        (0, "Needs Improvement"),
    ]

    @classmethod
    def total_score(cls, questions: Iterable[Question]) -> int:
        """Sum of question scores, unanswered counting as 0."""
        return sum(q.score or 0 for q in questions)

    @classmethod
    def is_passed(cls, total_score: int) -> bool:
        return total_score >= cls.PASS_SCORE

    @classmethod
    def percentage(cls, total_score: int) -> int:
        return round(total_score / cls.MAX_SCORE * 100)

    @classmethod
    def performance_tier(cls, percentage: int) -> str:
        for floor, label in cls.PERFORMANCE_TIERS:
            if percentage >= floor:
                return label
        return cls.PERFORMANCE_TIERS[-1][1]

    @classmethod
    def build_report(cls, questions: List[Question], total_score: Optional[int] = None) -> ScoreReport:
        """
        Full score report for a set of questions.

        Args:
            questions: The session's questions
            total_score: Recorded total; recomputed from the questions when None

        Returns:
            ScoreReport with per-question breakdown
        """
        total = cls.total_score(questions) if total_score is None else total_score
        pct = cls.percentage(total)

        return ScoreReport(
            total_score=total,
            max_score=cls.MAX_SCORE,
            percentage=pct,
            passed=cls.is_passed(total),
            performance=cls.performance_tier(pct),
            breakdown=[
                QuestionScore(
                    question_id=q.id,
                    difficulty=q.difficulty,
                    score=q.score or 0,
                    time_spent=q.time_spent,
                    answered=q.is_answered,
                )
                for q in questions
            ],
        )

    @classmethod
    def score_band(cls, total_score: int) -> ScoreBand:
        pct = cls.percentage(total_score)
        if pct >= 80:
            return ScoreBand.HIGH
        if pct >= 60:
            return ScoreBand.MEDIUM
        return ScoreBand.LOW

    @classmethod
    def rank_interviews(
        cls,
        interviews: Iterable[CompletedInterview],
        sort_by: ReviewSort = ReviewSort.SCORE,
        name_of: Optional[Callable[[CompletedInterview], Optional[str]]] = None,
    ) -> List[CompletedInterview]:
        """
        Order completed interviews for operator review.

        Args:
            interviews: Entries from the completed log
            sort_by: score (best first, newest first on ties), date (newest
                first) or name (A-Z, needs name_of)
            name_of: Candidate name lookup for an entry

        Returns:
            A new sorted list
        """
        if sort_by == ReviewSort.DATE:
            return sorted(interviews, key=lambda i: i.end_time, reverse=True)
        if sort_by == ReviewSort.NAME and name_of is not None:
            return sorted(interviews, key=lambda i: (name_of(i) or "").lower())
        return sorted(
            interviews,
            key=lambda i: (i.total_score, i.end_time),
            reverse=True,
        )
