from datetime import datetime, timedelta

import pytest

from interview.scoring import ScoreAggregator
from models.schemas import CompletedInterview, ReviewSort, ScoreBand

from conftest import make_questions


def scored(scores):
    questions = make_questions()
    for question, score in zip(questions, scores):
        if score is not None:
            question.answer = "answer"
            question.time_spent = 10
            question.score = score
    return questions


def test_total_counts_unanswered_as_zero():
    assert ScoreAggregator.total_score(scored([100, 90, None, 50, None, 0])) == 240
    assert ScoreAggregator.total_score(make_questions()) == 0
    assert ScoreAggregator.total_score(scored([100] * 6)) == 600


@pytest.mark.parametrize("total,passed", [(359, False), (360, True), (600, True), (0, False)])
def test_pass_threshold(total, passed):
    assert ScoreAggregator.is_passed(total) is passed


@pytest.mark.parametrize("total,tier", [
    (600, "Excellent"),
    (480, "Excellent"),
    (474, "Good"),
    (360, "Good"),
    (240, "Average"),
    (234, "Needs Improvement"),
    (0, "Needs Improvement"),
])
def test_performance_tiers(total, tier):
    assert ScoreAggregator.performance_tier(ScoreAggregator.percentage(total)) == tier


def test_build_report():
    report = ScoreAggregator.build_report(scored([80, 70, 60, None, 90, 100]))
    assert report.total_score == 400
    assert report.max_score == 600
    assert report.percentage == 67
    assert report.passed is True
    assert report.performance == "Good"
    assert [b.answered for b in report.breakdown] == [True, True, True, False, True, True]
    assert report.breakdown[3].score == 0


def test_build_report_uses_recorded_total():
    report = ScoreAggregator.build_report(scored([10] * 6), total_score=300)
    assert report.total_score == 300
    assert report.passed is False


def test_rank_interviews():
    now = datetime.now()

    def entry(session_id, total, minutes_ago):
        return CompletedInterview(
            session_id=session_id,
            candidate_id="candidate-1",
            questions=make_questions(),
            total_score=total,
            summary="done",
            end_time=now - timedelta(minutes=minutes_ago),
        )

    ranked = ScoreAggregator.rank_interviews([
        entry("a", 300, 10),
        entry("b", 500, 5),
        entry("c", 300, 1),
    ])
    assert [r.session_id for r in ranked] == ["b", "c", "a"]

    by_date = ScoreAggregator.rank_interviews(ranked, sort_by=ReviewSort.DATE)
    assert [r.session_id for r in by_date] == ["c", "b", "a"]

    names = {"a": "zoe", "b": "Mia", "c": "adam"}
    by_name = ScoreAggregator.rank_interviews(
        ranked, sort_by=ReviewSort.NAME, name_of=lambda r: names[r.session_id]
    )
    assert [r.session_id for r in by_name] == ["c", "b", "a"]


@pytest.mark.parametrize("total,band", [
    (600, ScoreBand.HIGH),
    (480, ScoreBand.HIGH),
    (474, ScoreBand.MEDIUM),
    (360, ScoreBand.MEDIUM),
    (354, ScoreBand.LOW),
    (0, ScoreBand.LOW),
])
def test_score_band(total, band):
    assert ScoreAggregator.score_band(total) is band
