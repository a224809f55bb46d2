from datetime import date, datetime
from types import SimpleNamespace

import pytest

from quizapp.helpers.quiz_analytics import (
    analyze_for_creator, analyze_quiz, bucket_for, rank_quizzes, round_half_up,
    score_percentage, summarize_submissions,
)
from quizapp.models import QuestionType, SubmissionStatus

GRADED = SubmissionStatus.GRADED
MC = QuestionType.MULTIPLE_CHOICE


def row(score, total, user_id=None, email=None, time_taken=0, submitted_at=None):
    return SimpleNamespace(
        score=score, total_points=total, user_id=user_id, submitted_by_email=email,
        time_taken=time_taken, submitted_at=submitted_at,
    )


def test_half_up_rounding():
    assert round_half_up(82.5) == 83
    assert round_half_up(83.333) == 83
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3


@pytest.mark.parametrize("pct, label", [
    (100, "excellent"), (90, "excellent"), (89.99, "good"), (70, "good"),
    (69.5, "fair"), (50, "fair"), (49.9, "poor"), (0, "poor"),
])
def test_bucket_boundaries(pct, label):
    assert bucket_for(pct) == label


def test_zero_total_points_counts_as_zero_percent():
    assert score_percentage(0, 0) == 0
    assert score_percentage(5, None) == 0


def test_empty_summary():
    summary = summarize_submissions([])
    assert summary["total_attempts"] == 0
    assert summary["avg_score"] == 0
    assert summary["highest_score"] == 0
    assert summary["lowest_score"] == 0
    assert summary["last_attempt"] is None
    assert sum(summary["score_distribution"].values()) == 0


def test_three_attempts_average_to_83():
    summary = summarize_submissions([row(10, 10, "u1"), row(10, 10, "u2"), row(5, 10, "u3")])
    assert summary["avg_score"] == 83
    assert summary["highest_score"] == 100
    assert summary["lowest_score"] == 50
    assert summary["score_distribution"] == {"excellent": 2, "good": 0, "fair": 1, "poor": 0}


def test_distribution_partitions_every_attempt():
    rows = [row(s, 20) for s in (0, 3, 10, 13, 14, 17, 18, 20)]
    summary = summarize_submissions(rows)
    assert sum(summary["score_distribution"].values()) == summary["total_attempts"] == 8


def test_bucket_uses_unrounded_percentage():
    # 89.6% would round to 90 but stays "good"
    summary = summarize_submissions([row(896, 1000)])
    assert summary["avg_score"] == 90
    assert summary["score_distribution"]["good"] == 1


def test_unique_users_by_id_then_email():
    rows = [
        row(1, 1, user_id="u1"),
        row(1, 1, user_id="u1"),
        row(1, 1, email="Guest@Example.com"),
        row(1, 1, email="guest@example.com"),
        row(1, 1),
        row(1, 1),
    ]
    summary = summarize_submissions(rows)
    assert summary["total_attempts"] == 6
    assert summary["unique_users"] == 3


def test_rank_quizzes_orders_by_attempts_then_average_then_title():
    ranked = rank_quizzes([
        {"title": "beta", "total_attempts": 2, "avg_score": 50},
        {"title": "Alpha", "total_attempts": 2, "avg_score": 50},
        {"title": "Gamma", "total_attempts": 2, "avg_score": 80},
        {"title": "Delta", "total_attempts": 5, "avg_score": 10},
    ])
    assert [q["title"] for q in ranked] == ["Delta", "Gamma", "Alpha", "beta"]
    assert [q["rank"] for q in ranked] == [1, 2, 3, 4]


@pytest.fixture
async def creator(db, make_user):
    return await make_user(db, name="Creator", email="creator@example.com")


async def test_analyze_quiz_without_submissions(db, creator, make_quiz):
    quiz = await make_quiz(db, creator, [(MC, 10, [("a", True), ("b", False)])])

    stats = await analyze_quiz(quiz, db)

    assert stats["total_attempts"] == 0
    assert stats["avg_score"] == 0
    assert stats["last_attempt"] is None
    assert stats["recent_submissions"] == []
    assert stats["questions"][0]["answered"] == 0


async def test_analyze_quiz_ignores_unfinished_and_filters_by_date(db, creator, make_user, make_quiz, make_submission):
    taker = await make_user(db, name="Taker", email="taker@example.com")
    quiz = await make_quiz(db, creator, [(MC, 10, [("a", True), ("b", False)])])

    await make_submission(db, quiz, taker, status=GRADED, score=10, total_points=10,
                          submitted_at=datetime(2024, 3, 1, 9, 0))
    await make_submission(db, quiz, taker, status=GRADED, score=5, total_points=10,
                          submitted_at=datetime(2024, 3, 2, 23, 59))
    await make_submission(db, quiz, taker, status=GRADED, score=0, total_points=10,
                          submitted_at=datetime(2024, 3, 5, 12, 0))
    await make_submission(db, quiz, taker)

    everything = await analyze_quiz(quiz, db)
    assert everything["total_attempts"] == 3
    assert everything["unique_users"] == 1
    assert everything["avg_score"] == 50
    assert everything["last_attempt"] == datetime(2024, 3, 5, 12, 0)
    assert everything["submissions_by_day"] == {"2024-03-01": 1, "2024-03-02": 1, "2024-03-05": 1}

    window = await analyze_quiz(quiz, db, start=date(2024, 3, 1), end=date(2024, 3, 2))
    assert window["total_attempts"] == 2
    assert window["avg_score"] == 75


async def test_creator_rollup_average_of_averages(db, creator, make_quiz, make_submission):
    busy = await make_quiz(db, creator, [(MC, 10, [("a", True), ("b", False)])], title="Busy")
    quiet = await make_quiz(db, creator, [(MC, 10, [("a", True), ("b", False)])], title="Quiet")
    await make_quiz(db, creator, [], title="Draft", is_published=False)

    for score in (10, 10, 10):
        await make_submission(db, busy, status=GRADED, score=score, total_points=10,
                              submitted_at=datetime(2024, 1, 1))
    await make_submission(db, quiet, status=GRADED, score=0, total_points=10,
                          submitted_at=datetime(2024, 1, 1))

    overview = await analyze_for_creator(creator.id, db)

    assert overview["total_quizzes"] == 3
    assert overview["published_quizzes"] == 2
    assert overview["total_attempts"] == 4
    # (100 + 0 + 0) / 3, the draft without attempts included
    assert overview["overall_avg_score"] == 33
    # 300 / 4 over every submission
    assert overview["overall_weighted_avg_score"] == 75
    assert [q["title"] for q in overview["quizzes"]] == ["Busy", "Quiet", "Draft"]


async def test_creator_without_quizzes(db, creator):
    overview = await analyze_for_creator(creator.id, db)
    assert overview["total_quizzes"] == 0
    assert overview["overall_avg_score"] == 0
    assert overview["quizzes"] == []
