import logging
import math
from collections import defaultdict
from datetime import date, datetime, time
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.models import Quiz, Question, QuizAnswer, QuizSubmission, SubmissionStatus

logger = logging.getLogger(__name__)

# (label, inclusive lower bound), checked top down
SCORE_BUCKETS = (
    ("excellent", 90),
    ("good", 70),
    ("fair", 50),
    ("poor", 0),
)

RECENT_SUBMISSIONS_LIMIT = 10


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_percentage(score: Optional[int], total_points: Optional[int]) -> float:
    """Unrounded percentage; 0 for quizzes worth zero points."""
    if not total_points or total_points <= 0:
        return 0.0
    return (score or 0) / total_points * 100


def bucket_for(percentage: float) -> str:
    for label, lower in SCORE_BUCKETS:
        if percentage >= lower:
            return label
    return "poor"


def submitter_key(submission: QuizSubmission) -> Optional[str]:
    """User id when known, else the email. Takers with neither share the None key."""
    if submission.user_id:
        return str(submission.user_id)
    if submission.submitted_by_email:
        return submission.submitted_by_email.lower()
    return None


def date_bounds(
    start: Optional[date], end: Optional[date]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    start_at = datetime.combine(start, time.min) if start else None
    end_at = datetime.combine(end, time.max) if end else None
    return start_at, end_at


def summarize_submissions(submissions: Sequence[QuizSubmission]) -> dict:
    """
    Score statistics over graded submissions. Empty input gives zeros and
    a null last_attempt.
    """
    percentages = [score_percentage(s.score, s.total_points) for s in submissions]

    distribution = {label: 0 for label, _ in SCORE_BUCKETS}
    for pct in percentages:
        distribution[bucket_for(pct)] += 1

    times = [s.time_taken for s in submissions if s.time_taken]
    submitted = [s.submitted_at for s in submissions if s.submitted_at]

    return {
        "total_attempts": len(submissions),
        "unique_users": len({submitter_key(s) for s in submissions}),
        "avg_score": round_half_up(sum(percentages) / len(percentages)) if percentages else 0,
        "highest_score": round_half_up(max(percentages)) if percentages else 0,
        "lowest_score": round_half_up(min(percentages)) if percentages else 0,
        "score_distribution": distribution,
        "avg_time_taken": round_half_up(sum(times) / len(times)) if times else 0,
        "last_attempt": max(submitted) if submitted else None,
    }


async def load_graded_submissions(
    quiz_ids: List[UUID],
    db: AsyncSession,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[QuizSubmission]:
    if not quiz_ids:
        return []

    query = select(QuizSubmission).where(
        QuizSubmission.quiz_id.in_(quiz_ids),
        QuizSubmission.status == SubmissionStatus.GRADED,
    )

    start_at, end_at = date_bounds(start, end)
    if start_at:
        query = query.where(QuizSubmission.submitted_at >= start_at)
    if end_at:
        query = query.where(QuizSubmission.submitted_at <= end_at)

    result = await db.execute(query.order_by(QuizSubmission.submitted_at.desc()))
    return list(result.scalars().all())


async def question_statistics(
    quiz: Quiz,
    db: AsyncSession,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[dict]:
    query = (
        select(
            QuizAnswer.question_id,
            func.count(QuizAnswer.id),
            func.sum(case((QuizAnswer.is_correct.is_(True), 1), else_=0)),
        )
        .join(QuizSubmission, QuizSubmission.id == QuizAnswer.submission_id)
        .where(
            QuizSubmission.quiz_id == quiz.id,
            QuizSubmission.status == SubmissionStatus.GRADED,
        )
        .group_by(QuizAnswer.question_id)
    )

    start_at, end_at = date_bounds(start, end)
    if start_at:
        query = query.where(QuizSubmission.submitted_at >= start_at)
    if end_at:
        query = query.where(QuizSubmission.submitted_at <= end_at)

    counts = {row[0]: (row[1], row[2] or 0) for row in (await db.execute(query)).all()}

    questions = await db.execute(
        select(Question)
        .where(Question.quiz_id == quiz.id)
        .order_by(Question.position)
    )

    stats = []
    for q in questions.scalars().all():
        answered, correct = counts.get(q.id, (0, 0))
        stats.append({
            "question_id": q.id,
            "question_text": q.question_text,
            "question_type": q.question_type,
            "points": q.points or 1,
            "answered": answered,
            "correct": correct,
            "correct_rate": round_half_up(correct / answered * 100) if answered else 0,
        })
    return stats


def _recent_entry(s: QuizSubmission) -> dict:
    return {
        "submission_id": s.id,
        "submitted_by_name": s.submitted_by_name,
        "submitted_by_email": s.submitted_by_email,
        "score": s.score,
        "total_points": s.total_points,
        "score_percentage": round_half_up(score_percentage(s.score, s.total_points)),
        "time_taken": s.time_taken,
        "submitted_at": s.submitted_at,
    }


async def analyze_quiz(
    quiz: Quiz,
    db: AsyncSession,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> dict:
    """Per-quiz dashboard: score statistics, recent attempts and question stats."""
    submissions = await load_graded_submissions([quiz.id], db, start, end)
    summary = summarize_submissions(submissions)

    by_day: Dict[str, int] = defaultdict(int)
    for s in submissions:
        if s.submitted_at:
            by_day[s.submitted_at.date().isoformat()] += 1

    return {
        "quiz_id": quiz.id,
        "title": quiz.title,
        "total_questions": quiz.total_questions,
        **summary,
        "recent_submissions": [_recent_entry(s) for s in submissions[:RECENT_SUBMISSIONS_LIMIT]],
        "submissions_by_day": dict(sorted(by_day.items())),
        "questions": await question_statistics(quiz, db, start, end),
    }


def rank_quizzes(details: List[dict]) -> List[dict]:
    """Most attempted first, then best average, then title; ranks are 1-based."""
    ordered = sorted(
        details,
        key=lambda d: (-d["total_attempts"], -d["avg_score"], d["title"].casefold(), d["title"]),
    )
    return [{**d, "rank": i} for i, d in enumerate(ordered, start=1)]


async def analyze_for_creator(
    creator_id: UUID,
    db: AsyncSession,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> dict:
    """
    Rollup over every quiz the creator owns.

    overall_avg_score is the mean of the per-quiz averages (quizzes without
    attempts count as 0). overall_weighted_avg_score is the mean over every
    graded submission; the two differ when quizzes have unequal attempt counts.
    """
    result = await db.execute(
        select(Quiz)
        .where(Quiz.creator_id == creator_id)
        .order_by(Quiz.created_at.desc())
    )
    quizzes = result.scalars().all()

    submissions = await load_graded_submissions([q.id for q in quizzes], db, start, end)
    by_quiz: Dict[UUID, List[QuizSubmission]] = defaultdict(list)
    for s in submissions:
        by_quiz[s.quiz_id].append(s)

    details = []
    for quiz in quizzes:
        summary = summarize_submissions(by_quiz.get(quiz.id, []))
        details.append({
            "quiz_id": quiz.id,
            "title": quiz.title,
            "slug": quiz.slug,
            "category": quiz.category,
            "difficulty": quiz.difficulty,
            "visibility": quiz.visibility,
            "is_published": quiz.is_published,
            "total_questions": quiz.total_questions,
            "created_at": quiz.created_at,
            **summary,
        })

    percentages = [score_percentage(s.score, s.total_points) for s in submissions]

    logger.info(
        "Creator analytics for %s: %s quizzes, %s graded submissions",
        creator_id, len(quizzes), len(submissions),
    )

    return {
        "total_quizzes": len(quizzes),
        "published_quizzes": sum(1 for q in quizzes if q.is_published),
        "total_attempts": sum(d["total_attempts"] for d in details),
        "total_unique_users": sum(d["unique_users"] for d in details),
        "overall_avg_score": (
            round_half_up(sum(d["avg_score"] for d in details) / len(details)) if details else 0
        ),
        "overall_weighted_avg_score": (
            round_half_up(sum(percentages) / len(percentages)) if percentages else 0
        ),
        "quizzes": rank_quizzes(details),
    }
