from fractions import Fraction
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.models import QuizSubmission, SubmissionStatus
from quizapp.helpers.quiz_analytics import round_half_up, score_percentage

DEFAULT_LIMIT = 100


def display_name(submission: QuizSubmission) -> str:
    if submission.submitted_by_name:
        return submission.submitted_by_name
    if submission.submitted_by_email:
        return submission.submitted_by_email
    if submission.user_id:
        return f"User {str(submission.user_id)[:8]}"
    return "Anonymous"


def mask_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return email.split("@")[0] + "***"


def _score_fraction(submission: QuizSubmission) -> Fraction:
    if not submission.total_points or submission.total_points <= 0:
        return Fraction(0)
    return Fraction(submission.score or 0, submission.total_points)


def rank_submissions(submissions: List[QuizSubmission]) -> List[dict]:
    """
    Sequential 1-based ranks by score percentage, highest first. Ties keep
    the order they came in (sorted() is stable).
    """
    ordered = sorted(submissions, key=_score_fraction, reverse=True)
    return [
        {
            "rank": position,
            "submission_id": s.id,
            "quiz_id": s.quiz_id,
            "user_id": s.user_id,
            "display_name": display_name(s),
            "submitted_by_name": s.submitted_by_name,
            "submitted_by_email": s.submitted_by_email,
            "score": s.score,
            "total_points": s.total_points,
            "score_percentage": round_half_up(score_percentage(s.score, s.total_points)),
            "time_taken": s.time_taken,
            "submitted_at": s.submitted_at,
        }
        for position, s in enumerate(ordered, start=1)
    ]


async def rank(quiz_id: UUID, db: AsyncSession, limit: Optional[int] = DEFAULT_LIMIT) -> List[dict]:
    """
    Leaderboard for one quiz, read fresh on every call.

    Rows are read earliest submission first, so equal percentages rank
    the earlier attempt higher. The whole graded set is ranked before
    the list is cut to `limit`.
    """
    result = await db.execute(
        select(QuizSubmission)
        .where(
            QuizSubmission.quiz_id == quiz_id,
            QuizSubmission.status == SubmissionStatus.GRADED,
        )
        .order_by(QuizSubmission.submitted_at.asc(), QuizSubmission.id.asc())
    )
    entries = rank_submissions(list(result.scalars().all()))
    if limit is not None:
        entries = entries[:limit]
    return entries
