from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.database import get_db
from quizapp.models import QuizSubmission, User
from quizapp.auth.dependencies import get_current_user
from quizapp.auth.quiz_access import ensure_quiz_owner, get_quiz_or_404
from quizapp.helpers.errors import NotFound
from quizapp.helpers.submission_aggregator import finalize
from quizapp.helpers.submission_results import load_submission_detail
from quizapp.schemas.quiz_submission import QuizSubmissionRead, QuizSubmissionDetailView, RegradeRequest

router = APIRouter(
    prefix="/creator/quiz-submission",
    tags=["Creator Quiz Submission Endpoints"]
)


@router.get(
    "/list-quiz-submissions/{quiz_id}",
    response_model=List[QuizSubmissionRead],
)
async def list_quiz_submissions_for_creator(
    quiz_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(current_user, quiz)

    result = await db.execute(
        select(QuizSubmission)
        .where(QuizSubmission.quiz_id == quiz.id)
        .order_by(QuizSubmission.submitted_at.desc())
    )
    return result.scalars().all()


@router.get(
    "/submission-detail/{submission_id}",
    response_model=QuizSubmissionDetailView,
)
async def get_submission_detail_for_creator(
    submission_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    submission, view = await load_submission_detail(submission_id, db, include_correct_answers=True)
    ensure_quiz_owner(current_user, submission.quiz, "You are not allowed to view this submission")
    return view


@router.put(
    "/regrade/{submission_id}",
    response_model=QuizSubmissionRead,
)
async def regrade_submission(
    submission_id: UUID,
    body: RegradeRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Re-grades stored answers against the current questions. An optional
    manual_score then overrides the computed score, bounded by total_points.
    """
    submission = await db.get(QuizSubmission, submission_id)
    if not submission:
        raise NotFound("Submission not found")

    quiz = await get_quiz_or_404(submission.quiz_id, db)
    ensure_quiz_owner(current_user, quiz, "You are not allowed to grade this submission")

    return await finalize(submission.id, db, regrade=True, manual_score=body.manual_score)
