import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.database import get_db
from quizapp.auth.dependencies import get_current_user
from quizapp.auth.quiz_access import ensure_quiz_accessible, get_quiz_by_slug_or_id
from quizapp.helpers.errors import Forbidden, InvalidInput
from quizapp.helpers.invitations import accept_pending_invitation
from quizapp.helpers.submission_aggregator import lock_submission, ensure_in_progress, record_answer, finalize
from quizapp.helpers.submission_results import load_submission_detail
from quizapp.models import QuizSubmission, SubmissionStatus, TERMINAL_STATUSES, User
from quizapp.schemas.quiz_submission import (
    AnswerSubmit, AnswerRecordResponse, QuizSubmitRequest,
    QuizSubmissionRead, QuizSubmissionDetailView,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/taker/quiz-submission",
    tags=["Taker Quiz Submission Endpoints"]
)


def ensure_taker(submission: QuizSubmission, current_user: User):
    if submission.user_id != current_user.id:
        logger.warning("User %s tried to use submission %s", current_user.id, submission.id)
        raise Forbidden("This submission belongs to another user")


@router.post(
    "/start/{slug}",
    response_model=QuizSubmissionRead,
    status_code=201,
)
async def start_quiz(
    slug: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_by_slug_or_id(slug, db)
    await ensure_quiz_accessible(quiz, current_user, db)

    await accept_pending_invitation(quiz, current_user, db)

    submission = QuizSubmission(
        quiz_id=quiz.id,
        user_id=current_user.id,
        status=SubmissionStatus.IN_PROGRESS,
        score=0,
        total_points=0,
        submitted_by_name=current_user.name or current_user.email.split("@")[0],
        submitted_by_email=current_user.email,
    )
    db.add(submission)

    await db.commit()
    await db.refresh(submission)

    logger.info("User %s started quiz %s (submission %s)", current_user.id, quiz.id, submission.id)
    return submission


@router.put(
    "/{submission_id}/answer",
    response_model=AnswerRecordResponse,
)
async def answer_question(
    submission_id: UUID,
    payload: AnswerSubmit,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    submission = await lock_submission(submission_id, db)
    ensure_taker(submission, current_user)
    ensure_in_progress(submission)

    await record_answer(submission, payload.question_id, payload.user_answer, db)
    await db.commit()

    return AnswerRecordResponse(
        submission_id=submission.id,
        question_id=payload.question_id,
    )


@router.post(
    "/{submission_id}/submit",
    response_model=QuizSubmissionRead,
)
async def submit_quiz(
    submission_id: UUID,
    payload: Optional[QuizSubmitRequest] = Body(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Finalizes the submission. The body is optional: without it the answers
    recorded so far are scored; with it the batch is saved first on the
    same transaction.
    """
    answers = payload.answers if payload else None
    if answers is not None and len(answers) == 0:
        raise InvalidInput("Invalid answers format")

    submission = await lock_submission(submission_id, db)
    ensure_taker(submission, current_user)
    ensure_in_progress(submission)

    return await finalize(submission.id, db, answers=answers)


@router.get(
    "/{submission_id}/result",
    response_model=QuizSubmissionDetailView,
)
async def get_my_result(
    submission_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    submission, view = await load_submission_detail(submission_id, db)
    ensure_taker(submission, current_user)
    # correctness stays hidden while answers can still be changed
    if submission.status not in TERMINAL_STATUSES:
        raise Forbidden("Results are available once the quiz is submitted")
    return view


@router.get(
    "/my-submissions",
    response_model=List[QuizSubmissionRead],
)
async def list_my_submissions(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(QuizSubmission)
        .where(QuizSubmission.user_id == current_user.id)
        .order_by(QuizSubmission.created_at.desc())
    )
    return result.scalars().all()
