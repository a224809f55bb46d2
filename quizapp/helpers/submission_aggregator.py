import logging
import math
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quizapp.models import (
    Quiz, Question, QuizAnswer, QuizSubmission, SubmissionStatus, TERMINAL_STATUSES,
)
from quizapp.helpers.answer_grader import (
    grade, question_points, serialize_answer, deserialize_answer, RawAnswer,
)
from quizapp.helpers.errors import NotFound, AlreadyGraded, InvalidInput

logger = logging.getLogger(__name__)


def compute_time_taken(created_at: Optional[datetime], submitted_at: datetime) -> int:
    """Whole seconds between start and submit, never negative."""
    if created_at is None:
        return 0
    return max(0, math.floor((submitted_at - created_at).total_seconds()))


async def lock_submission(submission_id: UUID, db: AsyncSession) -> QuizSubmission:
    """
    Loads the submission row FOR UPDATE so answer writes and finalization
    of the same submission run one after another.
    """
    result = await db.execute(
        select(QuizSubmission)
        .where(QuizSubmission.id == submission_id)
        .with_for_update()
    )
    submission = result.scalar_one_or_none()
    if not submission:
        raise NotFound("Submission not found")
    return submission


def ensure_in_progress(submission: QuizSubmission):
    if submission.status in TERMINAL_STATUSES:
        logger.warning("Rejected change to %s submission %s", submission.status.value, submission.id)
        raise AlreadyGraded()


async def record_answer(
    submission: QuizSubmission,
    question_id: UUID,
    raw_answer: RawAnswer,
    db: AsyncSession,
) -> QuizAnswer:
    """
    Grades one answer and upserts it on (submission, question).
    Re-answering overwrites the previous row. Flushes but does not commit.
    """
    question = await db.scalar(
        select(Question)
        .options(selectinload(Question.options))
        .where(
            Question.id == question_id,
            Question.quiz_id == submission.quiz_id,
        )
    )
    if not question:
        raise NotFound("Question not found")

    result = grade(question, raw_answer)

    answer = await db.scalar(
        select(QuizAnswer).where(
            QuizAnswer.submission_id == submission.id,
            QuizAnswer.question_id == question.id,
        )
    )

    if answer:
        answer.user_answer = serialize_answer(raw_answer)
        answer.is_correct = result.is_correct
        answer.points_earned = result.points_earned
    else:
        answer = QuizAnswer(
            submission_id=submission.id,
            question_id=question.id,
            user_answer=serialize_answer(raw_answer),
            is_correct=result.is_correct,
            points_earned=result.points_earned,
        )
        db.add(answer)

    await db.flush()
    return answer


async def regrade_answers(submission: QuizSubmission, db: AsyncSession):
    """Re-grades every stored answer against the quiz's current questions."""
    result = await db.execute(
        select(QuizAnswer)
        .options(selectinload(QuizAnswer.question).selectinload(Question.options))
        .where(QuizAnswer.submission_id == submission.id)
    )
    for answer in result.scalars().all():
        graded = grade(answer.question, deserialize_answer(answer.user_answer))
        answer.is_correct = graded.is_correct
        answer.points_earned = graded.points_earned
    await db.flush()


async def finalize(
    submission_id: UUID,
    db: AsyncSession,
    answers: Optional[Iterable] = None,
    status: SubmissionStatus = SubmissionStatus.GRADED,
    regrade: bool = False,
    manual_score: Optional[int] = None,
    now: Optional[datetime] = None,
) -> QuizSubmission:
    """
    Freezes the score of a submission.

    `answers` is an optional final batch of objects with `question_id` and
    `user_answer`; it is upserted on the same transaction before summing.
    Score and total points are recomputed from the full answer set each
    call, so finalizing twice gives the same result. A submission that is
    already terminal keeps its original submitted_at and time_taken.
    `manual_score` replaces the computed score and must lie within
    [0, total_points].
    """
    submission = await lock_submission(submission_id, db)

    quiz = await db.get(Quiz, submission.quiz_id)
    if not quiz:
        raise NotFound("Quiz not found")

    for ans in answers or []:
        await record_answer(submission, ans.question_id, ans.user_answer, db)

    if regrade:
        await regrade_answers(submission, db)

    # answers of questions deleted since do not count
    score = await db.scalar(
        select(func.coalesce(func.sum(QuizAnswer.points_earned), 0))
        .join(Question, Question.id == QuizAnswer.question_id)
        .where(
            QuizAnswer.submission_id == submission.id,
            Question.quiz_id == quiz.id,
        )
    )

    result = await db.execute(
        select(Question).where(Question.quiz_id == quiz.id)
    )
    total_points = sum(question_points(q) for q in result.scalars().all())

    if manual_score is not None:
        if not 0 <= manual_score <= total_points:
            logger.warning("Manual score %s out of range for submission %s", manual_score, submission.id)
            raise InvalidInput("manual_score must be between 0 and total_points")
        score = manual_score

    if submission.status in TERMINAL_STATUSES and submission.submitted_at:
        submitted_at = submission.submitted_at
    else:
        submitted_at = now or datetime.utcnow()

    submission.score = min(int(score or 0), total_points)
    submission.total_points = total_points
    submission.time_taken = compute_time_taken(submission.created_at, submitted_at)
    submission.submitted_at = submitted_at
    submission.status = status

    await db.commit()
    await db.refresh(submission)

    logger.info(
        "Finalized submission %s for quiz %s: %s/%s in %ss",
        submission.id, quiz.id, submission.score, submission.total_points, submission.time_taken,
    )
    return submission
