from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from quizapp.database import get_db
from quizapp.auth.dependencies import get_current_user
from quizapp.auth.quiz_access import ensure_quiz_owner, get_quiz_or_404
from quizapp.helpers.errors import NotFound, InvalidInput
from quizapp.helpers.question_builder import new_question, validate_question_payload, build_options, question_view
from quizapp.helpers.quiz_state import apply_structural_change
from quizapp.models import Quiz, Question, User
from quizapp.schemas.quiz import QuestionCreate, QuestionUpdate, QuestionView, QuestionReorderRequest, QuizCreateResponse

router = APIRouter(
    prefix="/creator/question",
    tags=["Creator Question Endpoints"]
)


async def get_owned_question(question_id: UUID, current_user: User, db: AsyncSession) -> Question:
    result = await db.execute(
        select(Question)
        .options(
            selectinload(Question.options),
            selectinload(Question.quiz),
        )
        .where(Question.id == question_id)
    )
    question = result.scalar_one_or_none()

    if not question:
        raise NotFound("Question not found")

    ensure_quiz_owner(current_user, question.quiz)
    return question


@router.post(
    "/add-question/{quiz_id}",
    response_model=QuestionView,
    status_code=201,
)
async def add_question(
    quiz_id: UUID,
    question_in: QuestionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(current_user, quiz)

    last_position = await db.scalar(
        select(func.max(Question.position)).where(Question.quiz_id == quiz.id)
    )

    question = new_question(quiz, question_in, (last_position or 0) + 1)
    db.add(question)

    await apply_structural_change(quiz, db)
    await db.commit()

    return question_view(question, include_answers=True)


@router.put(
    "/update-question/{question_id}",
    response_model=QuestionView,
)
async def update_question(
    question_id: UUID,
    question_in: QuestionUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    question = await get_owned_question(question_id, current_user, db)
    validate_question_payload(question_in)

    question.question_text = question_in.question_text
    question.question_type = question_in.question_type
    question.points = question_in.points

    # old options are orphaned and deleted
    build_options(question, question_in)

    await apply_structural_change(question.quiz, db)
    await db.commit()

    return question_view(question, include_answers=True)


@router.delete(
    "/delete-question/{question_id}",
    status_code=204,
)
async def delete_question(
    question_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    question = await get_owned_question(question_id, current_user, db)
    quiz = question.quiz

    await db.delete(question)
    await db.flush()

    # close the gap left in the ordering
    result = await db.execute(
        select(Question)
        .where(Question.quiz_id == quiz.id)
        .order_by(Question.position)
    )
    for position, remaining in enumerate(result.scalars().all(), start=1):
        remaining.position = position

    await apply_structural_change(quiz, db)
    await db.commit()

    return None


@router.put(
    "/reorder/{quiz_id}",
    response_model=QuizCreateResponse,
)
async def reorder_questions(
    quiz_id: UUID,
    body: QuestionReorderRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(current_user, quiz)

    if not body.questions:
        raise InvalidInput("Invalid request body")

    positions = [item.position for item in body.questions]
    if len(set(positions)) != len(positions):
        raise InvalidInput("Question positions must be unique")

    result = await db.execute(
        select(Question).where(Question.quiz_id == quiz.id)
    )
    questions = {q.id: q for q in result.scalars().all()}

    for item in body.questions:
        question = questions.get(item.id)
        if not question:
            raise NotFound("Question not found")
        question.position = item.position

    await apply_structural_change(quiz, db)
    await db.commit()
    await db.refresh(quiz)

    return quiz
