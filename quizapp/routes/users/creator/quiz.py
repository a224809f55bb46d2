from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from quizapp.database import get_db
from quizapp.auth.dependencies import get_current_user
from quizapp.auth.quiz_access import ensure_quiz_owner, get_quiz_or_404, looks_like_quiz_id
from quizapp.helpers.errors import InvalidInput
from quizapp.helpers.question_builder import add_questions, quiz_detail_view
from quizapp.helpers.quiz_state import sync_question_count
from quizapp.models import Quiz, Question, User
from quizapp.schemas.quiz import QuizCreate, QuizCreateResponse, QuizUpdate, QuizDetailView, QuizLite

router = APIRouter(
    prefix="/creator/quiz",
    tags=["Creator Quiz Endpoints"]
)


async def ensure_slug_available(slug: Optional[str], db: AsyncSession, quiz_id: Optional[UUID] = None):
    if not slug:
        return
    # quiz urls accept ids too, so a slug must never look like one
    if looks_like_quiz_id(slug):
        raise InvalidInput("Slug cannot be a quiz id")
    query = select(Quiz.id).where(Quiz.slug == slug)
    if quiz_id:
        query = query.where(Quiz.id != quiz_id)
    if await db.scalar(query):
        raise InvalidInput("Slug is already taken")


@router.post(
    "/create-quiz",
    response_model=QuizCreateResponse,
    status_code=201
)
async def create_quiz(
    quiz_in: QuizCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await ensure_slug_available(quiz_in.slug, db)

    # --------------------------
    # Create quiz (draft)
    # --------------------------
    quiz = Quiz(
        creator_id=current_user.id,
        title=quiz_in.title,
        description=quiz_in.description,
        category=quiz_in.category,
        difficulty=quiz_in.difficulty,
        time_limit_minutes=quiz_in.time_limit_minutes,
        release_at=quiz_in.release_at,
        visibility=quiz_in.visibility,
        organizer_name=quiz_in.organizer_name,
        slug=quiz_in.slug,
        is_published=False,
        total_questions=0,
    )

    db.add(quiz)
    await db.flush()  # get quiz.id without commit

    # --------------------------
    # Create questions & options
    # --------------------------
    await add_questions(quiz, quiz_in.questions, db)
    await sync_question_count(quiz, db)

    await db.commit()
    await db.refresh(quiz)

    return quiz


@router.put(
    "/update-quiz/{quiz_id}",
    response_model=QuizCreateResponse,
)
async def update_quiz(
    quiz_id: UUID,
    quiz_in: QuizUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(current_user, quiz)

    changes = quiz_in.model_dump(exclude_unset=True)
    for required in ("title", "difficulty", "visibility"):
        if required in changes and changes[required] is None:
            raise InvalidInput(f"{required} cannot be empty")
    if "slug" in changes:
        await ensure_slug_available(changes["slug"], db, quiz.id)

    # details only; questions change through the question endpoints
    for field, value in changes.items():
        setattr(quiz, field, value)

    await db.commit()
    await db.refresh(quiz)

    return quiz


@router.post(
    "/publish/{quiz_id}",
    response_model=QuizCreateResponse,
)
async def publish_quiz(
    quiz_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(current_user, quiz)

    if await sync_question_count(quiz, db) == 0:
        raise InvalidInput("Cannot publish a quiz without questions")

    quiz.is_published = True
    await db.commit()
    await db.refresh(quiz)

    return quiz


@router.post(
    "/unpublish/{quiz_id}",
    response_model=QuizCreateResponse,
)
async def unpublish_quiz(
    quiz_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(current_user, quiz)

    quiz.is_published = False
    await db.commit()
    await db.refresh(quiz)

    return quiz


@router.delete(
    "/delete-quiz/{quiz_id}",
    status_code=204
)
async def delete_quiz(
    quiz_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(current_user, quiz)

    # questions, options, submissions, answers and invitations cascade
    await db.delete(quiz)
    await db.commit()

    return None


@router.get(
    "/my-quizzes",
    response_model=List[QuizLite],
)
async def list_my_quizzes(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Quiz)
        .where(Quiz.creator_id == current_user.id)
        .order_by(Quiz.created_at.desc())
    )
    return result.scalars().all()


@router.get(
    "/quiz-details/{quiz_id}",
    response_model=QuizDetailView,
)
async def get_quiz_details_creator(
    quiz_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(
        quiz_id, db,
        selectinload(Quiz.questions).selectinload(Question.options),
    )
    ensure_quiz_owner(current_user, quiz)

    # creator view keeps is_correct
    return quiz_detail_view(quiz, include_answers=True)
