from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quizapp.database import get_db
from quizapp.models import Quiz, Question, QuizVisibility, User
from quizapp.auth.dependencies import get_optional_user
from quizapp.auth.quiz_access import ensure_quiz_accessible, ensure_released, get_quiz_by_slug_or_id, is_owner
from quizapp.helpers.errors import Forbidden, NotFound
from quizapp.helpers.leaderboard_ranker import rank, mask_email, DEFAULT_LIMIT
from quizapp.helpers.question_builder import question_view, quiz_detail_view
from quizapp.schemas.leaderboard import LeaderboardEntry
from quizapp.schemas.quiz import QuizLite, QuizDetailView, QuestionView

router = APIRouter(
    prefix="/quiz",
    tags=["Public Quiz Endpoints"]
)


@router.get("/public-quizzes", response_model=List[QuizLite])
async def list_public_quizzes(
    category: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    query = select(Quiz).where(
        Quiz.visibility == QuizVisibility.PUBLIC,
        Quiz.is_published.is_(True),
    )
    if category:
        query = query.where(Quiz.category == category)

    result = await db.execute(query.order_by(Quiz.created_at.desc()))
    return result.scalars().all()


@router.get(
    "/{slug}",
    response_model=QuizDetailView,
    response_model_exclude_none=True,
)
async def get_quiz(
    slug: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_by_slug_or_id(
        slug, db,
        selectinload(Quiz.questions).selectinload(Question.options),
    )
    await ensure_quiz_accessible(quiz, current_user, db)

    # correct answers only ever go back to the creator
    return quiz_detail_view(quiz, include_answers=is_owner(current_user, quiz))


@router.get(
    "/{slug}/questions/{question_id}",
    response_model=QuestionView,
    response_model_exclude_none=True,
)
async def get_question(
    slug: str,
    question_id: UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_by_slug_or_id(slug, db)
    await ensure_quiz_accessible(quiz, current_user, db)

    question = await db.scalar(
        select(Question)
        .options(selectinload(Question.options))
        .where(Question.id == question_id, Question.quiz_id == quiz.id)
    )
    if not question:
        raise NotFound("Question not found")

    return question_view(question, include_answers=is_owner(current_user, quiz))


@router.get("/{slug}/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    slug: str,
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=DEFAULT_LIMIT),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_by_slug_or_id(slug, db)

    owner = is_owner(current_user, quiz)
    if not owner:
        if quiz.visibility != QuizVisibility.PUBLIC or not quiz.is_published:
            raise Forbidden("This leaderboard is not public")
        ensure_released(quiz)

    entries = await rank(quiz.id, db, limit)

    board = []
    for entry in entries:
        name = entry["display_name"]
        email = entry["submitted_by_email"]
        if not owner:
            # hide addresses from the public
            if name == email:
                name = mask_email(email)
            email = mask_email(email)
        board.append(
            LeaderboardEntry(
                rank=entry["rank"],
                submission_id=entry["submission_id"],
                display_name=name,
                submitted_by_email=email,
                score=entry["score"],
                total_points=entry["total_points"],
                score_percentage=entry["score_percentage"],
                time_taken=entry["time_taken"],
                submitted_at=entry["submitted_at"],
            )
        )
    return board
