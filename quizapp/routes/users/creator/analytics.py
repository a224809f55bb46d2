from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.database import get_db
from quizapp.models import User
from quizapp.auth.dependencies import get_current_user
from quizapp.auth.quiz_access import ensure_quiz_owner, get_quiz_or_404
from quizapp.helpers.errors import InvalidInput
from quizapp.helpers.quiz_analytics import analyze_quiz, analyze_for_creator
from quizapp.schemas.analytics import QuizAnalytics, CreatorAnalytics

router = APIRouter(
    prefix="/creator/analytics",
    tags=["Creator Analytics Endpoints"]
)


def check_range(start: Optional[date], end: Optional[date]):
    if start and end and start > end:
        raise InvalidInput("start must not be after end")


@router.get("/quiz/{quiz_id}", response_model=QuizAnalytics)
async def get_quiz_analytics(
    quiz_id: UUID,
    start: Optional[date] = Query(None, description="First day included (YYYY-MM-DD)"),
    end: Optional[date] = Query(None, description="Last day included (YYYY-MM-DD)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_range(start, end)

    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(current_user, quiz, "You can only view analytics of your own quizzes")

    return await analyze_quiz(quiz, db, start, end)


@router.get("/overview", response_model=CreatorAnalytics)
async def get_creator_analytics(
    start: Optional[date] = Query(None, description="First day included (YYYY-MM-DD)"),
    end: Optional[date] = Query(None, description="Last day included (YYYY-MM-DD)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_range(start, end)
    return await analyze_for_creator(current_user.id, db, start, end)
