import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.models import Quiz, QuizInvitation, QuizVisibility, InvitationStatus, User
from quizapp.helpers.errors import NotFound, Forbidden


def is_owner(principal: Optional[User], quiz: Quiz) -> bool:
    """True when the principal created the quiz. Anonymous principals own nothing."""
    return principal is not None and quiz.creator_id == principal.id


def ensure_quiz_owner(principal: Optional[User], quiz: Quiz, detail: str = "You are not the creator of this quiz"):
    if not is_owner(principal, quiz):
        raise Forbidden(detail)


async def get_quiz_or_404(quiz_id: uuid.UUID, db: AsyncSession, *options) -> Quiz:
    result = await db.execute(
        select(Quiz).options(*options).where(Quiz.id == quiz_id)
    )
    quiz = result.scalar_one_or_none()
    if not quiz:
        raise NotFound("Quiz not found")
    return quiz


def looks_like_quiz_id(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


async def get_quiz_by_slug_or_id(slug: str, db: AsyncSession, *options) -> Quiz:
    """
    Resolves a quiz url segment. Anything shaped like a UUID is looked up
    by id only; slugs are never allowed to take that shape.
    """
    if looks_like_quiz_id(slug):
        return await get_quiz_or_404(uuid.UUID(slug), db, *options)

    result = await db.execute(
        select(Quiz).options(*options).where(Quiz.slug == slug)
    )
    quiz = result.scalar_one_or_none()
    if not quiz:
        raise NotFound("Quiz not found")
    return quiz


async def has_invitation(quiz: Quiz, user: Optional[User], db: AsyncSession) -> bool:
    if user is None or not user.email:
        return False
    invitation = await db.scalar(
        select(QuizInvitation).where(
            QuizInvitation.quiz_id == quiz.id,
            QuizInvitation.invitee_email == user.email.lower(),
            QuizInvitation.status != InvitationStatus.DECLINED,
        )
    )
    return invitation is not None


def ensure_released(quiz: Quiz):
    if quiz.release_at and quiz.release_at > datetime.utcnow():
        raise Forbidden("This quiz has not been released yet")


async def ensure_quiz_accessible(quiz: Quiz, user: Optional[User], db: AsyncSession):
    """
    Read/take access for non-owners: the quiz must be published, released,
    and either public or addressed to the caller by an invitation.
    Owners always pass.
    """
    if is_owner(user, quiz):
        return

    if not quiz.is_published:
        raise NotFound("Quiz not found")

    ensure_released(quiz)

    if quiz.visibility == QuizVisibility.PRIVATE and not await has_invitation(quiz, user, db):
        raise Forbidden("This quiz is private")
