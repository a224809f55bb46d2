from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.database import get_db
from quizapp.models import QuizInvitation, User
from quizapp.auth.dependencies import get_current_user
from quizapp.auth.quiz_access import ensure_quiz_owner, get_quiz_or_404
from quizapp.helpers.invitations import invite
from quizapp.schemas.invitation import InvitationCreate, InvitationRead

router = APIRouter(
    prefix="/creator/invitation",
    tags=["Creator Invitation Endpoints"]
)


@router.post(
    "/invite/{quiz_id}",
    response_model=InvitationRead,
    status_code=201,
)
async def invite_to_quiz(
    quiz_id: UUID,
    body: InvitationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(current_user, quiz)

    invitation = await invite(quiz, current_user, body.invitee_email, db)
    await db.commit()
    await db.refresh(invitation)

    return invitation


@router.get(
    "/list/{quiz_id}",
    response_model=List[InvitationRead],
)
async def list_quiz_invitations(
    quiz_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(current_user, quiz)

    result = await db.execute(
        select(QuizInvitation)
        .where(QuizInvitation.quiz_id == quiz.id)
        .order_by(QuizInvitation.invited_at.desc())
    )
    return result.scalars().all()
