from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.database import get_db
from quizapp.models import QuizInvitation, User
from quizapp.auth.dependencies import get_current_user
from quizapp.helpers.errors import NotFound
from quizapp.helpers.invitations import respond
from quizapp.schemas.invitation import InvitationRead, InvitationRespond

router = APIRouter(
    prefix="/taker/invitation",
    tags=["Taker Invitation Endpoints"]
)


def _addressed_to(user: User):
    return or_(
        QuizInvitation.invitee_email == user.email.lower(),
        QuizInvitation.invitee_id == user.id,
    )


@router.get("/my-invitations", response_model=List[InvitationRead])
async def list_my_invitations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(QuizInvitation)
        .where(_addressed_to(current_user))
        .order_by(QuizInvitation.invited_at.desc())
    )
    return result.scalars().all()


@router.post("/respond/{invitation_id}", response_model=InvitationRead)
async def respond_to_invitation(
    invitation_id: UUID,
    body: InvitationRespond,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invitation = await db.scalar(
        select(QuizInvitation).where(
            QuizInvitation.id == invitation_id,
            _addressed_to(current_user),
        )
    )
    # someone else's invitation looks the same as a missing one
    if not invitation:
        raise NotFound("Invitation not found")

    respond(invitation, current_user, accept=body.accept)
    await db.commit()
    await db.refresh(invitation)

    return invitation
