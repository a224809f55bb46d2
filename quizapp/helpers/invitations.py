import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.models import Quiz, QuizInvitation, InvitationStatus, User
from quizapp.helpers.errors import InvalidInput

logger = logging.getLogger(__name__)


async def invite(quiz: Quiz, inviter: User, invitee_email: str, db: AsyncSession) -> QuizInvitation:
    """
    Creates a pending invitation, or re-opens a declined one for the same email.
    Sending the email itself belongs to the mail dispatcher; this only logs it.
    """
    email = invitee_email.strip().lower()
    if inviter.email and email == inviter.email.lower():
        raise InvalidInput("You cannot invite yourself")

    invitation = await db.scalar(
        select(QuizInvitation).where(
            QuizInvitation.quiz_id == quiz.id,
            QuizInvitation.invitee_email == email,
        )
    )

    if invitation:
        if invitation.status == InvitationStatus.DECLINED:
            invitation.status = InvitationStatus.PENDING
            invitation.invited_at = datetime.utcnow()
            invitation.responded_at = None
    else:
        invitee = await db.scalar(select(User).where(User.email == email))
        invitation = QuizInvitation(
            quiz_id=quiz.id,
            inviter_id=inviter.id,
            invitee_email=email,
            invitee_id=invitee.id if invitee else None,
        )
        db.add(invitation)

    await db.flush()
    logger.info("Invitation to quiz %s queued for %s", quiz.id, email)
    return invitation


def respond(invitation: QuizInvitation, user: User, accept: bool):
    invitation.status = InvitationStatus.ACCEPTED if accept else InvitationStatus.DECLINED
    invitation.invitee_id = user.id
    invitation.responded_at = datetime.utcnow()


async def accept_pending_invitation(quiz: Quiz, user: User, db: AsyncSession) -> Optional[QuizInvitation]:
    """Starting a quiz counts as accepting a pending invitation to it."""
    if not user.email:
        return None

    invitation = await db.scalar(
        select(QuizInvitation).where(
            QuizInvitation.quiz_id == quiz.id,
            QuizInvitation.invitee_email == user.email.lower(),
            QuizInvitation.status == InvitationStatus.PENDING,
        )
    )
    if invitation:
        respond(invitation, user, accept=True)
    return invitation
