from pydantic import BaseModel, EmailStr
from typing import Optional
from uuid import UUID
from datetime import datetime

from quizapp.models import InvitationStatus


class InvitationCreate(BaseModel):
    invitee_email: EmailStr


class InvitationRespond(BaseModel):
    accept: bool


class InvitationRead(BaseModel):
    id: UUID
    quiz_id: UUID
    inviter_id: UUID
    invitee_email: str
    status: InvitationStatus
    invited_at: datetime
    responded_at: Optional[datetime]

    model_config = {"from_attributes": True}
