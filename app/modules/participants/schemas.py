from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from datetime import datetime
from app.modules.groups.schemas import ParticipationStatus


class GroupParticipant(BaseModel):
    id: str
    group_id: str
    user_id: Optional[str] = None
    email: str
    contribution_amount: float = 0
    participation_status: ParticipationStatus = ParticipationStatus.PENDING
    agreed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ParticipantStatusUpdate(BaseModel):
    email: EmailStr
    status: ParticipationStatus

    @field_validator("status")
    @classmethod
    def answer_only(cls, value):
        # pending is the initial state; participants can only agree or decline
        if value == ParticipationStatus.PENDING:
            raise ValueError("status must be agreed or declined")
        return value
