from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional, List, Any
from datetime import date as date_type, datetime
from enum import Enum


class ParticipationStatus(str, Enum):
    PENDING = "pending"
    AGREED = "agreed"
    DECLINED = "declined"


class ParticipantInvite(BaseModel):
    email: EmailStr
    status: ParticipationStatus = ParticipationStatus.PENDING


def _coerce_invites(value: Any) -> Any:
    # Plain email strings are accepted as pending invites
    if value is None:
        return value
    return [{"email": item} if isinstance(item, str) else item for item in value]


class GroupCreate(BaseModel):
    # Required fields are checked by the service so a missing one yields its own error
    name: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None
    product_url: Optional[str] = None
    date: Optional[date_type] = None
    comments: Optional[str] = None
    participants: List[ParticipantInvite] = []

    @field_validator("participants", mode="before")
    @classmethod
    def coerce_invites(cls, value):
        return _coerce_invites(value)


class GroupUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None
    product_url: Optional[str] = None
    date: Optional[date_type] = None
    comments: Optional[str] = None
    participants: Optional[List[ParticipantInvite]] = None

    @field_validator("participants", mode="before")
    @classmethod
    def coerce_invites(cls, value):
        return _coerce_invites(value)


class GiftGroup(BaseModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    amount: float = 0
    currency: Optional[str] = None
    image_url: Optional[str] = None
    product_url: Optional[str] = None
    date: Optional[datetime] = None
    comments: Optional[str] = None
    color: Optional[str] = None
    participants: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ShareLinks(BaseModel):
    url: str
    facebook: str
    twitter: str
    whatsapp: str
