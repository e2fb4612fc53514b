from pydantic import BaseModel, EmailStr
from typing import Optional, List, Dict, Any
from datetime import datetime


class ProfileCreate(BaseModel):
    email: EmailStr
    nickname: Optional[str] = None
    full_name: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = None


class ProfileUpdate(BaseModel):
    nickname: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = None


class NotificationPreferencesUpdate(BaseModel):
    enabled: Optional[bool] = None
    before_event: Optional[int] = None  # minutes


class ProfileResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    nickname: Optional[str] = None
    avatar_url: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = None
    subscription_tier: Optional[str] = "free"
    calendar_preferences: Optional[Dict[str, Any]] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InterestsAdd(BaseModel):
    category_ids: List[str]


class ReferenceItem(BaseModel):
    id: Optional[str] = None
    code: Optional[str] = None
    name: str
    symbol: Optional[str] = None

    class Config:
        from_attributes = True
