from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum


class TierId(str, Enum):
    FREE = "free"
    PRO = "pro"
    ADMIN = "admin"


class LimitType(str, Enum):
    GIFTS = "gifts"
    GROUPS = "groups"
    CATEGORIES = "categories"


class TierFeatures(BaseModel):
    max_gifts: int
    max_groups: int
    max_categories: int
    advanced_analytics: Optional[bool] = None
    priority_support: Optional[bool] = None
    admin_panel: Optional[bool] = None
    user_management: Optional[bool] = None


class SubscriptionTier(BaseModel):
    id: TierId
    name: str
    description: Optional[str] = None
    features: TierFeatures

    class Config:
        from_attributes = True


class CurrentSubscription(BaseModel):
    subscription_tier: TierId = TierId.FREE
    subscription_start_date: Optional[datetime] = None
    subscription_end_date: Optional[datetime] = None


class SubscriptionUpgrade(BaseModel):
    user_id: str
    new_tier: TierId
    reason: Optional[str] = None


class SubscriptionHistory(BaseModel):
    id: str
    user_id: str
    old_tier: Optional[str] = None
    new_tier: str
    changed_at: datetime
    changed_by: Optional[str] = None
    reason: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class LimitCheck(BaseModel):
    limit_type: LimitType
    current_count: int = Field(..., ge=0)


class LimitCheckResponse(BaseModel):
    within_limit: bool
