from pydantic import BaseModel, EmailStr
from typing import Optional, Dict, Any, Literal
from datetime import datetime

NotificationType = Literal["info", "success", "warning", "error"]
NotificationStatus = Literal["active", "read", "archived"]


class NotificationCreate(BaseModel):
    user_id: str
    title: str
    message: str
    type: NotificationType = "info"
    status: NotificationStatus = "active"
    priority: str = "medium"
    category: Optional[str] = None
    requires_action: bool = False
    action_url: Optional[str] = None
    action_text: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class AdminNotification(BaseModel):
    title: str
    message: str
    type: NotificationType = "info"
    priority: str = "normal"
    category: str = "system"
    requires_action: bool = False
    action_url: Optional[str] = None
    action_text: Optional[str] = None
    recipient_email: Optional[EmailStr] = None  # None means broadcast to all users


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: str
    status: str
    priority: Optional[str] = None
    category: Optional[str] = None
    requires_action: bool = False
    action_url: Optional[str] = None
    action_text: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    count: int
