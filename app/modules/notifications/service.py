from supabase import Client
from app.modules.notifications.schemas import NotificationCreate, NotificationResponse, AdminNotification
from app.database.realtime import RealtimeGateway, Subscription, get_realtime
from app.core.errors import NotFoundError, ValidationError, from_upstream
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def notification_channel(user_id: str) -> str:
    return f"notifications:{user_id}"


class NotificationService:
    def __init__(self, supabase: Client, realtime: Optional[RealtimeGateway] = None):
        self.supabase = supabase
        self.realtime = realtime or get_realtime()

    def get_active_notifications(self, user_id: Optional[str], limit: int = 50, offset: int = 0) -> List[NotificationResponse]:
        """Non-archived notifications, newest first. Anonymous callers get an empty list."""
        if not user_id:
            logger.info("No authenticated user found, returning no notifications")
            return []
        try:
            result = self.supabase.table("mailbox_notifications")\
                .select("*")\
                .eq("user_id", user_id)\
                .neq("status", "archived")\
                .order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching notifications for {user_id}: {e}")
            raise from_upstream(e, "Failed to fetch notifications")
        return [NotificationResponse(**row) for row in (result.data or [])]

    def get_notification(self, user_id: str, notification_id: str) -> Optional[NotificationResponse]:
        result = self.supabase.table("mailbox_notifications")\
            .select("*")\
            .eq("id", notification_id)\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return NotificationResponse(**result.data)

    def _require_owned(self, user_id: str, notification_id: str) -> None:
        # the lifecycle procedures take only the notification id
        if self.get_notification(user_id, notification_id) is None:
            raise NotFoundError("Notification not found")

    def get_unread_count(self, user_id: Optional[str]) -> int:
        if not user_id:
            return 0
        try:
            result = self.supabase.rpc("get_unread_notification_count", {"p_user_id": user_id}).execute()
        except Exception as e:
            logger.error(f"Error fetching unread count for {user_id}: {e}")
            raise from_upstream(e, "Failed to fetch unread count")
        return int(result.data or 0)

    def mark_as_read(self, user_id: Optional[str], notification_id: str) -> bool:
        """active -> read. The transition is one-way and enforced by the procedure."""
        if not user_id:
            logger.info("No authenticated user found, not marking notification as read")
            return False
        self._require_owned(user_id, notification_id)
        try:
            self.supabase.rpc("mark_notification_read", {"p_notification_id": notification_id}).execute()
        except Exception as e:
            logger.error(f"Error marking notification {notification_id} as read: {e}")
            raise from_upstream(e, "Failed to mark notification as read")
        return True

    def archive_notification(self, user_id: Optional[str], notification_id: str) -> bool:
        if not user_id:
            logger.info("No authenticated user found, not archiving notification")
            return False
        self._require_owned(user_id, notification_id)
        try:
            self.supabase.rpc("archive_notification", {"p_notification_id": notification_id}).execute()
        except Exception as e:
            logger.error(f"Error archiving notification {notification_id}: {e}")
            raise from_upstream(e, "Failed to archive notification")
        return True

    def create_notification(self, notification: NotificationCreate) -> Any:
        result = self.supabase.rpc("create_notification", {
            "p_user_id": notification.user_id,
            "p_title": notification.title,
            "p_message": notification.message,
            "p_category": notification.category,
            "p_type": notification.type,
            "p_status": notification.status,
            "p_priority": notification.priority,
            "p_requires_action": notification.requires_action,
            "p_action_text": notification.action_text,
            "p_action_url": notification.action_url,
            "p_metadata": notification.metadata,
        }).execute()
        return result.data

    def send_group_invitation(self, recipient_user_id: str, group_id: str, group_name: str, inviter_email: str) -> Any:
        logger.info(f"Sending group invitation for {group_id} to user {recipient_user_id}")
        return self.create_notification(NotificationCreate(
            user_id=recipient_user_id,
            title="Group Gift Invitation",
            message=f'{inviter_email} invited you to contribute to "{group_name}"',
            category="gift",
            type="info",
            priority="medium",
            requires_action=True,
            action_text="View Invitation",
            action_url=f"/share/group/{group_id}",
            metadata={"group_id": group_id, "inviter_email": inviter_email},
        ))

    def send_status_change(self, owner_id: str, group_id: str, group_name: str, participant_email: str, status: str) -> Any:
        logger.info(f"Notifying owner {owner_id} that {participant_email} {status} on {group_id}")
        return self.create_notification(NotificationCreate(
            user_id=owner_id,
            title="Group Gift Update",
            message=f'{participant_email} has {status} to contribute to "{group_name}"',
            category="gift",
            type="info",
            priority="medium",
            requires_action=False,
            action_text="View Group",
            action_url=f"/share/group/{group_id}",
            metadata={"group_id": group_id, "participant_email": participant_email, "status": status},
        ))

    def _admin_params(self, payload: AdminNotification, admin_id: str) -> Dict[str, Any]:
        return {
            "p_title": payload.title,
            "p_message": payload.message,
            "p_type": payload.type,
            "p_priority": payload.priority,
            "p_category": payload.category,
            "p_requires_action": payload.requires_action,
            "p_action_url": payload.action_url or None,
            "p_action_text": payload.action_text or None,
            "p_metadata": {
                "sent_by_admin": admin_id,
                "sent_at": datetime.now(timezone.utc).isoformat(),
            },
        }

    def send_broadcast_notification(self, admin_id: str, payload: AdminNotification) -> Any:
        """Send to every user"""
        try:
            result = self.supabase.rpc("send_broadcast_notification", {
                "p_admin_id": admin_id,
                **self._admin_params(payload, admin_id),
            }).execute()
        except Exception as e:
            logger.error(f"Error sending broadcast notification: {e}")
            raise from_upstream(e, "Failed to send broadcast notification")
        return result.data

    def send_user_notification(self, admin_id: str, payload: AdminNotification) -> Any:
        if not payload.recipient_email:
            raise ValidationError("Recipient email is required for individual notifications")
        try:
            result = self.supabase.rpc("send_user_notification", {
                "admin_user_id": admin_id,
                "recipient_email": payload.recipient_email,
                **self._admin_params(payload, admin_id),
            }).execute()
        except Exception as e:
            logger.error(f"Error sending notification to {payload.recipient_email}: {e}")
            raise from_upstream(e, "Failed to send notification")
        return result.data

    def debug_last_notification(self, recipient_email: str) -> Any:
        result = self.supabase.rpc("debug_last_notification", {"p_recipient_email": recipient_email}).execute()
        return result.data

    def debug_notification_access(self, user_id: str) -> Any:
        result = self.supabase.rpc("debug_notification_access", {"p_user_id": user_id}).execute()
        return result.data

    async def subscribe_to_notifications(self, user_id: str) -> Subscription:
        """One channel per user; a second subscription replaces the first"""
        logger.info(f"Setting up notification subscription for user {user_id}")
        return await self.realtime.subscribe(
            notification_channel(user_id),
            table="mailbox_notifications",
            filter=f"user_id=eq.{user_id}",
        )
