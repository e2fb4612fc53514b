from supabase import Client
from app.modules.participants.schemas import GroupParticipant
from app.modules.groups.schemas import GiftGroup, ParticipationStatus
from app.modules.groups import codec
from app.modules.notifications.service import NotificationService
from app.modules.profiles.service import ProfileService
from app.database.realtime import RealtimeGateway, Subscription, get_realtime
from app.core.errors import NotFoundError, from_upstream
from typing import List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

CREATOR_PARTICIPANT_ID = "creator"


def participants_channel(group_id: str) -> str:
    return f"group_participants:{group_id}"


class ParticipantService:
    def __init__(
        self,
        supabase: Client,
        notifications: Optional[NotificationService] = None,
        profiles: Optional[ProfileService] = None,
        realtime: Optional[RealtimeGateway] = None,
    ):
        self.supabase = supabase
        self.realtime = realtime or get_realtime()
        self.notifications = notifications or NotificationService(supabase, self.realtime)
        self.profiles = profiles or ProfileService(supabase)

    def _get_group(self, group_id: str) -> GiftGroup:
        result = self.supabase.table("gift_groups")\
            .select("*")\
            .eq("id", group_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise NotFoundError("Group not found")
        return codec.from_row(result.data)

    def get_group_participants(self, group_id: str) -> List[GroupParticipant]:
        """Stored participant rows, plus a synthesized agreed row for a creator without one"""
        group = self._get_group(group_id)
        creator_email = self.profiles.get_email(group.user_id)

        result = self.supabase.table("group_participants")\
            .select("id, email, participation_status, contribution_amount, agreed_at, created_at, updated_at, user_id, group_id")\
            .eq("group_id", group_id)\
            .order("created_at")\
            .execute()
        participants = [GroupParticipant(**row) for row in (result.data or [])]

        if creator_email and not any(p.email.lower() == creator_email.lower() for p in participants):
            now = datetime.now(timezone.utc)
            participants.append(GroupParticipant(
                id=CREATOR_PARTICIPANT_ID,
                group_id=group_id,
                user_id=group.user_id,
                email=creator_email,
                # placeholder until the creator has a stored row
                contribution_amount=participants[0].contribution_amount if participants else 0,
                participation_status=ParticipationStatus.AGREED,
                agreed_at=now,
                created_at=now,
                updated_at=now,
            ))

        return participants

    def get_participant_status(self, group_id: str, email: str) -> Optional[GroupParticipant]:
        result = self.supabase.table("group_participants")\
            .select("*")\
            .eq("group_id", group_id)\
            .eq("email", email)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return GroupParticipant(**result.data)

    def update_participant_status(self, group_id: str, email: str, status: ParticipationStatus) -> None:
        """
        Record a participant's answer, tell the owner, then recalculate contributions.

        The three remote calls are not transactional: a failure after the status
        update leaves the new status in place without a recalculation.
        """
        status = ParticipationStatus(status)
        email = email.strip().lower()
        group = self._get_group(group_id)
        agreed_at = datetime.now(timezone.utc).isoformat() if status == ParticipationStatus.AGREED else None

        try:
            self.supabase.rpc("update_participant_status", {
                "p_group_id": group_id,
                "p_email": email,
                "p_status": status.value,
                "p_agreed_at": agreed_at,
            }).execute()
        except Exception as e:
            logger.error(f"Error updating participant status for {email} in {group_id}: {e}")
            raise from_upstream(e, "Failed to update participation status")

        try:
            self.notifications.send_status_change(group.user_id, group_id, group.name, email, status.value)
        except Exception as e:
            logger.error(f"Error sending status change notification for {group_id}: {e}")

        self.calculate_contributions(group_id)

    def calculate_contributions(self, group_id: str) -> None:
        """The split itself is computed by the calculate_group_contributions procedure"""
        try:
            self.supabase.rpc("calculate_group_contributions", {"p_group_id": group_id}).execute()
        except Exception as e:
            logger.error(f"Error recalculating contributions for {group_id}: {e}")
            raise from_upstream(e, "Failed to recalculate contributions")

    async def subscribe_to_participants(self, group_id: str) -> Subscription:
        return await self.realtime.subscribe(
            participants_channel(group_id),
            table="group_participants",
            filter=f"group_id=eq.{group_id}",
        )
