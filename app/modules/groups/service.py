from supabase import Client
from app.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GiftGroup, ParticipantInvite, ParticipationStatus, ShareLinks
)
from app.modules.groups import codec
from app.modules.participants.service import ParticipantService
from app.modules.notifications.service import NotificationService
from app.modules.profiles.service import ProfileService
from app.database.realtime import RealtimeGateway, get_realtime
from app.core.colors import random_pastel_color
from app.core.errors import AccessDeniedError, NotFoundError, ValidationError
from app.config.settings import settings
from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime, timezone
from urllib.parse import quote, urlencode
import logging

logger = logging.getLogger(__name__)


def split_evenly(amount: float, participant_count: int) -> float:
    """Initial per-head share; calculate_group_contributions overwrites it later"""
    if participant_count <= 0:
        return 0
    return round(float(amount) / participant_count, 2)


def _normalize(email: str) -> str:
    return email.strip().lower()


def _unique_emails(emails: Iterable[str]) -> List[str]:
    seen = set()
    unique = []
    for email in emails:
        key = _normalize(email)
        if key and key not in seen:
            seen.add(key)
            unique.append(key)
    return unique


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class GroupService:
    def __init__(
        self,
        supabase: Client,
        notifications: Optional[NotificationService] = None,
        participants: Optional[ParticipantService] = None,
        profiles: Optional[ProfileService] = None,
        realtime: Optional[RealtimeGateway] = None,
    ):
        self.supabase = supabase
        realtime = realtime or get_realtime()
        self.notifications = notifications or NotificationService(supabase, realtime)
        self.profiles = profiles or ProfileService(supabase)
        self.participants = participants or ParticipantService(
            supabase, notifications=self.notifications, profiles=self.profiles, realtime=realtime
        )

    # Reads

    def _stored_emails(self, group_ids: List[str]) -> Dict[str, List[str]]:
        if not group_ids:
            return {}
        result = self.supabase.table("group_participants")\
            .select("group_id, email")\
            .in_("group_id", group_ids)\
            .order("created_at")\
            .execute()
        emails: Dict[str, List[str]] = {}
        for row in result.data or []:
            emails.setdefault(row["group_id"], []).append(row["email"])
        return emails

    def _creator_emails(self, user_ids: List[str]) -> Dict[str, str]:
        if not user_ids:
            return {}
        result = self.supabase.table("profiles")\
            .select("id, email")\
            .in_("id", list(set(user_ids)))\
            .execute()
        return {row["id"]: row["email"] for row in (result.data or [])}

    def _to_groups(self, rows: List[Dict[str, Any]]) -> List[GiftGroup]:
        """Resolve participant emails (creator always first) for a batch of rows"""
        stored = self._stored_emails([row["id"] for row in rows])
        creators = self._creator_emails([row["user_id"] for row in rows])
        groups = []
        for row in rows:
            emails = stored.get(row["id"]) or list(row.get("participants") or [])
            creator_email = creators.get(row["user_id"])
            if creator_email:
                emails = [creator_email] + emails
            groups.append(codec.from_row(row, participants=_unique_emails(emails)))
        return groups

    def get_groups(self, user_id: str, email: Optional[str] = None) -> List[GiftGroup]:
        """Groups the user owns plus groups where the user has agreed to contribute"""
        owned = self.supabase.table("gift_groups")\
            .select("*")\
            .eq("user_id", user_id)\
            .order("created_at")\
            .execute()
        rows = list(owned.data or [])
        owned_ids = {row["id"] for row in rows}

        joined = self.supabase.table("group_participants")\
            .select("group_id")\
            .eq("user_id", user_id)\
            .eq("participation_status", ParticipationStatus.AGREED.value)\
            .execute()
        shared_ids = {row["group_id"] for row in (joined.data or [])}
        if email:
            joined_by_email = self.supabase.table("group_participants")\
                .select("group_id")\
                .eq("email", _normalize(email))\
                .eq("participation_status", ParticipationStatus.AGREED.value)\
                .execute()
            shared_ids |= {row["group_id"] for row in (joined_by_email.data or [])}

        shared_ids -= owned_ids
        if shared_ids:
            shared = self.supabase.table("gift_groups")\
                .select("*")\
                .in_("id", sorted(shared_ids))\
                .execute()
            rows.extend(shared.data or [])

        rows.sort(key=lambda row: row.get("created_at") or "")
        return self._to_groups(rows)

    def get_group_by_id(self, group_id: str) -> Optional[GiftGroup]:
        """Public read used by share links; None when the group does not exist"""
        result = self.supabase.table("gift_groups")\
            .select("*")\
            .eq("id", group_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return self._to_groups([result.data])[0]

    # Writes

    def _insert_group(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        result = self.supabase.table("gift_groups").insert(codec.to_row(fields)).execute()
        if not result.data:
            raise NotFoundError("Group was not returned after creation")
        return result.data[0]

    def _insert_participants(
        self,
        group_id: str,
        owner_id: str,
        owner_email: str,
        invites: List[ParticipantInvite],
        share: float,
    ) -> None:
        user_ids = self.profiles.get_user_ids_by_email([invite.email for invite in invites])
        now = _now()
        rows = [{
            "group_id": group_id,
            "user_id": owner_id,
            "email": owner_email,
            "contribution_amount": share,
            "participation_status": ParticipationStatus.AGREED.value,
            "agreed_at": now,
        }]
        for invite in invites:
            agreed = invite.status == ParticipationStatus.AGREED
            rows.append({
                "group_id": group_id,
                "user_id": user_ids.get(invite.email),
                "email": invite.email,
                "contribution_amount": share,
                "participation_status": invite.status.value,
                "agreed_at": now if agreed else None,
            })
        self.supabase.table("group_participants").insert(rows).execute()

    def _send_invitations(self, group_id: str, group_name: str, inviter_email: str, emails: List[str]) -> int:
        """One notification per invitee; a failure for one never blocks the others"""
        if not emails:
            return 0
        try:
            user_ids = self.profiles.get_user_ids_by_email(emails)
        except Exception as e:
            logger.error(f"Error resolving invitees for group {group_id}: {e}")
            return 0
        sent = 0
        for email in emails:
            recipient_id = user_ids.get(email)
            if not recipient_id:
                logger.warning(f"No registered user for {email}; invitation to group {group_id} not sent")
                continue
            try:
                self.notifications.send_group_invitation(recipient_id, group_id, group_name, inviter_email)
                sent += 1
            except Exception as e:
                logger.error(f"Error sending invitation for group {group_id} to {email}: {e}")
        return sent

    def create_group(self, group_data: GroupCreate, user: Optional[Dict[str, Any]]) -> GiftGroup:
        """Create a group gift with the creator (agreed) and each invitee (pending) as participants"""
        if not user or not user.get("id") or not user.get("email"):
            raise AccessDeniedError("You must be signed in to create a group gift", "UNAUTHENTICATED")
        if not group_data.name or not group_data.description or group_data.amount is None or not group_data.currency:
            raise ValidationError("Missing required fields")

        owner_email = _normalize(user["email"])
        invites: List[ParticipantInvite] = []
        seen = {owner_email}
        for invite in group_data.participants:
            email = _normalize(invite.email)
            if email in seen:
                continue
            seen.add(email)
            invites.append(ParticipantInvite(email=email, status=invite.status))

        share = split_evenly(group_data.amount, len(invites) + 1)
        row = self._insert_group({
            "user_id": user["id"],
            "name": group_data.name,
            "description": group_data.description,
            "amount": group_data.amount,
            "currency": group_data.currency,
            "image_url": group_data.image_url,
            "product_url": group_data.product_url,
            "date": group_data.date,
            "comments": group_data.comments,
            "color": random_pastel_color(),
            "participants": [owner_email] + [invite.email for invite in invites],
        })
        group_id = row["id"]
        logger.info(f"Created group {group_id} with {len(invites) + 1} participants")

        self._insert_participants(group_id, user["id"], owner_email, invites, share)
        self._send_invitations(group_id, group_data.name, owner_email, [invite.email for invite in invites])

        return codec.from_row(row, participants=[owner_email] + [invite.email for invite in invites])

    def _get_owned_row(self, group_id: str, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("gift_groups")\
            .select("*")\
            .eq("id", group_id)\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise NotFoundError("Group not found")
        return result.data

    def update_group(self, group_id: str, updates: GroupUpdate, user_id: str) -> GiftGroup:
        """
        Update top-level fields and, when a participant list is given, reconcile participants.

        Adding, removing and recalculating are separate remote calls without a
        transaction; a failure midway leaves the participant set partially updated.
        """
        row = self._get_owned_row(group_id, user_id)
        fields = updates.model_dump(exclude_unset=True, exclude={"participants"})
        owner_email = self.profiles.get_email(user_id)
        owner_key = _normalize(owner_email) if owner_email else None

        desired: Optional[List[str]] = None
        if updates.participants is not None:
            desired = [e for e in _unique_emails(p.email for p in updates.participants) if e != owner_key]
            fields["participants"] = ([owner_key] if owner_key else []) + desired

        if fields:
            self.supabase.table("gift_groups")\
                .update(codec.to_row(fields))\
                .eq("id", group_id)\
                .eq("user_id", user_id)\
                .execute()

        if desired is not None:
            name = fields.get("name") or codec.from_row(row).name
            self._sync_participants(group_id, name, owner_key, desired)

        return self.get_group_by_id(group_id)

    def _sync_participants(self, group_id: str, group_name: str, owner_email: Optional[str], desired: List[str]) -> None:
        current = self.supabase.table("group_participants")\
            .select("id, email")\
            .eq("group_id", group_id)\
            .execute()
        current_emails = {_normalize(row["email"]): row["email"] for row in (current.data or [])}

        to_add = [email for email in desired if email not in current_emails]
        to_remove = [
            stored for key, stored in current_emails.items()
            if key not in desired and key != owner_email
        ]

        if to_add:
            user_ids = self.profiles.get_user_ids_by_email(to_add)
            self.supabase.table("group_participants").insert([{
                "group_id": group_id,
                "user_id": user_ids.get(email),
                "email": email,
                "contribution_amount": 0,
                "participation_status": ParticipationStatus.PENDING.value,
            } for email in to_add]).execute()
            self._send_invitations(group_id, group_name, owner_email or "", to_add)

        if to_remove:
            self.supabase.table("group_participants")\
                .delete()\
                .eq("group_id", group_id)\
                .in_("email", to_remove)\
                .execute()

        logger.info(f"Group {group_id} participants: +{len(to_add)} -{len(to_remove)}")
        self.participants.calculate_contributions(group_id)

    def delete_group(self, user_id: str, group_id: str) -> bool:
        """Ownership is enforced by the delete predicate; a non-matching id deletes nothing"""
        result = self.supabase.table("gift_groups")\
            .delete()\
            .eq("user_id", user_id)\
            .eq("id", group_id)\
            .execute()
        return bool(result.data)

    # Sharing

    def _fork_group(self, source: GiftGroup, user: Dict[str, Any]) -> GiftGroup:
        """Copy a group into a new, independent group owned by user"""
        owner_email = user.get("email") or self.profiles.get_email(user["id"])
        if not owner_email:
            raise AccessDeniedError("You must be signed in to add a group gift", "UNAUTHENTICATED")
        owner_email = _normalize(owner_email)

        others = [email for email in _unique_emails(source.participants) if email != owner_email]
        invites = [ParticipantInvite(email=email) for email in others]
        share = split_evenly(source.amount, len(invites) + 1)

        row = self._insert_group({
            "user_id": user["id"],
            "name": source.name,
            "description": source.description,
            "amount": source.amount,
            "currency": source.currency,
            "image_url": source.image_url,
            "product_url": source.product_url,
            "date": source.date,
            "comments": source.comments,
            "color": source.color or random_pastel_color(),
            "participants": [owner_email] + others,
        })
        self._insert_participants(row["id"], user["id"], owner_email, invites, share)
        logger.info(f"Copied group {source.id} to {row['id']} for user {user['id']}")
        return codec.from_row(row, participants=[owner_email] + others)

    def copy_shared_group(self, group_id: str, user: Dict[str, Any]) -> GiftGroup:
        source = self.get_group_by_id(group_id)
        if source is None:
            raise NotFoundError("Group not found")
        return self._fork_group(source, user)

    def accept_group_invitation(self, notification_id: str, user: Dict[str, Any]) -> GiftGroup:
        """Copy the group referenced by an invitation, then mark the invitation read"""
        notification = self.notifications.get_notification(user["id"], notification_id)
        if notification is None:
            raise NotFoundError("Invitation not found")
        group_id = (notification.metadata or {}).get("group_id")
        if not group_id:
            raise ValidationError("Invitation does not reference a group")

        group = self.copy_shared_group(group_id, user)
        self.notifications.mark_as_read(user["id"], notification_id)
        return group

    def build_share_links(self, group: GiftGroup) -> ShareLinks:
        url = f"{settings.public_app_url.rstrip('/')}/share/group/{group.id}"
        title = f"Check out this group gift: {group.name}"
        return ShareLinks(
            url=url,
            facebook=f"https://www.facebook.com/sharer/sharer.php?{urlencode({'u': url})}",
            twitter=f"https://twitter.com/intent/tweet?{urlencode({'url': url, 'text': title})}",
            whatsapp=f"https://api.whatsapp.com/send?text={quote(f'{title} {url}')}",
        )
