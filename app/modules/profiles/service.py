from supabase import Client
from app.modules.profiles.schemas import (
    ProfileCreate, ProfileUpdate, ProfileResponse, NotificationPreferencesUpdate, ReferenceItem
)
from app.core.errors import NotFoundError, from_upstream
from typing import List, Optional, Dict
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> Optional[ProfileResponse]:
        """Get profile by user ID, None when missing"""
        result = self.supabase.table("profiles")\
            .select("*")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()

        if not result or not result.data:
            return None

        return ProfileResponse(**result.data)

    def get_profile_by_email(self, email: str) -> Optional[ProfileResponse]:
        """Get profile by email"""
        result = self.supabase.table("profiles")\
            .select("*")\
            .eq("email", email)\
            .maybe_single()\
            .execute()

        if not result or not result.data:
            return None

        return ProfileResponse(**result.data)

    def get_email(self, user_id: str) -> Optional[str]:
        result = self.supabase.table("profiles")\
            .select("email")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return result.data.get("email")

    def get_user_ids_by_email(self, emails: List[str]) -> Dict[str, str]:
        """Map known emails to their profile ids; unknown emails are absent from the result"""
        if not emails:
            return {}
        result = self.supabase.table("profiles")\
            .select("id, email")\
            .in_("email", emails)\
            .execute()
        return {row["email"]: row["id"] for row in (result.data or [])}

    def create_profile(self, user_id: str, profile_data: ProfileCreate) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles").insert({
                "id": user_id,
                "email": profile_data.email,
                "nickname": profile_data.nickname,
                "full_name": profile_data.full_name,
                "country": profile_data.country,
                "currency": profile_data.currency,
            }).execute()
        except Exception as e:
            logger.error(f"Error creating profile for {user_id}: {e}")
            raise from_upstream(e, "Failed to create profile")

        return ProfileResponse(**result.data[0])

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update profile fields that were provided"""
        update_data = profile_data.model_dump(exclude_none=True)
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        result = self.supabase.table("profiles")\
            .update(update_data)\
            .eq("id", user_id)\
            .execute()

        if not result.data:
            raise NotFoundError("Profile not found")

        return ProfileResponse(**result.data[0])

    def update_notification_preferences(
        self, user_id: str, preferences: NotificationPreferencesUpdate
    ) -> ProfileResponse:
        """Merge reminder settings into calendar_preferences.notifications"""
        profile = self.get_profile(user_id)
        if profile is None:
            raise NotFoundError("Profile not found")

        calendar_preferences = dict(profile.calendar_preferences or {})
        notifications = dict(calendar_preferences.get("notifications") or {})
        if preferences.enabled is not None:
            notifications["enabled"] = preferences.enabled
        if preferences.before_event is not None:
            notifications["beforeEvent"] = preferences.before_event
        calendar_preferences["notifications"] = notifications

        result = self.supabase.table("profiles")\
            .update({"calendar_preferences": calendar_preferences})\
            .eq("id", user_id)\
            .execute()

        if not result.data:
            raise NotFoundError("Profile not found")

        return ProfileResponse(**result.data[0])

    def add_interests(self, user_id: str, category_ids: List[str]) -> bool:
        """Best effort: a failure here never undoes the signup that triggered it"""
        if not category_ids:
            return True
        try:
            self.supabase.table("user_interests").insert([
                {"user_id": user_id, "category_id": category_id}
                for category_id in category_ids
            ]).execute()
            return True
        except Exception as e:
            logger.error(f"Error adding interests for {user_id}: {e}")
            return False

    def _list_active(self, table: str, order_by: str) -> List[ReferenceItem]:
        result = self.supabase.table(table)\
            .select("*")\
            .eq("is_active", True)\
            .order(order_by)\
            .execute()
        return [ReferenceItem(**row) for row in (result.data or [])]

    def list_countries(self) -> List[ReferenceItem]:
        return self._list_active("countries", "name")

    def list_currencies(self) -> List[ReferenceItem]:
        return self._list_active("currencies", "code")

    def list_predefined_categories(self) -> List[ReferenceItem]:
        return self._list_active("predefined_categories", "name")
