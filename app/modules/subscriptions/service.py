from supabase import Client
from app.modules.subscriptions.schemas import (
    CurrentSubscription, SubscriptionTier, SubscriptionHistory, TierId, LimitType
)
from app.core.errors import AccessDeniedError, NotFoundError, from_upstream
from typing import List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class SubscriptionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_current_subscription(self, user_id: str) -> CurrentSubscription:
        result = self.supabase.table("profiles")\
            .select("subscription_tier, subscription_start_date, subscription_end_date")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise NotFoundError("Profile not found")
        return CurrentSubscription(**result.data)

    def get_subscription_tier(self, tier_id: str) -> Optional[SubscriptionTier]:
        result = self.supabase.table("subscription_tiers")\
            .select("*")\
            .eq("id", tier_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return SubscriptionTier(**result.data)

    def get_all_tiers(self) -> List[SubscriptionTier]:
        result = self.supabase.table("subscription_tiers")\
            .select("*")\
            .order("created_at")\
            .execute()
        return [SubscriptionTier(**row) for row in (result.data or [])]

    def upgrade_subscription(self, admin_id: str, user_id: str, new_tier: TierId, reason: Optional[str] = None) -> None:
        """
        Move a user to another tier and record the change.

        Only admins may do this. The profile update and the history insert are
        two separate calls; a failed insert leaves the new tier without history.
        """
        new_tier = TierId(new_tier)
        if self.get_current_subscription(admin_id).subscription_tier != TierId.ADMIN:
            raise AccessDeniedError("Only administrators can upgrade subscriptions")

        old_tier = self.get_current_subscription(user_id).subscription_tier
        now = datetime.now(timezone.utc).isoformat()

        try:
            self.supabase.table("profiles").update({
                "subscription_tier": new_tier.value,
                "subscription_start_date": now,
                "subscription_end_date": None,
            }).eq("id", user_id).execute()

            self.supabase.table("subscription_history").insert({
                "user_id": user_id,
                "old_tier": old_tier.value,
                "new_tier": new_tier.value,
                "changed_at": now,
                "changed_by": admin_id,
                "reason": reason,
                "metadata": {"changed_at": now, "action": "upgrade"},
            }).execute()
        except Exception as e:
            logger.error(f"Error changing subscription of {user_id} to {new_tier.value}: {e}")
            raise from_upstream(e, "Failed to upgrade subscription")

        logger.info(f"Subscription of {user_id} changed {old_tier.value} -> {new_tier.value} by {admin_id}")

    def check_subscription_limits(self, user_id: str, limit_type: LimitType, current_count: int) -> bool:
        """True while the user may still create another item of limit_type"""
        try:
            result = self.supabase.rpc("check_subscription_limits", {
                "user_id": user_id,
                "limit_type": LimitType(limit_type).value,
                "current_count": current_count,
            }).execute()
        except Exception as e:
            logger.error(f"Error checking {limit_type} limit for {user_id}: {e}")
            raise from_upstream(e, "Failed to check subscription limits")
        return bool(result.data)

    def get_subscription_history(self, user_id: str) -> List[SubscriptionHistory]:
        result = self.supabase.table("subscription_history")\
            .select("*")\
            .eq("user_id", user_id)\
            .order("changed_at", desc=True)\
            .execute()
        return [SubscriptionHistory(**row) for row in (result.data or [])]
