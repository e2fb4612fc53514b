from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.subscriptions.schemas import (
    CurrentSubscription, SubscriptionTier, SubscriptionHistory,
    SubscriptionUpgrade, LimitCheck, LimitCheckResponse
)
from app.modules.subscriptions.service import SubscriptionService
from app.core.dependencies import get_current_user, require_admin
from app.core.errors import NotFoundError
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


def get_subscription_service(supabase: Client = Depends(get_supabase)) -> SubscriptionService:
    return SubscriptionService(supabase)


@router.get("/tiers", response_model=List[SubscriptionTier])
async def list_tiers(service: SubscriptionService = Depends(get_subscription_service)):
    return service.get_all_tiers()


@router.get("/tiers/{tier_id}", response_model=SubscriptionTier)
async def get_tier(tier_id: str, service: SubscriptionService = Depends(get_subscription_service)):
    tier = service.get_subscription_tier(tier_id)
    if tier is None:
        raise NotFoundError("Subscription tier not found")
    return tier


@router.get("/me", response_model=CurrentSubscription)
async def get_my_subscription(
    user_data: Dict = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
):
    return service.get_current_subscription(user_data["id"])


@router.get("/me/history", response_model=List[SubscriptionHistory])
async def get_my_history(
    user_data: Dict = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
):
    return service.get_subscription_history(user_data["id"])


@router.post("/me/limits", response_model=LimitCheckResponse)
async def check_my_limits(
    check: LimitCheck,
    user_data: Dict = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
):
    within = service.check_subscription_limits(user_data["id"], check.limit_type, check.current_count)
    return LimitCheckResponse(within_limit=within)


@router.post("/upgrade", status_code=204)
async def upgrade_subscription(
    upgrade: SubscriptionUpgrade,
    admin: Dict = Depends(require_admin),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Change a user's tier (admin only)"""
    service.upgrade_subscription(admin["id"], upgrade.user_id, upgrade.new_tier, upgrade.reason)
    return None


@router.get("/users/{user_id}/history", response_model=List[SubscriptionHistory])
async def get_user_history(
    user_id: str,
    admin: Dict = Depends(require_admin),
    service: SubscriptionService = Depends(get_subscription_service)
):
    return service.get_subscription_history(user_id)
