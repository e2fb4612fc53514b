from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.gifts.schemas import GiftCreate, GiftUpdate, GiftResponse, RecipientLookup
from app.modules.gifts.service import GiftService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(tags=["gifts"])


def get_gift_service(supabase: Client = Depends(get_supabase)) -> GiftService:
    return GiftService(supabase)


@router.get("/categories/{category_id}/gifts", response_model=List[GiftResponse])
def list_gifts(
    category_id: str,
    user_data: Dict = Depends(get_current_user),
    service: GiftService = Depends(get_gift_service)
):
    return service.get_gifts(user_data["id"], category_id)


@router.get("/categories/{category_id}/gifts/count")
def count_gifts(
    category_id: str,
    user_data: Dict = Depends(get_current_user),
    service: GiftService = Depends(get_gift_service)
):
    return {"count": service.get_gift_count(user_data["id"], category_id)}


@router.post("/categories/{category_id}/gifts", response_model=GiftResponse, status_code=201)
def create_gift(
    category_id: str,
    gift_data: GiftCreate,
    user_data: Dict = Depends(get_current_user),
    service: GiftService = Depends(get_gift_service)
):
    """Create a gift; image_url is derived from the product url"""
    return service.create_gift(user_data["id"], category_id, gift_data)


@router.patch("/gifts/{gift_id}", response_model=GiftResponse)
def update_gift(
    gift_id: str,
    updates: GiftUpdate,
    user_data: Dict = Depends(get_current_user),
    service: GiftService = Depends(get_gift_service)
):
    return service.update_gift(user_data["id"], gift_id, updates)


@router.delete("/gifts/{gift_id}", status_code=204)
def delete_gift(
    gift_id: str,
    user_data: Dict = Depends(get_current_user),
    service: GiftService = Depends(get_gift_service)
):
    service.delete_gift(user_data["id"], gift_id)
    return None


@router.get("/gifts/recipients/lookup", response_model=Optional[RecipientLookup])
def lookup_recipient(
    email: str,
    user_data: Dict = Depends(get_current_user),
    service: GiftService = Depends(get_gift_service)
):
    """Suggest a recipient name for an email address of a registered user"""
    return service.lookup_recipient_by_email(email)
