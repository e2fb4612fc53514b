from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_supabase
from app.modules.profiles.schemas import (
    ProfileUpdate, ProfileResponse, NotificationPreferencesUpdate, InterestsAdd, ReferenceItem
)
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    profile = service.get_profile(user_data["id"])
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    return service.update_profile(user_data["id"], profile_data)


@router.put("/me/notification-preferences", response_model=ProfileResponse)
async def update_notification_preferences(
    preferences: NotificationPreferencesUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Enable/disable reminders or change how many minutes before an event they fire"""
    return service.update_notification_preferences(user_data["id"], preferences)


@router.post("/me/interests", status_code=201)
async def add_interests(
    interests: InterestsAdd,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    return {"added": service.add_interests(user_data["id"], interests.category_ids)}


@router.get("/reference/countries", response_model=List[ReferenceItem])
async def list_countries(service: ProfileService = Depends(get_profile_service)):
    return service.list_countries()


@router.get("/reference/currencies", response_model=List[ReferenceItem])
async def list_currencies(service: ProfileService = Depends(get_profile_service)):
    return service.list_currencies()


@router.get("/reference/interests", response_model=List[ReferenceItem])
async def list_predefined_categories(service: ProfileService = Depends(get_profile_service)):
    return service.list_predefined_categories()
