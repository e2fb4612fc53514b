from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.groups.schemas import GroupCreate, GroupUpdate, GiftGroup, ShareLinks
from app.modules.groups.service import GroupService
from app.core.dependencies import get_current_user
from app.core.errors import NotFoundError
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(supabase: Client = Depends(get_supabase)) -> GroupService:
    return GroupService(supabase)


@router.get("", response_model=List[GiftGroup])
async def list_groups(
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Groups the user created plus groups they agreed to join"""
    return service.get_groups(user_data["id"], user_data.get("email"))


@router.post("", response_model=GiftGroup, status_code=201)
async def create_group(
    group_data: GroupCreate,
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    return service.create_group(group_data, user_data)


@router.get("/{group_id}", response_model=GiftGroup)
async def get_group(
    group_id: str,
    service: GroupService = Depends(get_group_service)
):
    """Public read for shared group links"""
    group = service.get_group_by_id(group_id)
    if group is None:
        raise NotFoundError("Group not found")
    return group


@router.get("/{group_id}/share", response_model=ShareLinks)
async def get_share_links(
    group_id: str,
    service: GroupService = Depends(get_group_service)
):
    group = service.get_group_by_id(group_id)
    if group is None:
        raise NotFoundError("Group not found")
    return service.build_share_links(group)


@router.put("/{group_id}", response_model=GiftGroup)
async def update_group(
    group_id: str,
    group_data: GroupUpdate,
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Owner-only update; a participants list replaces the invitee set"""
    return service.update_group(group_id, group_data, user_data["id"])


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    service.delete_group(user_data["id"], group_id)
    return None


@router.post("/{group_id}/copy", response_model=GiftGroup, status_code=201)
async def copy_shared_group(
    group_id: str,
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Add a shared group to the caller's own groups as an independent copy"""
    return service.copy_shared_group(group_id, user_data)


@router.post("/invitations/{notification_id}/accept", response_model=GiftGroup, status_code=201)
async def accept_invitation(
    notification_id: str,
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    return service.accept_group_invitation(notification_id, user_data)
