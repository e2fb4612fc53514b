from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.group_categories.schemas import (
    GroupCategoryCreate, GroupCategoryUpdate, GroupCategoryResponse
)
from app.modules.group_categories.service import GroupCategoryService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/group-categories", tags=["group-categories"])


def get_group_category_service(supabase: Client = Depends(get_supabase)) -> GroupCategoryService:
    return GroupCategoryService(supabase)


@router.get("", response_model=List[GroupCategoryResponse])
async def list_group_categories(
    user_data: Dict = Depends(get_current_user),
    service: GroupCategoryService = Depends(get_group_category_service)
):
    return service.get_categories()


@router.post("", response_model=GroupCategoryResponse, status_code=201)
async def create_group_category(
    category_data: GroupCategoryCreate,
    user_data: Dict = Depends(get_current_user),
    service: GroupCategoryService = Depends(get_group_category_service)
):
    return service.create_category(category_data.name)


@router.patch("/{category_id}", status_code=204)
async def rename_group_category(
    category_id: str,
    category_data: GroupCategoryUpdate,
    user_data: Dict = Depends(get_current_user),
    service: GroupCategoryService = Depends(get_group_category_service)
):
    service.update_category(category_id, category_data.name)
    return None


@router.delete("/{category_id}", status_code=204)
async def delete_group_category(
    category_id: str,
    user_data: Dict = Depends(get_current_user),
    service: GroupCategoryService = Depends(get_group_category_service)
):
    service.delete_category(category_id)
    return None
