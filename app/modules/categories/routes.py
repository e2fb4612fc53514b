from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.categories.schemas import CategoryCreate, CategoryResponse
from app.modules.categories.service import CategoryService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/categories", tags=["categories"])


def get_category_service(supabase: Client = Depends(get_supabase)) -> CategoryService:
    return CategoryService(supabase)


@router.get("", response_model=List[CategoryResponse])
def list_categories(
    user_data: Dict = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service)
):
    """List the current user's gift categories"""
    return service.get_categories(user_data["id"])


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    category_data: CategoryCreate,
    user_data: Dict = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service)
):
    return service.create_category(user_data["id"], category_data)


@router.delete("/{category_id}", status_code=204)
def delete_category(
    category_id: str,
    user_data: Dict = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service)
):
    service.delete_category(user_data["id"], category_id)
    return None
