from supabase import Client
from app.modules.group_categories.schemas import GroupCategoryResponse
from app.core.colors import random_pastel_color
from app.core.errors import NotFoundError, from_upstream
from typing import List
import logging

logger = logging.getLogger(__name__)


class GroupCategoryService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_categories(self) -> List[GroupCategoryResponse]:
        """All group categories, newest first"""
        try:
            result = self.supabase.table("group_categories")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching group categories: {e}")
            raise from_upstream(e, "Failed to fetch group categories")
        return [GroupCategoryResponse(**row) for row in (result.data or [])]

    def create_category(self, name: str) -> GroupCategoryResponse:
        try:
            result = self.supabase.table("group_categories").insert({
                "name": name,
                "color": random_pastel_color(),
            }).execute()
        except Exception as e:
            logger.error(f"Error creating group category {name}: {e}")
            raise from_upstream(e, "Failed to create group category")

        if not result.data:
            raise NotFoundError("Group category was not returned after creation")
        return GroupCategoryResponse(**result.data[0])

    def update_category(self, category_id: str, name: str) -> None:
        try:
            self.supabase.table("group_categories")\
                .update({"name": name})\
                .eq("id", category_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error renaming group category {category_id}: {e}")
            raise from_upstream(e, "Failed to update group category")

    def delete_category(self, category_id: str) -> None:
        try:
            self.supabase.table("group_categories")\
                .delete()\
                .eq("id", category_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting group category {category_id}: {e}")
            raise from_upstream(e, "Failed to delete group category")
