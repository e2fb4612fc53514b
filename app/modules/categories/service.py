from supabase import Client
from app.modules.categories.schemas import CategoryCreate, CategoryResponse
from app.core.colors import random_pastel_color
from app.core.errors import CategoryError, from_upstream
from app.core.retry import RetryPolicy, is_transient_error, is_transient_read_error
from typing import Callable, List, Optional
from datetime import date, datetime, time, timezone
import logging

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "name", "created_at")


def _unless_category_error(predicate: Callable[[BaseException], bool]) -> Callable[[BaseException], bool]:
    # Errors we raised ourselves are final; only upstream errors are retried
    return lambda e: not isinstance(e, CategoryError) and predicate(e)


def occasion_timestamp(occasion: date) -> str:
    if not isinstance(occasion, datetime):
        occasion = datetime.combine(occasion, time.min, tzinfo=timezone.utc)
    return occasion.isoformat()


class CategoryService:
    def __init__(self, supabase: Client, retry_policy: Optional[RetryPolicy] = None):
        self.supabase = supabase
        policy = retry_policy or RetryPolicy.from_settings()
        self.read_policy = policy.with_predicate(_unless_category_error(is_transient_read_error))
        self.write_policy = policy.with_predicate(_unless_category_error(is_transient_error))

    def get_categories(self, user_id: str) -> List[CategoryResponse]:
        """Fetch a user's categories, newest first"""
        if not user_id:
            raise CategoryError("User ID is required to fetch categories", "MISSING_USER_ID")
        try:
            return self.read_policy.call(self._fetch_categories, user_id, operation="get_categories")
        except CategoryError:
            raise
        except Exception as e:
            logger.error(f"Error in get_categories for user {user_id}: {e}")
            raise from_upstream(e, "Failed to fetch categories", CategoryError)

    def _fetch_categories(self, user_id: str) -> List[CategoryResponse]:
        try:
            self.supabase.table("gift_categories").select("id").limit(1).execute()
        except Exception as e:
            logger.error(f"Error checking gift_categories table: {e}")
            raise CategoryError("Database not properly initialized", "DB_NOT_INITIALIZED", str(e))

        result = self.supabase.table("gift_categories")\
            .select("*")\
            .eq("user_id", user_id)\
            .order("created_at", desc=True)\
            .execute()

        if not result.data:
            return []

        if not all(isinstance(row, dict) and all(k in row for k in REQUIRED_FIELDS) for row in result.data):
            logger.error(f"Invalid data structure received: {result.data}")
            raise CategoryError(
                "Invalid data structure received from the server",
                "INVALID_DATA_STRUCTURE",
                result.data,
            )

        categories = []
        for row in result.data:
            try:
                categories.append(self._to_category(row))
            except Exception as e:
                logger.error(f"Error mapping category record {row}: {e}")
                raise CategoryError("Failed to process category data", "DATA_MAPPING_ERROR", {"record": row})
        logger.debug(f"Mapped {len(categories)} categories for user {user_id}")
        return categories

    def _to_category(self, row: dict) -> CategoryResponse:
        if not row.get("id") or not row.get("name") or not row.get("created_at"):
            raise ValueError("Missing required fields in category record")
        return CategoryResponse(
            id=row["id"],
            title=row["name"],
            date=row["created_at"],
            color=row.get("color") or random_pastel_color(),
        )

    def create_category(self, user_id: str, category_data: CategoryCreate) -> CategoryResponse:
        """Create a category; the occasion date is stored in created_at and echoed in the description"""
        if not user_id:
            raise CategoryError("User ID is required to create a category", "MISSING_USER_ID")
        color = random_pastel_color()
        try:
            return self.write_policy.call(
                self._insert_category, user_id, category_data, color, operation="create_category"
            )
        except CategoryError:
            raise
        except Exception as e:
            logger.error(f"Error in create_category for user {user_id}: {e}")
            raise from_upstream(e, "Failed to create category", CategoryError)

    def _insert_category(self, user_id: str, category_data: CategoryCreate, color: str) -> CategoryResponse:
        result = self.supabase.table("gift_categories").insert({
            "user_id": user_id,
            "name": category_data.title,
            "description": f"Occasion date: {category_data.date.isoformat()[:10]}",
            "created_at": occasion_timestamp(category_data.date),
            "color": color,
        }).execute()

        if not result.data:
            raise CategoryError("No data returned after category creation", "NO_DATA_RETURNED")

        row = result.data[0]
        return CategoryResponse(id=row["id"], title=row["name"], date=row["created_at"], color=row["color"])

    def delete_category(self, user_id: str, category_id: str) -> None:
        """Delete a category; deleting a missing id is not an error"""
        if not user_id or not category_id:
            raise CategoryError(
                "User ID and category ID are required to delete a category",
                "MISSING_PARAMETERS",
            )
        try:
            self.write_policy.call(self._delete_category, user_id, category_id, operation="delete_category")
        except CategoryError:
            raise
        except Exception as e:
            logger.error(f"Error in delete_category {category_id} for user {user_id}: {e}")
            raise from_upstream(e, "Failed to delete category", CategoryError)

    def _delete_category(self, user_id: str, category_id: str) -> None:
        self.supabase.table("gift_categories")\
            .delete()\
            .eq("user_id", user_id)\
            .eq("id", category_id)\
            .execute()
