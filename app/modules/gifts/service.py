from supabase import Client
from app.modules.gifts.schemas import GiftCreate, GiftUpdate, GiftResponse, RecipientLookup
from app.modules.gifts.product_images import derive_image_url, favicon_url, parse_hostname
from app.core.errors import NotFoundError, from_upstream
from app.core.retry import RetryPolicy, is_transient_error, is_transient_read_error
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class GiftService:
    def __init__(self, supabase: Client, retry_policy: Optional[RetryPolicy] = None):
        self.supabase = supabase
        policy = retry_policy or RetryPolicy.from_settings()
        self.read_policy = policy.with_predicate(is_transient_read_error)
        self.write_policy = policy.with_predicate(is_transient_error)

    def get_gifts(self, user_id: str, category_id: str) -> List[GiftResponse]:
        """List gifts of one category, oldest first"""
        def fetch():
            return self.supabase.table("gifts")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq("category_id", category_id)\
                .order("created_at")\
                .execute()
        try:
            result = self.read_policy.call(fetch, operation="get_gifts")
        except Exception as e:
            logger.error(f"Database error in get_gifts: {e}")
            raise from_upstream(e, "Failed to fetch gifts")
        return [GiftResponse(**row) for row in (result.data or [])]

    def create_gift(self, user_id: str, category_id: str, gift_data: GiftCreate) -> GiftResponse:
        """Create a gift; the thumbnail is derived from the product url and never fails the insert"""
        url = gift_data.url.strip() if gift_data.url else None
        image_url = None
        if url:
            try:
                image_url = derive_image_url(url)
            except Exception as e:
                logger.error(f"Error extracting product image from {url}: {e}")
                hostname = parse_hostname(url)
                image_url = favicon_url(hostname) if hostname else None

        def insert():
            return self.supabase.table("gifts").insert({
                "user_id": user_id,
                "category_id": category_id,
                "recipient": gift_data.recipient,
                "recipient_email": gift_data.recipient_email or None,
                "name": gift_data.name,
                "price": gift_data.price or None,
                "url": url or None,
                "image_url": image_url,
                "is_purchased": False,
            }).execute()
        try:
            result = self.write_policy.call(insert, operation="create_gift")
        except Exception as e:
            logger.error(f"Database error in create_gift: {e}")
            raise from_upstream(e, "Failed to create gift")

        if not result.data:
            raise NotFoundError("Gift was not returned after creation")
        return GiftResponse(**result.data[0])

    def update_gift(self, user_id: str, gift_id: str, updates: GiftUpdate) -> GiftResponse:
        update_data = updates.model_dump(exclude_unset=True)
        if "url" in update_data:
            update_data["image_url"] = derive_image_url(update_data["url"])
        logger.debug(f"Updating gift {gift_id} for user {user_id}: {update_data}")

        def update():
            return self.supabase.table("gifts")\
                .update(update_data)\
                .eq("user_id", user_id)\
                .eq("id", gift_id)\
                .execute()
        try:
            result = self.write_policy.call(update, operation="update_gift")
        except Exception as e:
            logger.error(f"Database error in update_gift: {e}")
            raise from_upstream(e, "Failed to update gift")

        if not result.data:
            raise NotFoundError("Gift not found")
        return GiftResponse(**result.data[0])

    def delete_gift(self, user_id: str, gift_id: str) -> bool:
        def delete():
            return self.supabase.table("gifts")\
                .delete()\
                .eq("user_id", user_id)\
                .eq("id", gift_id)\
                .execute()
        try:
            result = self.write_policy.call(delete, operation="delete_gift")
        except Exception as e:
            logger.error(f"Database error in delete_gift: {e}")
            raise from_upstream(e, "Failed to delete gift")
        return bool(result.data)

    def get_gift_count(self, user_id: str, category_id: str) -> int:
        def count():
            return self.supabase.table("gifts")\
                .select("id", count="exact")\
                .eq("user_id", user_id)\
                .eq("category_id", category_id)\
                .execute()
        try:
            result = self.read_policy.call(count, operation="get_gift_count")
        except Exception as e:
            logger.error(f"Database error in get_gift_count: {e}")
            raise from_upstream(e, "Failed to count gifts")
        return result.count or 0

    def lookup_recipient_by_email(self, email: str) -> Optional[RecipientLookup]:
        """Nickname of a registered user, None when unknown or on any error"""
        try:
            result = self.supabase.rpc("lookup_user_by_email", {"lookup_email": email}).execute()
        except Exception as e:
            logger.error(f"Error looking up profile for {email}: {e}")
            return None
        data = result.data
        if isinstance(data, list):
            data = data[0] if data else None
        if not data or not data.get("nickname"):
            return None
        return RecipientLookup(nickname=data["nickname"])
