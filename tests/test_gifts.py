"""
tests/test_gifts.py
Gift ideas inside a category: thumbnails, updates, counts and recipient lookup.
"""

import pytest

from app.core.errors import NotFoundError
from app.modules.gifts.product_images import favicon_url
from app.modules.gifts.schemas import GiftCreate, GiftUpdate
from app.modules.gifts.service import GiftService


@pytest.fixture
def service(supabase, no_wait_policy):
    return GiftService(supabase, retry_policy=no_wait_policy)


def _gift(**overrides) -> GiftCreate:
    fields = {"recipient": "Mum", "name": "Headphones", "price": 99.5}
    fields.update(overrides)
    return GiftCreate(**fields)


def test_create_gift_derives_thumbnail(service):
    gift = service.create_gift("user-1", "cat-1", _gift(url=" https://www.amazon.com/dp/B08N5WRWNW "))
    assert gift.url == "https://www.amazon.com/dp/B08N5WRWNW"
    assert gift.image_url == "https://images-na.ssl-images-amazon.com/images/P/B08N5WRWNW.jpg"
    assert gift.is_purchased is False


def test_malformed_url_does_not_fail_creation(service, supabase):
    gift = service.create_gift("user-1", "cat-1", _gift(url="definitely not a url"))
    assert gift.image_url is None
    assert len(supabase.rows("gifts")) == 1


def test_gift_without_url(service):
    gift = service.create_gift("user-1", "cat-1", _gift())
    assert gift.url is None
    assert gift.image_url is None


def test_get_gifts_is_scoped_to_category(service):
    service.create_gift("user-1", "cat-1", _gift(name="First"))
    service.create_gift("user-1", "cat-1", _gift(name="Second"))
    service.create_gift("user-1", "cat-2", _gift(name="Elsewhere"))
    service.create_gift("user-2", "cat-1", _gift(name="Someone else's"))

    assert [g.name for g in service.get_gifts("user-1", "cat-1")] == ["First", "Second"]
    assert service.get_gift_count("user-1", "cat-1") == 2
    assert service.get_gift_count("user-1", "cat-3") == 0


def test_update_url_rederives_thumbnail(service):
    gift = service.create_gift("user-1", "cat-1", _gift(url="https://www.target.com/p/-/A-81234567"))
    updated = service.update_gift("user-1", gift.id, GiftUpdate(url="https://shop.example.org/mug"))
    assert updated.image_url == favicon_url("shop.example.org")


def test_update_leaves_unset_fields_alone(service):
    gift = service.create_gift("user-1", "cat-1", _gift(url="https://www.walmart.com/ip/123"))
    updated = service.update_gift("user-1", gift.id, GiftUpdate(is_purchased=True))
    assert updated.is_purchased is True
    assert updated.name == "Headphones"
    assert updated.image_url == gift.image_url


def test_update_missing_gift(service):
    with pytest.raises(NotFoundError):
        service.update_gift("user-1", "missing", GiftUpdate(name="x"))


def test_delete_gift(service):
    gift = service.create_gift("user-1", "cat-1", _gift())
    assert service.delete_gift("user-2", gift.id) is False
    assert service.delete_gift("user-1", gift.id) is True
    assert service.get_gifts("user-1", "cat-1") == []


def test_lookup_recipient(service, supabase):
    supabase.rpc_handlers["lookup_user_by_email"] = lambda params: [{"nickname": "Ann"}] if params["lookup_email"] == "ann@example.com" else []
    assert service.lookup_recipient_by_email("ann@example.com").nickname == "Ann"
    assert service.lookup_recipient_by_email("nobody@example.com") is None


def test_lookup_recipient_swallows_errors(service, supabase):
    def broken(params):
        raise RuntimeError("function lookup_user_by_email does not exist")

    supabase.rpc_handlers["lookup_user_by_email"] = broken
    assert service.lookup_recipient_by_email("ann@example.com") is None
