"""
tests/test_profiles.py
Signup, sessions, profile updates, reminder preferences and reference data.
"""

import pytest

from app.core.errors import AccessDeniedError, NotFoundError, ValidationError
from app.modules.auth.schemas import LoginRequest, RegisterRequest
from app.modules.auth.service import AuthService, clear_auth_cache
from app.modules.profiles.schemas import NotificationPreferencesUpdate, ProfileUpdate
from app.modules.profiles.service import ProfileService


@pytest.fixture(autouse=True)
def fresh_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def profiles(supabase):
    return ProfileService(supabase)


def test_register_creates_profile_and_interests(supabase):
    response = AuthService(supabase).register(RegisterRequest(
        email="new@example.com", password="Secret123!", nickname="Newbie",
        country="DE", currency="EUR", interests=["books", "music"],
    ))

    [profile] = supabase.rows("profiles")
    assert profile["id"] == response.user_id
    assert profile["nickname"] == "Newbie"
    assert profile["currency"] == "EUR"
    assert [row["category_id"] for row in supabase.rows("user_interests")] == ["books", "music"]


def test_register_survives_interest_failure(supabase):
    supabase.fail("user_interests", RuntimeError("insert failed"), action="insert")
    response = AuthService(supabase).register(RegisterRequest(
        email="new@example.com", password="Secret123!", interests=["books"],
    ))
    assert response.email == "new@example.com"
    assert len(supabase.rows("profiles")) == 1


def test_register_existing_user(supabase, owner):
    with pytest.raises(ValidationError):
        AuthService(supabase).register(RegisterRequest(email="owner@example.com", password="x"))


def test_login(supabase, owner):
    token = AuthService(supabase).login(LoginRequest(email="owner@example.com", password="secret-password"))
    assert token.access_token == "owner-token"
    with pytest.raises(AccessDeniedError) as exc:
        AuthService(supabase).login(LoginRequest(email="owner@example.com", password="wrong"))
    assert exc.value.code == "UNAUTHENTICATED"


def test_current_user(supabase, owner):
    auth = AuthService(supabase)
    assert auth.get_current_user("owner-token")["email"] == "owner@example.com"
    with pytest.raises(AccessDeniedError) as exc:
        auth.get_current_user("bogus")
    assert exc.value.code == "SESSION_EXPIRED"
    assert auth.get_optional_user("bogus") is None
    assert auth.get_optional_user(None) is None


def test_update_profile(profiles, owner):
    profile = profiles.update_profile(owner["id"], ProfileUpdate(full_name="Olive Owner", currency="GBP"))
    assert profile.full_name == "Olive Owner"
    assert profile.currency == "GBP"
    assert profile.nickname == "Owner"
    assert profile.updated_at is not None


def test_update_missing_profile(profiles):
    with pytest.raises(NotFoundError):
        profiles.update_profile("missing", ProfileUpdate(nickname="x"))


def test_notification_preferences_are_merged(profiles, supabase, owner):
    supabase.rows("profiles")[0]["calendar_preferences"] = {"defaultView": "month", "notifications": {"enabled": False}}

    profile = profiles.update_notification_preferences(owner["id"], NotificationPreferencesUpdate(before_event=30))

    assert profile.calendar_preferences == {
        "defaultView": "month",
        "notifications": {"enabled": False, "beforeEvent": 30},
    }


def test_user_ids_by_email(profiles, owner, friend):
    ids = profiles.get_user_ids_by_email(["owner@example.com", "friend@example.com", "unknown@example.com"])
    assert ids == {"owner@example.com": owner["id"], "friend@example.com": friend["id"]}
    assert profiles.get_user_ids_by_email([]) == {}


def test_reference_lists_only_active_rows(profiles, supabase):
    supabase.seed(
        "currencies",
        {"code": "USD", "name": "US Dollar", "symbol": "$", "is_active": True},
        {"code": "EUR", "name": "Euro", "symbol": "€", "is_active": True},
        {"code": "DEM", "name": "Deutsche Mark", "is_active": False},
    )
    assert [c.code for c in profiles.list_currencies()] == ["EUR", "USD"]
