import os

# Set environment variables BEFORE importing app modules
os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("PUBLIC_APP_URL", "https://gifts.example.com")
os.environ.setdefault("RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from app.core.retry import RetryPolicy
from app.database import realtime as realtime_module
from app.database.realtime import RealtimeGateway
from app.database.supabase_client import get_service_supabase, get_supabase
from app.modules.auth.service import clear_auth_cache
from tests.fakes import FakeRealtimeClient, FakeSupabase, add_profile


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def no_wait_policy():
    """Retry policy that records delays instead of sleeping"""
    delays = []
    policy = RetryPolicy(max_retries=3, base_delay=1.0, sleep=delays.append)
    policy.delays = delays
    return policy


@pytest.fixture
def realtime_client():
    return FakeRealtimeClient()


@pytest.fixture
def realtime(realtime_client, monkeypatch):
    async def factory():
        return realtime_client

    gateway = RealtimeGateway(client_factory=factory)
    monkeypatch.setattr(realtime_module, "realtime_gateway", gateway)
    return gateway


@pytest.fixture
def owner(supabase):
    """Registered user with a profile and a bearer token"""
    user = supabase.auth.add_user("owner@example.com", token="owner-token")
    add_profile(supabase, "owner@example.com", id=user.id, nickname="Owner")
    return {"id": user.id, "email": user.email, "token": "owner-token"}


@pytest.fixture
def friend(supabase):
    user = supabase.auth.add_user("friend@example.com", token="friend-token")
    add_profile(supabase, "friend@example.com", id=user.id, nickname="Friend")
    return {"id": user.id, "email": user.email, "token": "friend-token"}


@pytest.fixture
def api(supabase, realtime):
    from app.main import app

    clear_auth_cache()
    app.dependency_overrides[get_supabase] = lambda: supabase
    app.dependency_overrides[get_service_supabase] = lambda: supabase
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
    clear_auth_cache()


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {user['token']}"}
