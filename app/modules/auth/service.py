import hashlib
import time
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from app.modules.profiles.schemas import ProfileCreate
from app.modules.profiles.service import ProfileService
from app.core.errors import AccessDeniedError, ServiceError, ValidationError
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a user with Supabase Auth, then create the profile and interests"""
        try:
            user_metadata = {}
            if register_data.nickname:
                user_metadata["nickname"] = register_data.nickname
            if register_data.full_name:
                user_metadata["full_name"] = register_data.full_name

            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise ValidationError("User already exists")
            raise ServiceError(f"Registration failed: {error_message}", "REGISTRATION_FAILED")

        if not auth_response.user:
            raise ServiceError("Failed to register user", "REGISTRATION_FAILED")

        user_id = auth_response.user.id
        profiles = ProfileService(self.supabase)
        profiles.create_profile(user_id, ProfileCreate(
            email=register_data.email,
            nickname=register_data.nickname,
            full_name=register_data.full_name,
            country=register_data.country,
            currency=register_data.currency,
        ))
        profiles.add_interests(user_id, register_data.interests)

        return RegisterResponse(
            user_id=user_id,
            email=auth_response.user.email or register_data.email,
            message="Registration successful. Please check your email to verify your account."
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise AccessDeniedError("Invalid email or password", "UNAUTHENTICATED")
            raise ServiceError(f"Login failed: {error_message}", "LOGIN_FAILED")

        if not auth_response.user or not auth_response.session:
            raise AccessDeniedError("Invalid credentials", "UNAUTHENTICATED")

        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        cache_key = hashlib.sha256(token.encode()).hexdigest()
        now = time.monotonic()
        if cache_key in _AUTH_USER_CACHE:
            user_data, expiry = _AUTH_USER_CACHE[cache_key]
            if now < expiry:
                return user_data
            del _AUTH_USER_CACHE[cache_key]
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise AccessDeniedError("Invalid or expired token", "SESSION_EXPIRED")
            raise AccessDeniedError("Authentication failed", "UNAUTHENTICATED")
        if not user_response or not user_response.user:
            raise AccessDeniedError("Invalid or expired token", "SESSION_EXPIRED")
        user = user_response.user
        user_data = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
        }
        if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
            _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
        return user_data

    def get_optional_user(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """Like get_current_user, but a missing or dead session yields None"""
        if not token:
            return None
        try:
            return self.get_current_user(token)
        except AccessDeniedError as e:
            logger.info(f"No authenticated user: {e.message}")
            return None

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Supabase Auth tokens are stateless JWTs; the token expires on its own
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Error signing out: {e}")
            return False
