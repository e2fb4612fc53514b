import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Optional

from supabase import create_client, Client
from supabase.lib.client_options import ClientOptions

from app.config.settings import settings
from app.core.errors import ServiceError

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def _options(cls) -> ClientOptions:
        return ClientOptions(
            schema="public",
            headers={"x-my-custom-header": settings.app_name},
        )

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key, options=cls._options())
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Use for admin broadcasts."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key, options=cls._options()
            )
        return cls._service_client or cls.get_client()


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()


def _probe(client: Client) -> None:
    # auth.get_session raises on a corrupted session; a missing session is fine
    client.auth.get_session()
    client.table("profiles").select("id").limit(1).execute()


def check_connection(client: Optional[Client] = None, timeout: Optional[float] = None) -> bool:
    """Validate the auth session and a lightweight table read within a timeout."""
    if client is None:
        if not settings.supabase_url or not settings.supabase_key:
            logger.error("Supabase connection check failed: missing configuration")
            return False
        client = get_supabase()
    timeout = timeout if timeout is not None else settings.connection_check_timeout
    started = time.monotonic()
    executor = ThreadPoolExecutor(max_workers=1)
    try:
        executor.submit(_probe, client).result(timeout=timeout)
    except FutureTimeout:
        logger.error(f"Database connection check timed out after {timeout:.1f}s")
        return False
    except Exception as e:
        logger.error(
            f"Database connection check failed: code={getattr(e, 'code', 'UNKNOWN')} message={e}"
        )
        return False
    finally:
        executor.shutdown(wait=False)
    logger.info(f"Database connection successful in {(time.monotonic() - started) * 1000:.0f}ms")
    return True


def get_pooled_connection(client: Optional[Client] = None, attempts: Optional[int] = None, sleep=time.sleep) -> Client:
    """Return the shared client once a health check passes, retrying with an increasing delay."""
    attempts = attempts or settings.connection_check_attempts
    for attempt in range(1, attempts + 1):
        logger.info(f"Connection attempt {attempt}/{attempts}")
        if check_connection(client):
            return client or get_supabase()
        if attempt < attempts:
            sleep(attempt * 1.0)
    raise ServiceError(
        f"Failed to establish database connection after {attempts} attempts",
        "CONNECTION_FAILED",
    )
