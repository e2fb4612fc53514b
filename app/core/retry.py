"""Retry with exponential backoff for transient database errors."""

import logging
import time
from typing import Callable, Optional, TypeVar

from app.config.settings import settings
from app.core.errors import (
    PGRST_JWT_INVALID, PGRST_NO_ROWS, PG_SERIALIZATION_FAILURE,
    error_code, error_message,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSIENT_CODES = {PGRST_JWT_INVALID, PG_SERIALIZATION_FAILURE}


def is_transient_error(exc: BaseException) -> bool:
    """Unauthorized token, serialization failure, or a dropped connection."""
    if error_code(exc) in _TRANSIENT_CODES:
        return True
    return "connection" in error_message(exc).lower()


def is_transient_read_error(exc: BaseException) -> bool:
    """Read paths also retry on empty single-row results and network timeouts."""
    if is_transient_error(exc) or error_code(exc) == PGRST_NO_ROWS:
        return True
    message = error_message(exc).lower()
    return "network" in message or "timeout" in message


class RetryPolicy:
    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        is_retryable: Callable[[BaseException], bool] = is_transient_error,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.is_retryable = is_retryable
        self.sleep = sleep

    @classmethod
    def from_settings(cls, is_retryable: Callable[[BaseException], bool] = is_transient_error) -> "RetryPolicy":
        return cls(
            max_retries=settings.retry_max_retries,
            base_delay=settings.retry_base_delay,
            is_retryable=is_retryable,
        )

    def with_predicate(self, is_retryable: Callable[[BaseException], bool]) -> "RetryPolicy":
        return RetryPolicy(self.max_retries, self.base_delay, is_retryable, self.sleep)

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)

    def call(self, fn: Callable[..., T], *args, operation: Optional[str] = None, **kwargs) -> T:
        name = operation or getattr(fn, "__name__", "operation")
        attempt = 0
        while True:
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                if attempt >= self.max_retries or not self.is_retryable(e):
                    raise
                delay = self.delay_for(attempt)
                attempt += 1
                logger.warning(
                    f"Retrying {name} (attempt {attempt} of {self.max_retries}) in {delay:.1f}s: {error_message(e)}"
                )
                self.sleep(delay)
