"""
Typed service errors and their mapping to user-facing messages.

Services raise ServiceError (or a subclass) carrying a machine readable code.
Route handlers never build error responses themselves: the exception handler
registered in app.main turns the code into an HTTP status and a message via
describe_error().
"""

from typing import Any, Optional, Tuple
from postgrest.exceptions import APIError


# Upstream PostgREST / Postgres codes we treat specially
PGRST_JWT_INVALID = "PGRST301"
PGRST_NO_ROWS = "PGRST116"
PG_SERIALIZATION_FAILURE = "40001"
PG_INSUFFICIENT_PRIVILEGE = "42501"


class ServiceError(Exception):
    """Error envelope: message + code + details."""

    def __init__(self, message: str, code: Optional[str] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code or "UNKNOWN_ERROR"
        self.details = details

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(ServiceError):
    def __init__(self, message: str, details: Any = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class NotFoundError(ServiceError):
    def __init__(self, message: str, details: Any = None):
        super().__init__(message, "NOT_FOUND", details)


class AccessDeniedError(ServiceError):
    def __init__(self, message: str = "Access denied", code: str = "ACCESS_DENIED", details: Any = None):
        super().__init__(message, code, details)


class CategoryError(ServiceError):
    pass


def error_code(exc: BaseException) -> Optional[str]:
    code = getattr(exc, "code", None)
    return str(code) if code is not None else None


def error_message(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    return str(message) if message else str(exc)


def from_upstream(exc: BaseException, fallback_message: str, error_cls=ServiceError) -> ServiceError:
    """Wrap any exception raised by a remote call into a ServiceError, keeping the upstream code."""
    if isinstance(exc, ServiceError):
        return exc
    details = {"details": getattr(exc, "details", None), "hint": getattr(exc, "hint", None)}
    if not isinstance(exc, APIError):
        details["original_error"] = repr(exc)
    return error_cls(error_message(exc) or fallback_message, error_code(exc) or "UNKNOWN_ERROR", details)


_ACCESS_CODES = {PGRST_JWT_INVALID, PG_INSUFFICIENT_PRIVILEGE, "ACCESS_DENIED", "SESSION_EXPIRED", "UNAUTHENTICATED"}
_ACCESS_MARKERS = ("jwt expired", "session", "permission denied", "row-level security", "not authorized")


def is_access_error(exc: BaseException) -> bool:
    """True for expired sessions, permission denials and RLS rejections."""
    if error_code(exc) in _ACCESS_CODES:
        return True
    message = error_message(exc).lower()
    return any(marker in message for marker in _ACCESS_MARKERS)


# code -> (HTTP status, message shown to the user)
ERROR_MESSAGES = {
    "MISSING_USER_ID": (400, "Please sign in again to continue."),
    "MISSING_PARAMETERS": (400, "Some required information is missing."),
    "VALIDATION_ERROR": (400, "Please fill in all required fields."),
    "NOT_FOUND": (404, "The requested item could not be found."),
    "UNAUTHENTICATED": (401, "Please sign in to continue."),
    "SESSION_EXPIRED": (401, "Your session has expired. Please sign in again."),
    "ACCESS_DENIED": (403, "You don't have permission to perform this action."),
    PGRST_JWT_INVALID: (401, "Your session has expired. Please sign in again."),
    PG_INSUFFICIENT_PRIVILEGE: (403, "You don't have permission to perform this action."),
    PGRST_NO_ROWS: (404, "The requested item could not be found."),
    PG_SERIALIZATION_FAILURE: (409, "The data changed while saving. Please try again."),
    "DB_NOT_INITIALIZED": (503, "The database is not ready yet. Please try again later."),
    "CONNECTION_FAILED": (503, "Unable to reach the database. Please try again later."),
    "INVALID_DATA_STRUCTURE": (502, "Received unexpected data from the server."),
    "DATA_MAPPING_ERROR": (502, "Received unexpected data from the server."),
    "NO_DATA_RETURNED": (502, "The server did not return the saved item."),
}


def describe_error(error: ServiceError) -> Tuple[int, str]:
    if error.code in ERROR_MESSAGES:
        return ERROR_MESSAGES[error.code]
    if is_access_error(error):
        return 401, "Your session has expired. Please sign in again."
    return 500, error.message or "Something went wrong. Please try again."
