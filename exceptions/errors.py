"""
Custom exception classes for the terminal.

Expected application failures (not found, conflict, rejected moves) travel
as Failure results, not exceptions. The classes here cover client-side
validation, transport faults and programming errors, and give every error
code a category in the same taxonomy.
"""

from enum import Enum
from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all terminal errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "NETWORK_ERROR")
        message: Human-readable message
        status_code: HTTP status code used by the terminal API
        details: Additional context
        transient: Whether repeating the request may succeed
    """

    transient = False

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Client-side validation failed (422). Never retried."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class NotFoundError(AppError):
    """Backend reported a missing resource (404). Never retried."""

    def __init__(
        self,
        message: str,
        code: str = "NOT_FOUND",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=404,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409). Never retried."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


# ===================
# TRANSPORT ERRORS
# ===================

class NetworkError(AppError):
    """Connection-level failure reaching the backend (transient)."""

    transient = True

    def __init__(
        self,
        message: str = "Error de red - verifica tu conexión a internet",
        details: Optional[dict] = None
    ):
        super().__init__(
            code="NETWORK_ERROR",
            message=message,
            status_code=503,
            details=details
        )


class RequestTimeoutError(NetworkError):
    """Request attempt exceeded its timeout (transient)."""

    def __init__(
        self,
        timeout_ms: Optional[int],
        details: Optional[dict] = None,
        message: str = "Tiempo de espera agotado - la petición tardó demasiado"
    ):
        super().__init__(
            message=message,
            details={"timeout_ms": timeout_ms, **(details or {})}
        )
        self.code = "TIMEOUT_ERROR"
        self.status_code = 504


class ServerError(AppError):
    """Backend failed to process the request (5xx with a structured error)."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=502,
            details=details
        )


class UnknownError(AppError):
    """Failure code outside the taxonomy. Logged with its full payload."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=500,
            details=details
        )


# ===================
# SCAN SESSION ERRORS
# ===================

class InvalidTransitionError(ValidationError):
    """Scan state machine received an event its current state does not accept."""

    def __init__(self, current_state: str, event: str):
        super().__init__(
            code="INVALID_STATE_TRANSITION",
            message=f"Cannot apply {event} while {current_state}",
            details={
                "current_state": current_state,
                "event": event,
            }
        )


# ===================
# CLASSIFICATION
# ===================

class ErrorCategory(str, Enum):
    """Taxonomy shared by exceptions and Failure error codes."""

    VALIDATION = "VALIDATION"
    NETWORK = "NETWORK"
    TIMEOUT = "TIMEOUT"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    SERVER = "SERVER"
    UNKNOWN = "UNKNOWN"


VALIDATION_CODES = {
    "VALIDATION_ERROR",
    "EMPTY",
    "UNRECOGNIZED_FORMAT",
    "INVALID_LOCATION",
    "SCAN_IN_PROGRESS",
    "NO_PENDING_CONFIRMATION",
    "SALE_NOT_DRAFT",
    "BOX_COUNT_EXCEEDED",
    "EGGS_EXCEEDED",
    "EGGS_INCOMPLETE",
    "NO_REQUESTED_CALIBRES",
    "BOX_NOT_IN_BODEGA",
    "PALLET_NOT_IN_BODEGA",
    "PALLET_NO_BOXES_IN_BODEGA",
}

SERVER_CODES = {
    "INTERNAL_ERROR",
    "SERVICE_UNAVAILABLE",
    "DATABASE_ERROR",
    "RATE_LIMIT_EXCEEDED",
    "THROTTLING_ERROR",
    "PARSE_ERROR",
    "HTTP_ERROR",
}


def categorize(error_code: Optional[str]) -> ErrorCategory:
    """
    Place an error code in the taxonomy.

    Args:
        error_code: Code from a Failure result or an AppError

    Returns:
        ErrorCategory (UNKNOWN when nothing matches)
    """
    code = str(error_code or "").upper()

    if code == "NETWORK_ERROR":
        return ErrorCategory.NETWORK
    if code == "TIMEOUT_ERROR":
        return ErrorCategory.TIMEOUT
    if code in VALIDATION_CODES or code.startswith("INVALID_"):
        return ErrorCategory.VALIDATION
    if code == "NOT_FOUND" or code.endswith("_NOT_FOUND") or "_NOT_IN_" in code:
        return ErrorCategory.NOT_FOUND
    if code == "CONFLICT" or code.endswith("_EXISTS") or "_ALREADY_" in code:
        return ErrorCategory.CONFLICT
    if code in SERVER_CODES:
        return ErrorCategory.SERVER
    return ErrorCategory.UNKNOWN


CATEGORY_STATUS_CODES = {
    ErrorCategory.VALIDATION: 422,
    ErrorCategory.NETWORK: 503,
    ErrorCategory.TIMEOUT: 504,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.SERVER: 502,
    ErrorCategory.UNKNOWN: 500,
}


def status_code_for(error_code: Optional[str]) -> int:
    """HTTP status the terminal API uses for a failure code."""
    return CATEGORY_STATUS_CODES[categorize(error_code)]


def error_for_failure(failure: Any) -> AppError:
    """
    Build the exception matching a Failure's category.

    The backend suggestion, offending field and raw details travel in
    `details` so the error translator and the logs still see them.

    Args:
        failure: Failure result (anything with error_code and message)

    Returns:
        AppError subclass instance (not raised)
    """
    code = failure.error_code
    details = {
        key: value
        for key, value in (
            ("field", failure.field),
            ("suggestion", failure.suggestion),
            ("details", failure.details),
        )
        if value is not None
    }
    category = categorize(code)

    if category == ErrorCategory.NETWORK:
        return NetworkError(failure.message, details=details)
    if category == ErrorCategory.TIMEOUT:
        raw = failure.details if isinstance(failure.details, dict) else {}
        return RequestTimeoutError(raw.get("timeout_ms"), details=details, message=failure.message)
    if category == ErrorCategory.VALIDATION:
        return ValidationError(failure.message, code=code, details=details)
    if category == ErrorCategory.NOT_FOUND:
        return NotFoundError(failure.message, code=code, details=details)
    if category == ErrorCategory.CONFLICT:
        return ConflictError(failure.message, code=code, details=details)
    if category == ErrorCategory.SERVER:
        return ServerError(failure.message, code=code, details=details)
    return UnknownError(failure.message, code=code, details=details)


def raise_for_failure(result: Any) -> Any:
    """
    Unwrap a canonical result.

    Returns:
        The data of a Success

    Raises:
        AppError: The category exception of a Failure (see error_for_failure)
    """
    if result.ok:
        return result.data
    raise error_for_failure(result)
