"""
Custom exceptions module.

Expected backend rejections are Failure results (see models/results.py);
these exceptions cover validation, transport faults and programming errors.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    NotFoundError,
    ConflictError,

    # Transport
    NetworkError,
    RequestTimeoutError,
    ServerError,
    UnknownError,

    # Scan session
    InvalidTransitionError,

    # Classification
    ErrorCategory,
    categorize,
    CATEGORY_STATUS_CODES,
    status_code_for,
    error_for_failure,
    raise_for_failure,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",

    # Transport
    "NetworkError",
    "RequestTimeoutError",
    "ServerError",
    "UnknownError",

    # Scan session
    "InvalidTransitionError",

    # Classification
    "ErrorCategory",
    "categorize",
    "CATEGORY_STATUS_CODES",
    "status_code_for",
    "error_for_failure",
    "raise_for_failure",
]
