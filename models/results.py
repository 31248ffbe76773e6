"""
Canonical result models.

Every backend call ends as exactly one of:
    Success  {ok: True, data, message?}
    Failure  {ok: False, error_code, message, field?, suggestion?, details?}
"""

from typing import Any, Literal, Optional, Union
from pydantic import Field

from models.base import FrozenSchema


class Success(FrozenSchema):
    """Successful call."""

    ok: Literal[True] = True
    data: Any = None
    message: Optional[str] = None


class Failure(FrozenSchema):
    """Failed call, already classified."""

    ok: Literal[False] = False
    error_code: str = Field(..., min_length=1, description="Backend or client error code")
    message: str = Field(..., description="Raw message (not yet translated)")
    field: Optional[str] = Field(None, description="Offending input field, if any")
    suggestion: Optional[str] = Field(None, description="Backend-supplied suggestion")
    details: Any = Field(None, description="Diagnostic payload, never shown to users")


CanonicalResult = Union[Success, Failure]


class ErrorMessage(FrozenSchema):
    """User-facing error text."""

    message: str
    suggestion: Optional[str] = None

    def display(self) -> str:
        """Single line: 'message. suggestion'."""
        if self.suggestion:
            return f"{self.message}. {self.suggestion}"
        return self.message


def ok(data: Any = None, message: Optional[str] = None) -> Success:
    return Success(data=data, message=message)


def fail(
    error_code: str,
    message: str,
    field: Optional[str] = None,
    suggestion: Optional[str] = None,
    details: Any = None
) -> Failure:
    return Failure(
        error_code=error_code,
        message=message,
        field=field,
        suggestion=suggestion,
        details=details,
    )
