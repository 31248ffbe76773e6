"""
Request/response models for the backend transport.
"""

from typing import Any, Literal, Optional
from pydantic import Field

from models.base import BaseSchema, FrozenSchema


ConsolidatedEndpoint = Literal["/inventory", "/sales", "/admin"]

CONSOLIDATED_ENDPOINTS = ("/inventory", "/sales", "/admin")


class RawRequest(FrozenSchema):
    """One logical call to the backend, before any retry."""

    method: Literal["GET", "POST"] = "POST"
    path: str = Field(..., min_length=1, description="Path relative to the base URL")
    params: Optional[dict[str, Any]] = Field(None, description="Query string parameters")
    body: Any = Field(None, description="JSON body")

    def describe(self) -> str:
        return f"{self.method} {self.path}"


class RawResponse(FrozenSchema):
    """Backend answer exactly as received."""

    status_code: int = Field(..., ge=100, le=599)
    headers: dict[str, str] = Field(default_factory=dict)
    text: str = ""

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value.lower()
        return ""

    @property
    def is_json(self) -> bool:
        return "application/json" in self.content_type

    @property
    def is_http_success(self) -> bool:
        return 200 <= self.status_code < 300


class ConsolidatedRequest(BaseSchema):
    """Body of POST /inventory, /sales and /admin."""

    resource: str = Field(..., min_length=1, description="box, pallet, order, customer, issue...")
    action: str = Field(..., min_length=1, description="get, create, move, close...")
    params: dict[str, Any] = Field(default_factory=dict)


class RequestConfig(FrozenSchema):
    """Per-call policy for the request executor."""

    timeout_ms: int = Field(default=10000, ge=1, description="Timeout per attempt")
    retries: int = Field(default=3, ge=0, description="Retries after the first attempt")
    max_backoff_seconds: float = Field(default=30.0, gt=0, description="Backoff ceiling")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def max_attempts(self) -> int:
        return self.retries + 1

    @classmethod
    def from_settings(cls, settings) -> "RequestConfig":
        return cls(
            timeout_ms=settings.request_timeout_ms,
            retries=settings.request_retries,
            max_backoff_seconds=settings.max_backoff_seconds,
        )
