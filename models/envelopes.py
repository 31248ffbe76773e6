"""
Backend response envelopes.

The warehouse backend answered with three different body shapes over its
lifetime. They are modelled as a closed tagged union (discriminator: kind):

    unified      {status: success|fail|error, message, data?, error?{...}}
    legacy       {success: bool, data?, error?: {code, message} | str, message?}
    passthrough  anything else (plain JSON or text)
"""

from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class _Envelope(BaseModel):
    model_config = ConfigDict(frozen=True)


class ErrorBody(_Envelope):
    """Structured error object inside an envelope."""

    code: Optional[str] = None
    message: Optional[str] = None
    field: Optional[str] = None
    suggestion: Optional[str] = None
    details: Any = None


class UnifiedEnvelope(_Envelope):
    """Current backend format."""

    kind: Literal["unified"] = "unified"
    status: Literal["success", "fail", "error"]
    message: Optional[str] = None
    data: Any = None
    error: Optional[ErrorBody] = None
    meta: Optional[dict] = None

    @property
    def is_failure(self) -> bool:
        return self.status in ("fail", "error")


class LegacyEnvelope(_Envelope):
    """Lambda-era format with a success flag."""

    kind: Literal["legacy"] = "legacy"
    success: Optional[bool] = None
    message: Optional[str] = None
    data: Any = None
    error: Union[ErrorBody, str, None] = None
    meta: Optional[dict] = None

    @property
    def is_failure(self) -> bool:
        if self.success is False:
            return True
        if isinstance(self.error, ErrorBody):
            return bool(self.error.message or self.error.code)
        return False


class Passthrough(_Envelope):
    """Body with no recognized structure."""

    kind: Literal["passthrough"] = "passthrough"
    body: Any = None

    @property
    def is_failure(self) -> bool:
        return False


Envelope = Annotated[
    Union[UnifiedEnvelope, LegacyEnvelope, Passthrough],
    Field(discriminator="kind"),
]
