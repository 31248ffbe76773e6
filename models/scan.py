"""
Scan models.

Scanned codes, warehouse locations, pending pallet confirmations and the
per-terminal scan history.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import ConfigDict, Field, field_validator, model_validator

from models.base import BaseSchema, FrozenSchema
from models.results import CanonicalResult, ErrorMessage


class EntityType(str, Enum):
    """Scannable entity types."""

    BOX = "BOX"
    PALLET = "PALLET"


class Location(str, Enum):
    """Warehouse zones."""

    PACKING = "PACKING"
    BODEGA = "BODEGA"      # Warehouse
    VENTA = "VENTA"        # Sold
    TRANSITO = "TRANSITO"  # In transit
    PREVENTA = "PREVENTA"  # Reserved for a sale (pallets only)


class ScanState(str, Enum):
    """States of a terminal scan session."""

    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    COMMITTING = "COMMITTING"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class ScannedCode(FrozenSchema):
    """A code that passed classification."""
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=False,
        frozen=True
    )

    raw: str = Field(..., description="Input as scanned")
    normalized: str = Field(..., pattern=r"^[0-9]+$", description="Digits only")
    entity_type: EntityType


class PendingConfirmation(FrozenSchema):
    """Pallet waiting for the operator to confirm, cancel or report an issue."""

    code: ScannedCode
    requested_location: Location

    @model_validator(mode='after')
    def validate_pallet(self):
        """Only pallets go through confirmation."""
        if self.code.entity_type != EntityType.PALLET:
            raise ValueError("Only pallet codes can await confirmation")
        return self

    @property
    def entity_type(self) -> EntityType:
        return self.code.entity_type


class ScanResult(FrozenSchema):
    """What a committed move did."""

    codigo: str
    tipo: EntityType
    ubicacion: Location
    estado: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    extra: dict[str, Any] = Field(default_factory=dict, description="Backend data as returned")


class ScanHistoryEntry(FrozenSchema):
    """One successful scan, as kept in the session history."""

    result: CanonicalResult
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ScanOutcome(FrozenSchema):
    """Answer of every scan session operation."""

    state: ScanState
    result: CanonicalResult
    error: Optional[ErrorMessage] = None
    pending: Optional[PendingConfirmation] = None
    pending_details: Any = None
    stale: bool = Field(default=False, description="Result arrived after a cancel/reset and was not applied")

    @property
    def ok(self) -> bool:
        return self.result.ok


# ===================
# TERMINAL API BODIES
# ===================

class ScanRequest(BaseSchema):
    """POST /api/scan body."""

    codigo: str = Field(..., description="Scanned code")
    ubicacion: str = Field(default=Location.BODEGA.value, description="Target location")

    @field_validator("ubicacion")
    @classmethod
    def normalize_location(cls, v: str) -> str:
        """Locations are upper-case."""
        return v.upper().strip()


class ReportIssueRequest(BaseSchema):
    """POST /api/scan/report-issue body."""

    reason: Optional[str] = Field(None, max_length=1000, description="Why the pallet is rejected")
