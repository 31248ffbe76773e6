"""
Draft sale models.

A draft sale is an order not yet confirmed; boxes and pallets can still be
scanned into it.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import Field

from models.base import BaseSchema, FrozenSchema
from models.results import CanonicalResult, ErrorMessage
from models.scan import EntityType


class SaleState(str, Enum):
    """Sales order lifecycle."""

    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    DISPATCHED = "DISPATCHED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class SaleScanRequest(BaseSchema):
    """POST /api/sales/{sale_id}/scan body."""

    codigo: str = Field(..., description="Scanned box or pallet code")


class ScannedSaleItem(FrozenSchema):
    """Item added to a draft sale from this terminal."""

    code: str
    type: EntityType
    calibre: Optional[str] = None
    eggs: Optional[int] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SaleScanOutcome(FrozenSchema):
    """Answer of scanning a code into a draft sale."""

    sale_id: str
    result: CanonicalResult
    error: Optional[ErrorMessage] = None
    item: Optional[ScannedSaleItem] = None

    @property
    def ok(self) -> bool:
        return self.result.ok
