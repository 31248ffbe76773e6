"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    FrozenSchema,
)
from models.results import (
    Success,
    Failure,
    CanonicalResult,
    ErrorMessage,
    ok,
    fail,
)
from models.envelopes import (
    ErrorBody,
    UnifiedEnvelope,
    LegacyEnvelope,
    Passthrough,
    Envelope,
)
from models.requests import (
    RawRequest,
    RawResponse,
    ConsolidatedRequest,
    RequestConfig,
    CONSOLIDATED_ENDPOINTS,
)
from models.scan import (
    EntityType,
    Location,
    ScanState,
    ScannedCode,
    PendingConfirmation,
    ScanResult,
    ScanHistoryEntry,
    ScanOutcome,
    ScanRequest,
    ReportIssueRequest,
)
from models.issue import IssueType, IssueReport
from models.sale import SaleState, SaleScanRequest, ScannedSaleItem, SaleScanOutcome
from models.pallet import PalletCreate, PalletCreateOutcome, TURNOS, CALIBRES, FORMATOS

__all__ = [
    # Base
    "BaseSchema",
    "FrozenSchema",

    # Results
    "Success",
    "Failure",
    "CanonicalResult",
    "ErrorMessage",
    "ok",
    "fail",

    # Envelopes
    "ErrorBody",
    "UnifiedEnvelope",
    "LegacyEnvelope",
    "Passthrough",
    "Envelope",

    # Requests
    "RawRequest",
    "RawResponse",
    "ConsolidatedRequest",
    "RequestConfig",
    "CONSOLIDATED_ENDPOINTS",

    # Scan
    "EntityType",
    "Location",
    "ScanState",
    "ScannedCode",
    "PendingConfirmation",
    "ScanResult",
    "ScanHistoryEntry",
    "ScanOutcome",
    "ScanRequest",
    "ReportIssueRequest",

    # Issues
    "IssueType",
    "IssueReport",

    # Sales
    "SaleState",
    "SaleScanRequest",
    "ScannedSaleItem",
    "SaleScanOutcome",

    # Pallets
    "PalletCreate",
    "PalletCreateOutcome",
    "TURNOS",
    "CALIBRES",
    "FORMATOS",
]
