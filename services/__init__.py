"""
Business logic services.

Each service handles one concern of the terminal.
"""

from services.code_service import classify, classify_as, sanitize_code, format_code_for_display
from services.location_service import is_valid_target, valid_locations, ordered_locations, parse_location
from services.request_executor import RequestExecutor, backoff_delay
from services.response_normalizer import normalize, normalize_response, detect_envelope
from services.error_translation_service import translate, user_friendly_error, format_error
from services.backend_service import BackendService, get_backend_service
from services.scan_state import ScanEvent, transition, allowed_events
from services.scan_orchestrator import ScanOrchestrator
from services.sale_service import SaleScanService, get_sale_scan_service
from services.pallet_service import PalletService, get_pallet_service, generate_pallet_code

__all__ = [
    # Codes and locations
    "classify",
    "classify_as",
    "sanitize_code",
    "format_code_for_display",
    "is_valid_target",
    "valid_locations",
    "ordered_locations",
    "parse_location",

    # Request pipeline
    "RequestExecutor",
    "backoff_delay",
    "normalize",
    "normalize_response",
    "detect_envelope",
    "translate",
    "user_friendly_error",
    "format_error",
    "BackendService",
    "get_backend_service",

    # Scan session
    "ScanEvent",
    "transition",
    "allowed_events",
    "ScanOrchestrator",

    # Sales and pallets
    "SaleScanService",
    "get_sale_scan_service",
    "PalletService",
    "get_pallet_service",
    "generate_pallet_code",
]
