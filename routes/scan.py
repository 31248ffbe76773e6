"""
Scan API routes.

One scan session per terminal, selected with the X-Terminal-Id header.
"""

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse
import structlog

from models.scan import ScanOutcome, ScanRequest, ReportIssueRequest
from services.scan_orchestrator import get_scan_orchestrator
from exceptions import AppError, status_code_for

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/scan", tags=["Scan"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "Ocurrió un error inesperado"
            }
        }
    )


def outcome_response(outcome: ScanOutcome) -> JSONResponse:
    """Serialize an outcome; failures get the status of their error category."""
    status_code = 200 if outcome.ok else status_code_for(outcome.result.error_code)
    return JSONResponse(
        status_code=status_code,
        content=outcome.model_dump(mode="json")
    )


# ===================
# SCAN ROUTES
# ===================

@router.post("")
async def submit_scan(
    data: ScanRequest,
    x_terminal_id: str = Header("default", description="Terminal session ID"),
):
    """
    Submit a scanned code.

    Boxes are moved immediately; pallets wait for /confirm.
    """
    try:
        session = get_scan_orchestrator(x_terminal_id)
        return outcome_response(await session.submit_scan(data.codigo, data.ubicacion))
    except Exception as e:
        return handle_error(e)


@router.get("/pending")
async def load_pending_details(
    x_terminal_id: str = Header("default", description="Terminal session ID"),
):
    """Contents of the pallet waiting for confirmation."""
    try:
        session = get_scan_orchestrator(x_terminal_id)
        return outcome_response(await session.load_pending_details())
    except Exception as e:
        return handle_error(e)


@router.post("/confirm")
async def confirm_scan(
    x_terminal_id: str = Header("default", description="Terminal session ID"),
):
    """Confirm the pending pallet move."""
    try:
        session = get_scan_orchestrator(x_terminal_id)
        return outcome_response(await session.confirm())
    except Exception as e:
        return handle_error(e)


@router.post("/cancel")
async def cancel_scan(
    x_terminal_id: str = Header("default", description="Terminal session ID"),
):
    """Discard the pending pallet."""
    try:
        session = get_scan_orchestrator(x_terminal_id)
        return outcome_response(await session.cancel())
    except Exception as e:
        return handle_error(e)


@router.post("/report-issue")
async def report_issue(
    data: ReportIssueRequest,
    x_terminal_id: str = Header("default", description="Terminal session ID"),
):
    """Reject the pending pallet and report why."""
    try:
        session = get_scan_orchestrator(x_terminal_id)
        return outcome_response(await session.report_issue(data.reason))
    except Exception as e:
        return handle_error(e)


@router.get("/state")
async def get_scan_state(
    x_terminal_id: str = Header("default", description="Terminal session ID"),
):
    """Current session state."""
    try:
        session = get_scan_orchestrator(x_terminal_id)
        return outcome_response(session.snapshot())
    except Exception as e:
        return handle_error(e)


@router.get("/history")
async def get_scan_history(
    x_terminal_id: str = Header("default", description="Terminal session ID"),
):
    """Successful scans of this terminal, most recent first."""
    try:
        session = get_scan_orchestrator(x_terminal_id)
        entries = [entry.model_dump(mode="json") for entry in session.history]
        return {"data": entries, "total": len(entries)}
    except Exception as e:
        return handle_error(e)


@router.delete("/history")
async def clear_scan_history(
    x_terminal_id: str = Header("default", description="Terminal session ID"),
):
    """Clear this terminal's history."""
    try:
        get_scan_orchestrator(x_terminal_id).clear_history()
        return {"data": [], "total": 0}
    except Exception as e:
        return handle_error(e)
