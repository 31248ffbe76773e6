"""
Draft sale API routes.

Lists draft and confirmed sales, loads a sale and scans boxes/pallets into
or out of it.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.sale import SaleScanOutcome, SaleScanRequest
from services.error_translation_service import translate
from services.sale_service import get_sale_scan_service
from exceptions import AppError, raise_for_failure, status_code_for

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/sales", tags=["Sales"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response with the operator-facing wording."""
    if isinstance(e, AppError):
        content = e.to_dict()
        content["error"].update(translate(e, "dispatch").model_dump(mode="json"))
        return JSONResponse(
            status_code=e.status_code,
            content=content
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


# ===================
# SALE ROUTES
# ===================

@router.get("/drafts")
async def list_draft_sales():
    """Sales that still accept scanned items."""
    try:
        result = await get_sale_scan_service().get_draft_sales()
        return {"data": raise_for_failure(result), "message": result.message}
    except Exception as e:
        return handle_error(e)


@router.get("/confirmed")
async def list_confirmed_sales():
    """Sales ready to be dispatched."""
    try:
        result = await get_sale_scan_service().get_confirmed_sales()
        return {"data": raise_for_failure(result), "message": result.message}
    except Exception as e:
        return handle_error(e)


@router.get("/{sale_id}")
async def get_sale(sale_id: str):
    """
    Load a sale and the items already in it.

    Replaces this terminal's item list for the sale with the backend's.
    """
    try:
        service = get_sale_scan_service()
        outcome = await service.load_sale(sale_id)
        return _outcome_response(outcome, service.items(sale_id))
    except Exception as e:
        return handle_error(e)


@router.post("/{sale_id}/scan")
async def scan_into_sale(sale_id: str, data: SaleScanRequest):
    """
    Add a scanned box or pallet to a draft sale.

    Boxes and pallets must be in BODEGA.
    """
    try:
        service = get_sale_scan_service()
        outcome = await service.scan_into_sale(sale_id, data.codigo)
        return _outcome_response(outcome, service.items(sale_id))
    except Exception as e:
        return handle_error(e)


@router.delete("/{sale_id}/items/{codigo}")
async def remove_from_sale(sale_id: str, codigo: str):
    """Take a box or pallet back out of a draft sale."""
    try:
        service = get_sale_scan_service()
        outcome = await service.remove_from_sale(sale_id, codigo)
        return _outcome_response(outcome, service.items(sale_id))
    except Exception as e:
        return handle_error(e)


@router.get("/{sale_id}/items")
async def list_scanned_items(sale_id: str):
    """Items of a sale known to this terminal."""
    try:
        items = get_sale_scan_service().items(sale_id)
        return {"data": [item.model_dump(mode="json") for item in items], "total": len(items)}
    except Exception as e:
        return handle_error(e)


def _outcome_response(outcome: SaleScanOutcome, items) -> JSONResponse:
    status_code = 200 if outcome.ok else status_code_for(outcome.result.error_code)
    return JSONResponse(
        status_code=status_code,
        content={
            **outcome.model_dump(mode="json"),
            "items": [item.model_dump(mode="json") for item in items],
        }
    )
