"""
Pallet API routes.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
import structlog

from models.pallet import PalletCreate, TURNOS, CALIBRES, FORMATOS
from services.pallet_service import get_pallet_service
from exceptions import AppError, status_code_for

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/pallets", tags=["Pallets"])


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


@router.get("/options")
async def get_pallet_options():
    """Shift, caliber and format catalogs for the creation form."""
    return {
        "turnos": TURNOS,
        "calibres": CALIBRES,
        "formatos": FORMATOS,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_pallet(data: PalletCreate):
    """
    Create a pallet.

    With use_manual_code the typed code is used (it must be a pallet code);
    otherwise one is generated from turno, calibre and formato.
    """
    try:
        outcome = await get_pallet_service().create(data)
        status_code = 201 if outcome.ok else status_code_for(outcome.result.error_code)
        return JSONResponse(
            status_code=status_code,
            content=outcome.model_dump(mode="json")
        )
    except Exception as e:
        return handle_error(e)
