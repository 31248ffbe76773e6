"""
Code and location API routes.

Read-only helpers for the UI: classify a code without moving anything, look
up what a code refers to and list the destinations an entity type accepts.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import structlog

from models.results import Failure
from models.scan import EntityType
from services.backend_service import get_backend_service
from services.code_service import classify, format_code_for_display
from services.error_translation_service import translate
from services.location_service import ordered_locations
from exceptions import status_code_for

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Codes"])


@router.get("/locations/{entity_type}")
async def list_locations(entity_type: EntityType):
    """
    Allowed destinations for an entity type, in display order.

    Path parameters:
    - entity_type: BOX or PALLET
    """
    locations = [loc.value for loc in ordered_locations(entity_type)]
    return {"entity_type": entity_type.value, "data": locations, "total": len(locations)}


@router.get("/codes/classify")
async def classify_code(
    codigo: str = Query("", description="Code as scanned"),
):
    """
    Classify a scanned code as box or pallet.

    Nothing is sent to the backend.
    """
    result = classify(codigo)
    if isinstance(result, Failure):
        error = translate(result, "scan")
        return JSONResponse(
            status_code=status_code_for(result.error_code),
            content={
                **result.model_dump(mode="json"),
                "error": error.model_dump(mode="json"),
            }
        )

    return {
        **result.model_dump(mode="json"),
        "display": format_code_for_display(result.data.normalized),
    }


@router.get("/codes/{codigo}/info")
async def get_code_info(codigo: str):
    """
    Look up what a scanned code refers to on the backend.

    Unrecognized codes are rejected locally without a request.
    """
    result = await get_backend_service().get_info_from_scanned_code(codigo)
    if isinstance(result, Failure):
        logger.info("code_lookup_failed", codigo=codigo, error_code=result.error_code)
        return JSONResponse(
            status_code=status_code_for(result.error_code),
            content={
                **result.model_dump(mode="json"),
                "error": translate(result, "scan").model_dump(mode="json"),
            }
        )

    return result.model_dump(mode="json")
