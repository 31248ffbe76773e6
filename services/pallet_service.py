"""
Pallet creation.

Generates a pallet code from shift, caliber and format, or accepts one
typed by the operator, then creates the pallet in the backend.

Generated code layout (12 digits):
    D     ISO weekday (1 = Monday)
    WW    ISO week
    YY    year
    T     shift (turno)
    CC    caliber code
    F     format
    RRR   random suffix
"""

import random
from datetime import datetime
from typing import Callable, Optional

import structlog

from config import CodeLengthTable
from models.pallet import CALIBRES, FORMATOS, TURNOS, PalletCreate, PalletCreateOutcome
from models.results import Failure, fail
from models.scan import EntityType, Location
from services.backend_service import BackendService, get_backend_service
from services.code_service import classify_as
from services.error_translation_service import translate
from services.location_service import is_valid_target, parse_location

logger = structlog.get_logger(__name__)


def generate_pallet_code(
    turno: str,
    calibre: str,
    formato: str,
    now: Optional[datetime] = None,
    suffix: Optional[int] = None
) -> str:
    """
    Build a pallet code.

    Args:
        turno: Shift (see TURNOS)
        calibre: Caliber code (see CALIBRES)
        formato: Format (see FORMATOS)
        now: Creation time (defaults to now)
        suffix: Random part 0-999 (defaults to a random number)

    Returns:
        12-digit pallet code

    Raises:
        ValueError: If turno, calibre or formato is not in its catalog
    """
    if turno not in TURNOS:
        raise ValueError(f"Invalid turno: {turno}")
    if calibre not in CALIBRES:
        raise ValueError(f"Invalid calibre: {calibre}")
    if formato not in FORMATOS:
        raise ValueError(f"Invalid formato: {formato}")

    now = now or datetime.now()
    if suffix is None:
        suffix = random.randint(0, 999)

    week = now.isocalendar()[1]
    return f"{now.isoweekday()}{week:02d}{now:%y}{turno}{calibre}{formato}{suffix:03d}"


class PalletService:
    """Pallet creation from the terminal."""

    def __init__(
        self,
        backend: BackendService,
        table: Optional[CodeLengthTable] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.backend = backend
        self.table = table
        self.clock = clock

    async def create(self, data: PalletCreate) -> PalletCreateOutcome:
        """
        Create a pallet.

        Args:
            data: Form data (generated or manual code)

        Returns:
            PalletCreateOutcome with the code used and the backend result
        """
        if data.use_manual_code:
            raw = data.codigo_manual
        else:
            raw = generate_pallet_code(data.turno, data.calibre, data.formato, now=self.clock())

        classified = classify_as(raw, EntityType.PALLET, self.table)
        if isinstance(classified, Failure):
            return self._failed(raw, classified)
        codigo = classified.data.normalized

        params = {"codigo": codigo}
        if not data.use_manual_code:
            params.update({
                "turno": data.turno,
                "calibre": data.calibre,
                "formato": data.formato,
            })
        if data.ubicacion:
            location = parse_location(data.ubicacion)
            if location is None or not is_valid_target(EntityType.PALLET, location):
                return self._failed(codigo, fail(
                    "INVALID_LOCATION",
                    f"Ubicación no válida para el pallet: {data.ubicacion}",
                    field="ubicacion",
                ))
            params["ubicacion"] = location.value
        else:
            params["ubicacion"] = Location.PACKING.value

        result = await self.backend.create_pallet(params)
        if isinstance(result, Failure):
            return self._failed(codigo, result)

        logger.info(
            "pallet_created",
            codigo=codigo,
            manual=data.use_manual_code,
            ubicacion=params["ubicacion"],
        )
        return PalletCreateOutcome(codigo=codigo, result=result)

    def _failed(self, codigo: Optional[str], result: Failure) -> PalletCreateOutcome:
        logger.warning("pallet_create_failed", codigo=codigo, error_code=result.error_code)
        return PalletCreateOutcome(
            codigo=codigo,
            result=result,
            error=translate(result, "create"),
        )


# Singleton instance
_pallet_service: Optional[PalletService] = None


def get_pallet_service() -> PalletService:
    """Get or create PalletService instance."""
    global _pallet_service
    if _pallet_service is None:
        _pallet_service = PalletService(get_backend_service())
    return _pallet_service
