"""
Pallet creation models.

A new pallet code is either generated from shift/caliber/format or typed
manually by the operator.
"""

from typing import Optional
from pydantic import Field, model_validator

from models.base import BaseSchema, FrozenSchema
from models.results import CanonicalResult, ErrorMessage


TURNOS = {
    "1": "Turno 1 (Mañana)",
    "2": "Turno 2 (Tarde)",
    "3": "Turno 3 (Noche)",
}

CALIBRES = {
    "01": "ESPECIAL BCO",
    "02": "EXTRA BCO",
    "04": "GRANDE BCO",
    "07": "MEDIANO BCO",
    "09": "TERCERA BCO",
    "15": "CUARTA BCO",
    "12": "JUMBO BCO",
    "03": "ESPECIAL COLOR",
    "05": "EXTRA COLOR",
    "06": "GRANDE COLOR",
    "13": "MEDIANO COLOR",
    "11": "TERCERA COLOR",
    "16": "CUARTA COLOR",
    "14": "JUMBO COLOR",
    "08": "SUCIO / TRIZADO",
}

FORMATOS = {
    "1": "Formato 1 (180 unidades)",
    "2": "Formato 2 (360 unidades)",
    "3": "Formato 3 (Custom)",
}


class PalletCreate(BaseSchema):
    """POST /api/pallets body."""

    use_manual_code: bool = Field(default=False, description="Use codigo_manual instead of generating")
    codigo_manual: Optional[str] = Field(None, description="Pallet code typed by the operator")
    turno: Optional[str] = Field(None, description="Shift: 1, 2 or 3")
    calibre: Optional[str] = Field(None, description="Caliber code (see CALIBRES)")
    formato: Optional[str] = Field(None, description="Format: 1, 2 or 3")
    ubicacion: Optional[str] = Field(None, description="Initial location")

    @model_validator(mode='after')
    def validate_inputs(self):
        """Manual mode needs a code; generated mode needs shift, caliber and format."""
        if self.use_manual_code:
            if not self.codigo_manual:
                raise ValueError("codigo_manual es obligatorio")
            return self

        if self.turno not in TURNOS:
            raise ValueError("turno: seleccione una opción válida")
        if self.calibre not in CALIBRES:
            raise ValueError("calibre: seleccione una opción válida")
        if self.formato not in FORMATOS:
            raise ValueError("formato: seleccione una opción válida")
        return self


class PalletCreateOutcome(FrozenSchema):
    """Answer of POST /api/pallets."""

    codigo: Optional[str] = None
    result: CanonicalResult
    error: Optional[ErrorMessage] = None

    @property
    def ok(self) -> bool:
        return self.result.ok
