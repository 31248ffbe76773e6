"""
Issue report models.

Operators report problems (damaged pallet, wrong product, scanner failure)
through the admin endpoint.
"""

from enum import Enum
from typing import Optional
from pydantic import Field

from models.base import BaseSchema


class IssueType(str, Enum):
    """Issue categories accepted by the backend."""

    DEFECT = "DEFECT"
    DAMAGE = "DAMAGE"
    OTHER = "OTHER"


class IssueReport(BaseSchema):
    """admin/issue/create params."""

    descripcion: str = Field(..., min_length=10, max_length=2000, description="What happened")
    box_code: Optional[str] = Field(None, description="Box or pallet code involved")
    type: IssueType = Field(default=IssueType.OTHER, description="Issue category")
    ubicacion: Optional[str] = Field(None, description="Where it happened")

    def to_params(self) -> dict:
        """Backend wire format."""
        params = {
            "descripcion": self.descripcion,
            "type": self.type.value,
        }
        if self.box_code:
            params["boxCode"] = self.box_code
        if self.ubicacion:
            params["ubicacion"] = self.ubicacion
        return params
