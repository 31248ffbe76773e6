"""
Unit tests for pallet creation.

Run: pytest tests/unit/test_pallet_service.py -v
"""

import asyncio
from datetime import datetime

import pytest
from pydantic import ValidationError

from models.pallet import PalletCreate
from models.scan import EntityType
from services.code_service import classify
from services.pallet_service import PalletService, generate_pallet_code


# Wednesday of ISO week 3, 2025
NOW = datetime(2025, 1, 15, 10, 30)


@pytest.fixture
def service(backend, v3_table) -> PalletService:
    return PalletService(backend, table=v3_table, clock=lambda: NOW)


def create(service, **fields):
    return asyncio.run(service.create(PalletCreate(**fields)))


class TestGeneratePalletCode:
    """Tests for generate_pallet_code()"""

    def test_layout(self):
        code = generate_pallet_code("2", "07", "1", now=NOW, suffix=42)

        assert code == "303252071042"

    def test_length_matches_pallet_codes(self, v3_table):
        code = generate_pallet_code("1", "15", "3", now=NOW, suffix=999)

        assert len(code) == 12
        assert classify(code, v3_table).data.entity_type == EntityType.PALLET

    def test_random_suffix_in_range(self):
        code = generate_pallet_code("1", "01", "1", now=NOW)

        assert 0 <= int(code[-3:]) <= 999

    @pytest.mark.parametrize("turno,calibre,formato", [
        ("4", "01", "1"),
        ("1", "10", "1"),
        ("1", "01", "9"),
    ])
    def test_rejects_unknown_catalog_values(self, turno, calibre, formato):
        with pytest.raises(ValueError):
            generate_pallet_code(turno, calibre, formato, now=NOW)


class TestPalletCreate:
    """Tests for the PalletCreate form model"""

    def test_manual_requires_code(self):
        with pytest.raises(ValidationError):
            PalletCreate(use_manual_code=True)

    def test_generated_requires_catalog_values(self):
        with pytest.raises(ValidationError):
            PalletCreate(turno="1", calibre="99", formato="1")


class TestCreate:
    """Tests for PalletService.create()"""

    def test_generated_code(self, service, simulated_backend):
        outcome = create(service, turno="2", calibre="07", formato="1")

        assert outcome.ok
        assert outcome.codigo.startswith("3032520")
        assert len(outcome.codigo) == 12
        params = simulated_backend.requests[0].body["params"]
        assert params["turno"] == "2"
        assert params["calibre"] == "07"
        assert params["formato"] == "1"
        assert params["ubicacion"] == "PACKING"
        assert outcome.codigo in simulated_backend.pallets

    def test_manual_code(self, service, simulated_backend):
        outcome = create(service, use_manual_code=True, codigo_manual="555555555555")

        assert outcome.ok
        assert outcome.codigo == "555555555555"
        assert simulated_backend.requests[0].body["params"] == {
            "codigo": "555555555555",
            "ubicacion": "PACKING",
        }

    def test_manual_box_code_rejected(self, service, simulated_backend):
        outcome = create(service, use_manual_code=True, codigo_manual="123456789012345")

        assert outcome.result.error_code == "INVALID_PALLET_CODE"
        assert outcome.error.message
        assert simulated_backend.requests == []

    def test_duplicate_code(self, service):
        outcome = create(service, use_manual_code=True, codigo_manual="123456789012")

        assert outcome.result.error_code == "PALLET_ALREADY_EXISTS"
        assert outcome.error.message == "La tarja ya existe en el sistema"

    def test_initial_location(self, service, simulated_backend):
        outcome = create(service, use_manual_code=True, codigo_manual="555555555555", ubicacion="bodega")

        assert outcome.ok
        assert simulated_backend.pallets["555555555555"]["ubicacion"] == "BODEGA"

    def test_invalid_location(self, service, simulated_backend):
        outcome = create(service, use_manual_code=True, codigo_manual="555555555555", ubicacion="OFICINA")

        assert outcome.result.error_code == "INVALID_LOCATION"
        assert outcome.codigo == "555555555555"
        assert simulated_backend.requests == []
