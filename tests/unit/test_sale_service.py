"""
Unit tests for draft sale scanning.

Run: pytest tests/unit/test_sale_service.py -v
"""

import asyncio

import pytest

from models.scan import EntityType
from services.sale_service import SaleScanService


BOX_IN_BODEGA = "123456789012346"
BOX_IN_PACKING = "123456789012345"
LOOSE_BOX = "987654321098765"
PALLET_IN_BODEGA = "210987654321"


@pytest.fixture
def service(backend, v3_table) -> SaleScanService:
    return SaleScanService(backend, table=v3_table)


def scan(service, sale_id, code):
    return asyncio.run(service.scan_into_sale(sale_id, code))


class TestScanIntoSale:
    """Tests for SaleScanService.scan_into_sale()"""

    def test_box_added(self, service, simulated_backend):
        outcome = scan(service, "SALE-001", BOX_IN_BODEGA)

        assert outcome.ok
        assert outcome.error is None
        assert outcome.result.message == f"Caja {BOX_IN_BODEGA} agregado exitosamente"
        assert outcome.item.type == EntityType.BOX
        assert outcome.item.calibre == "02"
        assert outcome.item.eggs == 180
        assert simulated_backend.sales["SALE-001"]["items"] == [{"code": BOX_IN_BODEGA, "type": "BOX"}]

    def test_pallet_added(self, service):
        outcome = scan(service, "SALE-001", PALLET_IN_BODEGA)

        assert outcome.ok
        assert outcome.item.type == EntityType.PALLET
        assert outcome.item.eggs is None
        assert outcome.result.message.startswith("Pallet ")

    def test_formatted_code_is_normalized(self, service):
        outcome = scan(service, "SALE-001", "12345-67890-12346")

        assert outcome.ok
        assert outcome.item.code == BOX_IN_BODEGA

    def test_confirmed_sale_rejected(self, service):
        outcome = scan(service, "SALE-002", BOX_IN_BODEGA)

        assert not outcome.ok
        assert outcome.result.error_code == "SALE_NOT_DRAFT"
        assert outcome.error.message == "La venta no se puede modificar"

    def test_box_outside_bodega_rejected(self, service):
        outcome = scan(service, "SALE-001", BOX_IN_PACKING)

        assert outcome.result.error_code == "BOX_NOT_IN_BODEGA"
        assert outcome.error.message == "La caja no está en BODEGA"

    def test_duplicate_box_rejected(self, service):
        scan(service, "SALE-001", BOX_IN_BODEGA)

        outcome = scan(service, "SALE-001", BOX_IN_BODEGA)

        assert outcome.result.error_code == "BOX_ALREADY_IN_SALE"
        assert outcome.error.message == "La caja ya está en esta venta"
        assert len(service.items("SALE-001")) == 1

    def test_unknown_code_never_added(self, service, simulated_backend):
        outcome = scan(service, "SALE-001", "111111111111111")

        assert not outcome.ok
        assert outcome.result.error_code == "NOT_FOUND"
        assert [r.path for r in simulated_backend.requests] == ["/getInfoFromScannedCode"]

    def test_invalid_code_never_sent(self, service, simulated_backend):
        outcome = scan(service, "SALE-001", "12345")

        assert outcome.result.error_code == "UNRECOGNIZED_FORMAT"
        assert outcome.error.message
        assert simulated_backend.requests == []


class TestItems:
    """Tests for items() and clear()"""

    def test_items_in_scan_order(self, service):
        scan(service, "SALE-001", BOX_IN_BODEGA)
        scan(service, "SALE-001", LOOSE_BOX)

        assert [i.code for i in service.items("SALE-001")] == [BOX_IN_BODEGA, LOOSE_BOX]

    def test_failed_scans_not_listed(self, service):
        scan(service, "SALE-002", BOX_IN_BODEGA)

        assert service.items("SALE-002") == ()

    def test_clear(self, service):
        scan(service, "SALE-001", BOX_IN_BODEGA)

        service.clear("SALE-001")

        assert service.items("SALE-001") == ()

    def test_draft_sales(self, service):
        result = asyncio.run(service.get_draft_sales())

        assert [s["id"] for s in result.data["items"]] == ["SALE-001"]

    def test_confirmed_sales(self, service):
        result = asyncio.run(service.get_confirmed_sales())

        assert [s["id"] for s in result.data["items"]] == ["SALE-002"]


class TestLoadSale:
    """Tests for SaleScanService.load_sale()"""

    def test_loads_existing_items_with_details(self, backend, v3_table, simulated_backend):
        simulated_backend.sales["SALE-001"]["items"] = [
            {"code": LOOSE_BOX, "type": "BOX"},
            {"code": PALLET_IN_BODEGA, "type": "PALLET"},
        ]
        service = SaleScanService(backend, table=v3_table)

        outcome = asyncio.run(service.load_sale("SALE-001"))

        assert outcome.ok
        assert outcome.result.data["id"] == "SALE-001"
        items = service.items("SALE-001")
        assert [(i.code, i.type) for i in items] == [
            (LOOSE_BOX, EntityType.BOX),
            (PALLET_IN_BODEGA, EntityType.PALLET),
        ]
        assert items[0].eggs == 360
        assert items[1].calibre is None

    def test_box_without_lookup_still_listed(self, backend, v3_table, simulated_backend):
        simulated_backend.sales["SALE-001"]["items"] = [{"code": "111111111111111", "type": "BOX"}]
        service = SaleScanService(backend, table=v3_table)

        asyncio.run(service.load_sale("SALE-001"))

        item = service.items("SALE-001")[0]
        assert item.code == "111111111111111"
        assert item.eggs is None

    def test_picks_up_items_added_elsewhere(self, service, simulated_backend):
        scan(service, "SALE-001", BOX_IN_BODEGA)
        simulated_backend.sales["SALE-001"]["items"].append({"code": LOOSE_BOX, "type": "BOX"})

        asyncio.run(service.load_sale("SALE-001"))

        assert [i.code for i in service.items("SALE-001")] == [BOX_IN_BODEGA, LOOSE_BOX]

    def test_unknown_sale(self, service):
        outcome = asyncio.run(service.load_sale("SALE-999"))

        assert not outcome.ok
        assert outcome.result.error_code == "SALE_NOT_FOUND"
        assert outcome.error is not None


class TestRemoveFromSale:
    """Tests for SaleScanService.remove_from_sale()"""

    def test_box_removed(self, service, simulated_backend):
        scan(service, "SALE-001", BOX_IN_BODEGA)
        scan(service, "SALE-001", LOOSE_BOX)

        outcome = asyncio.run(service.remove_from_sale("SALE-001", BOX_IN_BODEGA))

        assert outcome.ok
        assert outcome.result.message == "Item removido exitosamente"
        assert outcome.item.code == BOX_IN_BODEGA
        assert [i.code for i in service.items("SALE-001")] == [LOOSE_BOX]
        assert simulated_backend.sales["SALE-001"]["items"] == [{"code": LOOSE_BOX, "type": "BOX"}]

    def test_pallet_removed_with_pallet_action(self, service, simulated_backend):
        scan(service, "SALE-001", PALLET_IN_BODEGA)

        outcome = asyncio.run(service.remove_from_sale("SALE-001", PALLET_IN_BODEGA))

        assert outcome.ok
        assert simulated_backend.requests[-1].body["action"] == "remove-pallet"

    def test_item_not_in_sale(self, service):
        outcome = asyncio.run(service.remove_from_sale("SALE-001", LOOSE_BOX))

        assert outcome.result.error_code == "BOX_NOT_IN_SALE"
        assert outcome.error.message == "La caja no está en esta venta"

    def test_invalid_code_never_sent(self, service, simulated_backend):
        outcome = asyncio.run(service.remove_from_sale("SALE-001", "123"))

        assert outcome.result.error_code == "UNRECOGNIZED_FORMAT"
        assert simulated_backend.requests == []
