"""
Draft sale scanning.

Operators scan boxes and pallets into a draft sale. The code is classified
locally, looked up for caliber/egg count, then added to the sale. Failures
are translated with the dispatch wording.
"""

from typing import Any, Optional

import structlog

from config import CodeLengthTable
from models.results import CanonicalResult, Failure, Success, ok
from models.sale import SaleScanOutcome, ScannedSaleItem
from models.scan import EntityType, ScannedCode
from services.backend_service import BackendService, get_backend_service
from services.code_service import classify
from services.error_translation_service import translate

logger = structlog.get_logger(__name__)


class SaleScanService:
    """
    Draft sale scanning.

    Keeps the items of each sale this terminal works on, in scan order:
    those loaded from the backend first, then the ones scanned here.
    """

    def __init__(
        self,
        backend: BackendService,
        table: Optional[CodeLengthTable] = None
    ):
        self.backend = backend
        self.table = table
        self._items: dict[str, list[ScannedSaleItem]] = {}

    async def get_draft_sales(self):
        """Sales that still accept items."""
        return await self.backend.get_draft_sales()

    async def get_confirmed_sales(self):
        """Sales waiting to be dispatched."""
        return await self.backend.get_confirmed_sales()

    async def load_sale(self, sale_id: str) -> SaleScanOutcome:
        """
        Fetch a sale and rebuild its item list from the backend.

        Boxes are looked up for caliber and egg count; a box whose lookup
        fails is still listed, without them. Pallets are listed as they are.

        Args:
            sale_id: Sale ID

        Returns:
            SaleScanOutcome with the sale as result data
        """
        result = await self.backend.get_sale(sale_id)
        if isinstance(result, Failure):
            return self._failed(sale_id, result)

        sale = result.data if isinstance(result.data, dict) else {}
        items: list[ScannedSaleItem] = []
        for entry in sale.get("items") or []:
            code = str(entry.get("code", ""))
            try:
                entity_type = EntityType(str(entry.get("type", "")).upper())
            except ValueError:
                logger.warning("sale_item_skipped", sale_id=sale_id, codigo=code, tipo=entry.get("type"))
                continue

            info = None
            if entity_type == EntityType.BOX:
                info = await self.backend.get_info_from_scanned_code(code)
                if isinstance(info, Failure):
                    logger.warning("sale_item_lookup_failed", sale_id=sale_id, codigo=code, error_code=info.error_code)
            items.append(_sale_item(code, entity_type, info))

        self._items[sale_id] = items
        logger.info("sale_loaded", sale_id=sale_id, items=len(items))
        return SaleScanOutcome(sale_id=sale_id, result=result)

    async def scan_into_sale(self, sale_id: str, raw: Optional[str]) -> SaleScanOutcome:
        """
        Add a scanned box or pallet to a draft sale.

        Args:
            sale_id: Draft sale ID
            raw: Code as scanned

        Returns:
            SaleScanOutcome with the backend result and, on success, the added item
        """
        classified = classify(raw, self.table)
        if isinstance(classified, Failure):
            return self._failed(sale_id, classified)

        code: ScannedCode = classified.data

        info = await self.backend.get_info_from_scanned_code(code.normalized)
        if isinstance(info, Failure):
            return self._failed(sale_id, info)

        if code.entity_type == EntityType.BOX:
            result = await self.backend.add_box_to_sale(sale_id, code.normalized)
        else:
            result = await self.backend.add_pallet_to_sale(sale_id, code.normalized)

        if isinstance(result, Failure):
            return self._failed(sale_id, result)

        item = _sale_item(code.normalized, code.entity_type, info)
        self._items.setdefault(sale_id, []).append(item)

        label = "Caja" if code.entity_type == EntityType.BOX else "Pallet"
        logger.info(
            "sale_item_added",
            sale_id=sale_id,
            codigo=code.normalized,
            tipo=code.entity_type.value,
        )
        return SaleScanOutcome(
            sale_id=sale_id,
            result=ok(result.data, f"{label} {code.normalized} agregado exitosamente"),
            item=item,
        )

    async def remove_from_sale(self, sale_id: str, raw: Optional[str]) -> SaleScanOutcome:
        """
        Take a box or pallet back out of a draft sale.

        Args:
            sale_id: Draft sale ID
            raw: Code of the item to remove

        Returns:
            SaleScanOutcome with the backend result and, on success, the removed item
        """
        classified = classify(raw, self.table)
        if isinstance(classified, Failure):
            return self._failed(sale_id, classified)

        code: ScannedCode = classified.data
        if code.entity_type == EntityType.BOX:
            result = await self.backend.remove_box_from_sale(sale_id, code.normalized)
        else:
            result = await self.backend.remove_pallet_from_sale(sale_id, code.normalized)

        if isinstance(result, Failure):
            return self._failed(sale_id, result)

        kept = self._items.get(sale_id, [])
        removed = next((i for i in kept if i.code == code.normalized), None)
        self._items[sale_id] = [i for i in kept if i.code != code.normalized]

        logger.info("sale_item_removed", sale_id=sale_id, codigo=code.normalized)
        return SaleScanOutcome(
            sale_id=sale_id,
            result=ok(result.data, "Item removido exitosamente"),
            item=removed or ScannedSaleItem(code=code.normalized, type=code.entity_type),
        )

    def items(self, sale_id: str) -> tuple[ScannedSaleItem, ...]:
        """Items of a sale, in scan order."""
        return tuple(self._items.get(sale_id, ()))

    def clear(self, sale_id: str) -> None:
        self._items.pop(sale_id, None)

    def _failed(self, sale_id: str, result: Failure) -> SaleScanOutcome:
        logger.warning(
            "sale_scan_failed",
            sale_id=sale_id,
            error_code=result.error_code,
        )
        return SaleScanOutcome(
            sale_id=sale_id,
            result=result,
            error=translate(result, "dispatch"),
        )


def _sale_item(
    code: str,
    entity_type: EntityType,
    info: Optional[CanonicalResult]
) -> ScannedSaleItem:
    details: dict[str, Any] = {}
    if entity_type == EntityType.BOX and isinstance(info, Success) and isinstance(info.data, dict):
        details = info.data
    return ScannedSaleItem(
        code=code,
        type=entity_type,
        calibre=details.get("calibre"),
        eggs=details.get("eggs"),
    )


# Singleton instance
_sale_scan_service: Optional[SaleScanService] = None


def get_sale_scan_service() -> SaleScanService:
    """Get or create SaleScanService instance."""
    global _sale_scan_service
    if _sale_scan_service is None:
        _sale_scan_service = SaleScanService(get_backend_service())
    return _sale_scan_service
