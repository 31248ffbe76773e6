"""
Simulated warehouse backend.

In-memory stand-in for development when no real endpoint is reachable.
Answers in the unified envelope format and is deterministic: the same
sequence of requests always produces the same responses.

Never enabled by default; Settings refuses it in production.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import structlog

from models.requests import RawRequest, RawResponse

logger = structlog.get_logger(__name__)


SEED_BOXES = {
    "123456789012345": {"codigo": "123456789012345", "calibre": "02", "formato": "1", "ubicacion": "PACKING", "palletId": "123456789012", "eggs": 180},
    "123456789012346": {"codigo": "123456789012346", "calibre": "02", "formato": "1", "ubicacion": "BODEGA", "palletId": "123456789012", "eggs": 180},
    "987654321098765": {"codigo": "987654321098765", "calibre": "07", "formato": "2", "ubicacion": "BODEGA", "palletId": None, "eggs": 360},
}

SEED_PALLETS = {
    "123456789012": {"codigo": "123456789012", "estado": "open", "ubicacion": "PACKING", "calibre": "02", "formato": "1", "cajas": ["123456789012345", "123456789012346"]},
    "210987654321": {"codigo": "210987654321", "estado": "closed", "ubicacion": "BODEGA", "calibre": "07", "formato": "2", "cajas": []},
}

SEED_SALES = {
    "SALE-001": {"id": "SALE-001", "state": "DRAFT", "customerId": "CUST-001", "items": []},
    "SALE-002": {"id": "SALE-002", "state": "CONFIRMED", "customerId": "CUST-002", "items": []},
}


class SimulatedBackend:
    """Transport that answers from in-memory data."""

    def __init__(
        self,
        boxes: Optional[dict] = None,
        pallets: Optional[dict] = None,
        sales: Optional[dict] = None
    ):
        self.boxes = json.loads(json.dumps(boxes if boxes is not None else SEED_BOXES))
        self.pallets = json.loads(json.dumps(pallets if pallets is not None else SEED_PALLETS))
        self.sales = json.loads(json.dumps(sales if sales is not None else SEED_SALES))
        self.issues: list[dict] = []
        self.requests: list[RawRequest] = []

    async def send(self, request: RawRequest, timeout_seconds: float) -> RawResponse:
        self.requests.append(request)
        logger.debug("simulated_request", request=request.describe(), sequence=len(self.requests))

        if request.method == "GET" and request.path == "/health":
            return self._success({"healthy": True}, "Simulated backend")

        if request.method == "GET" and request.path == "/getInfoFromScannedCode":
            return self._scanned_code_info(str((request.params or {}).get("codigo", "")))

        if request.method == "POST" and request.path == "/createPallet":
            return self._create_pallet(request.body or {})

        if request.method == "POST" and request.path in ("/inventory", "/sales", "/admin"):
            body = request.body or {}
            handler = getattr(
                self,
                f"_{body.get('resource', '')}_{str(body.get('action', '')).replace('-', '_')}",
                None,
            )
            if handler is not None:
                return handler(body.get("params") or {})
            return self._error(400, "VALIDATION_ERROR", f"Unsupported action {body.get('resource')}/{body.get('action')}")

        return self._error(404, "NOT_FOUND", f"Route {request.describe()} not found")

    async def aclose(self) -> None:
        return None

    # ===================
    # INVENTORY
    # ===================

    def _box_get(self, params: dict) -> RawResponse:
        codigo = params.get("codigo")
        if codigo:
            box = self.boxes.get(codigo)
            if box is None:
                return self._not_found("BOX", codigo)
            return self._success(box)
        items = [b for b in self.boxes.values() if not params.get("ubicacion") or b["ubicacion"] == params["ubicacion"]]
        return self._success({"items": items, "count": len(items), "nextKey": None})

    def _box_move(self, params: dict) -> RawResponse:
        box = self.boxes.get(params.get("codigo", ""))
        if box is None:
            return self._not_found("BOX", params.get("codigo", ""))
        box["ubicacion"] = params.get("ubicacion")
        return self._success(dict(box), f"Caja movida a {box['ubicacion']}")

    def _pallet_get(self, params: dict) -> RawResponse:
        pallet = self.pallets.get(params.get("codigo", ""))
        if pallet is None:
            return self._not_found("PALLET", params.get("codigo", ""))
        cajas = [self.boxes[c] for c in pallet["cajas"] if c in self.boxes]
        return self._success({**pallet, "numeroCajas": len(cajas), "cajas": cajas})

    def _pallet_move(self, params: dict) -> RawResponse:
        pallet = self.pallets.get(params.get("codigo", ""))
        if pallet is None:
            return self._not_found("PALLET", params.get("codigo", ""))
        pallet["ubicacion"] = params.get("ubicacion")
        for code in pallet["cajas"]:
            if code in self.boxes:
                self.boxes[code]["ubicacion"] = pallet["ubicacion"]
        return self._success(dict(pallet), f"Pallet movido a {pallet['ubicacion']}")

    def _pallet_create(self, params: dict) -> RawResponse:
        return self._create_pallet(params)

    def _pallet_close(self, params: dict) -> RawResponse:
        pallet = self.pallets.get(params.get("codigo", ""))
        if pallet is None:
            return self._not_found("PALLET", params.get("codigo", ""))
        pallet["estado"] = "closed"
        return self._success(dict(pallet), "Pallet cerrado")

    def _create_pallet(self, params: dict) -> RawResponse:
        codigo = str(params.get("codigo", ""))
        if codigo in self.pallets:
            return self._error(409, "PALLET_ALREADY_EXISTS", f"Pallet {codigo} already exists")
        pallet = {
            "codigo": codigo,
            "estado": "open",
            "ubicacion": params.get("ubicacion") or "PACKING",
            "calibre": params.get("calibre"),
            "formato": params.get("formato"),
            "cajas": [],
        }
        self.pallets[codigo] = pallet
        return self._success(dict(pallet), "Pallet creado correctamente", status_code=201)

    def _scanned_code_info(self, codigo: str) -> RawResponse:
        if codigo in self.boxes:
            return self._success({**self.boxes[codigo], "tipo": "caja"})
        if codigo in self.pallets:
            return self._success({**self.pallets[codigo], "tipo": "pallet"})
        return self._error(404, "NOT_FOUND", f"El código {codigo} no fue encontrado")

    # ===================
    # SALES
    # ===================

    def _order_get(self, params: dict) -> RawResponse:
        if params.get("id"):
            sale = self.sales.get(params["id"])
            if sale is None:
                return self._not_found("SALE", params["id"])
            return self._success(sale)
        state = (params.get("filters") or {}).get("state")
        items = [s for s in self.sales.values() if not state or s["state"] == state]
        return self._success({"items": items, "count": len(items), "nextKey": None})

    def _order_add_box(self, params: dict) -> RawResponse:
        return self._add_to_sale(params.get("saleId", ""), params.get("boxCode", ""), "BOX", self.boxes)

    def _order_add_pallet(self, params: dict) -> RawResponse:
        return self._add_to_sale(params.get("saleId", ""), params.get("palletCode", ""), "PALLET", self.pallets)

    def _add_to_sale(self, sale_id: str, code: str, kind: str, source: dict) -> RawResponse:
        sale = self.sales.get(sale_id)
        if sale is None:
            return self._not_found("SALE", sale_id)
        if sale["state"] != "DRAFT":
            return self._error(409, "SALE_NOT_DRAFT", "Sale is not in DRAFT state")
        item = source.get(code)
        if item is None:
            return self._not_found(kind, code)
        if item["ubicacion"] != "BODEGA":
            return self._error(409, f"{kind}_NOT_IN_BODEGA", f"{kind.title()} {code} is not in BODEGA")
        if any(i["code"] == code for i in sale["items"]):
            return self._error(409, f"{kind}_ALREADY_IN_SALE", f"{kind.title()} {code} already in sale")
        sale["items"].append({"code": code, "type": kind})
        return self._success(sale, f"{kind.title()} agregado a la venta")

    def _order_remove_box(self, params: dict) -> RawResponse:
        return self._remove_from_sale(params.get("saleId", ""), params.get("boxCode", ""), "BOX")

    def _order_remove_pallet(self, params: dict) -> RawResponse:
        return self._remove_from_sale(params.get("saleId", ""), params.get("palletCode", ""), "PALLET")

    def _remove_from_sale(self, sale_id: str, code: str, kind: str) -> RawResponse:
        sale = self.sales.get(sale_id)
        if sale is None:
            return self._not_found("SALE", sale_id)
        if sale["state"] != "DRAFT":
            return self._error(409, "SALE_NOT_DRAFT", "Sale is not in DRAFT state")
        remaining = [i for i in sale["items"] if not (i["code"] == code and i["type"] == kind)]
        if len(remaining) == len(sale["items"]):
            return self._error(404, f"{kind}_NOT_IN_SALE", f"{kind.title()} {code} is not in sale {sale_id}")
        sale["items"] = remaining
        return self._success(sale, f"{kind.title()} removido de la venta")

    # ===================
    # ADMIN
    # ===================

    def _issue_create(self, params: dict) -> RawResponse:
        issue = {"id": f"ISSUE-{len(self.issues) + 1:04d}", "status": "PENDING", **params}
        self.issues.append(issue)
        return self._success({"issueNumber": issue["id"], **issue}, "Reporte recibido", status_code=201)

    # ===================
    # ENVELOPES
    # ===================

    def _meta(self) -> dict:
        return {"requestId": f"sim-{len(self.requests):06d}"}

    def _success(self, data: Any, message: str = "OK", status_code: int = 200) -> RawResponse:
        body = {"status": "success", "message": message, "data": data, "meta": self._meta()}
        return self._json(status_code, body)

    def _error(self, status_code: int, code: str, message: str) -> RawResponse:
        body = {
            "status": "fail" if status_code < 500 else "error",
            "message": message,
            "error": {"code": code, "message": message},
            "meta": self._meta(),
        }
        return self._json(status_code, body)

    def _not_found(self, kind: str, code: str) -> RawResponse:
        return self._error(404, f"{kind}_NOT_FOUND", f"{kind.title()} not found: {code}")

    @staticmethod
    def _json(status_code: int, body: dict) -> RawResponse:
        return RawResponse(
            status_code=status_code,
            headers={"content-type": "application/json"},
            text=json.dumps(body, ensure_ascii=False),
        )
