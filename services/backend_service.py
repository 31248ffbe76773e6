"""
Warehouse backend service.

Typed operations over the consolidated endpoints (/inventory, /sales,
/admin) and the direct ones (/getInfoFromScannedCode, /createPallet,
/health). This is where transport exceptions become Failure results;
callers above this layer only ever see canonical results.
"""

from typing import Any, Optional

import structlog

from config import CodeLengthTable, get_settings
from exceptions import NetworkError, RequestTimeoutError, ErrorCategory, categorize
from integrations.transport import build_transport
from models.issue import IssueReport
from models.requests import (
    CONSOLIDATED_ENDPOINTS,
    ConsolidatedRequest,
    RawRequest,
    RequestConfig,
)
from models.results import CanonicalResult, Failure, fail
from models.scan import EntityType, Location
from models.sale import SaleState
from services.code_service import classify
from services.request_executor import RequestExecutor
from services.response_normalizer import normalize_response

logger = structlog.get_logger(__name__)


class BackendService:
    """
    Warehouse backend operations.

    Every method returns a CanonicalResult; none raises for network or
    backend failures.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        config: Optional[RequestConfig] = None,
        table: Optional[CodeLengthTable] = None
    ):
        self.executor = executor
        self.config = config
        self.table = table

    # ===================
    # CORE
    # ===================

    async def send(self, request: RawRequest) -> CanonicalResult:
        """
        Execute a raw request and normalize the answer.

        Args:
            request: Request to send

        Returns:
            Success or Failure (NETWORK_ERROR / TIMEOUT_ERROR on transport faults)
        """
        try:
            response = await self.executor.execute(request, self.config)
        except (NetworkError, RequestTimeoutError) as e:
            logger.warning(
                "backend_unreachable",
                request=request.describe(),
                error_code=e.code,
                error=e.message,
            )
            return fail(e.code, e.message, details=e.details)

        result = normalize_response(response)

        if isinstance(result, Failure) and categorize(result.error_code) == ErrorCategory.UNKNOWN:
            logger.error(
                "backend_unknown_failure",
                request=request.describe(),
                error_code=result.error_code,
                status_code=response.status_code,
                payload=response.text,
            )
        return result

    async def call(
        self,
        endpoint: str,
        resource: str,
        action: str,
        params: Optional[dict[str, Any]] = None
    ) -> CanonicalResult:
        """
        Call a consolidated endpoint.

        Args:
            endpoint: /inventory, /sales or /admin
            resource: box, pallet, order, issue...
            action: get, move, create...
            params: Action parameters

        Returns:
            Success or Failure

        Raises:
            ValueError: If endpoint is not a consolidated endpoint
        """
        if endpoint not in CONSOLIDATED_ENDPOINTS:
            raise ValueError(f"Unknown endpoint: {endpoint}")

        body = ConsolidatedRequest(resource=resource, action=action, params=params or {})
        logger.debug("backend_call", endpoint=endpoint, resource=resource, action=action)
        return await self.send(RawRequest(method="POST", path=endpoint, body=body.model_dump()))

    # ===================
    # INVENTORY
    # ===================

    async def get_box(self, codigo: str) -> CanonicalResult:
        return await self.call("/inventory", "box", "get", {"codigo": codigo})

    async def move_box(self, codigo: str, ubicacion: Location) -> CanonicalResult:
        return await self.call("/inventory", "box", "move", {
            "codigo": codigo,
            "ubicacion": Location(ubicacion).value,
        })

    async def get_pallet(self, codigo: str) -> CanonicalResult:
        return await self.call("/inventory", "pallet", "get", {"codigo": codigo})

    async def create_pallet(self, params: dict[str, Any]) -> CanonicalResult:
        return await self.call("/inventory", "pallet", "create", params)

    async def move_pallet(self, codigo: str, ubicacion: Location) -> CanonicalResult:
        return await self.call("/inventory", "pallet", "move", {
            "codigo": codigo,
            "ubicacion": Location(ubicacion).value,
        })

    async def close_pallet(self, codigo: str) -> CanonicalResult:
        return await self.call("/inventory", "pallet", "close", {"codigo": codigo})

    # ===================
    # SALES
    # ===================

    async def get_orders(self, state: Optional[SaleState] = None) -> CanonicalResult:
        """List sales orders, optionally filtered by state."""
        params: dict[str, Any] = {}
        if state is not None:
            params["filters"] = {"state": SaleState(state).value}
        return await self.call("/sales", "order", "get", params)

    async def get_draft_sales(self) -> CanonicalResult:
        return await self.get_orders(SaleState.DRAFT)

    async def get_sale(self, sale_id: str) -> CanonicalResult:
        """One sales order with the items already in it."""
        return await self.call("/sales", "order", "get", {"id": sale_id})

    async def get_confirmed_sales(self) -> CanonicalResult:
        """Sales ready to be dispatched."""
        return await self.get_orders(SaleState.CONFIRMED)

    async def add_box_to_sale(self, sale_id: str, box_code: str) -> CanonicalResult:
        return await self.call("/sales", "order", "add-box", {
            "saleId": sale_id,
            "boxCode": box_code,
        })

    async def add_pallet_to_sale(self, sale_id: str, pallet_code: str) -> CanonicalResult:
        return await self.call("/sales", "order", "add-pallet", {
            "saleId": sale_id,
            "palletCode": pallet_code,
        })

    async def remove_box_from_sale(self, sale_id: str, box_code: str) -> CanonicalResult:
        return await self.call("/sales", "order", "remove-box", {
            "saleId": sale_id,
            "boxCode": box_code,
        })

    async def remove_pallet_from_sale(self, sale_id: str, pallet_code: str) -> CanonicalResult:
        return await self.call("/sales", "order", "remove-pallet", {
            "saleId": sale_id,
            "palletCode": pallet_code,
        })

    # ===================
    # ADMIN
    # ===================

    async def create_issue(self, report: IssueReport) -> CanonicalResult:
        return await self.call("/admin", "issue", "create", report.to_params())

    # ===================
    # DIRECT ENDPOINTS
    # ===================

    async def get_info_from_scanned_code(self, codigo: str) -> CanonicalResult:
        """
        Look up whatever a scanned code refers to.

        The code is classified locally first; unrecognized codes never
        reach the network.
        """
        classified = classify(codigo, self.table)
        if isinstance(classified, Failure):
            return classified

        return await self.send(RawRequest(
            method="GET",
            path="/getInfoFromScannedCode",
            params={"codigo": classified.data.normalized},
        ))

    async def create_pallet_direct(self, codigo: str) -> CanonicalResult:
        """Create an empty pallet with a known code via POST /createPallet."""
        classified = classify(codigo, self.table)
        if isinstance(classified, Failure):
            return classified
        if classified.data.entity_type != EntityType.PALLET:
            return fail(
                "INVALID_PALLET_CODE",
                "El código ingresado corresponde a una caja, no a un pallet",
                field="codigo",
            )

        return await self.send(RawRequest(
            method="POST",
            path="/createPallet",
            body={"codigo": classified.data.normalized},
        ))

    async def health_check(self) -> CanonicalResult:
        """Check backend reachability. Never raises."""
        return await self.send(RawRequest(method="GET", path="/health"))

    async def aclose(self) -> None:
        await self.executor.transport.aclose()


# Singleton instance
_backend_service: Optional[BackendService] = None


def get_backend_service() -> BackendService:
    """Get or create BackendService instance."""
    global _backend_service
    if _backend_service is None:
        current = get_settings()
        config = RequestConfig.from_settings(current)
        _backend_service = BackendService(
            RequestExecutor(build_transport(current), config),
            config,
        )
    return _backend_service


def reset_backend_service() -> None:
    """Drop the cached instance (settings changed, app shutdown)."""
    global _backend_service
    _backend_service = None


async def close_backend_service() -> None:
    """Close the cached instance's transport and drop it."""
    global _backend_service
    if _backend_service is not None:
        await _backend_service.aclose()
        _backend_service = None
