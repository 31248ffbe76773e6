"""
HTTP transport backed by httpx.

Sends JSON requests to the warehouse backend and hands back the raw
response. Status codes are never interpreted here.
"""

from __future__ import annotations

from typing import Optional

import httpx
import structlog

from exceptions import NetworkError, RequestTimeoutError
from models.requests import RawRequest, RawResponse

logger = structlog.get_logger(__name__)


DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json, text/plain;q=0.9, */*;q=0.8",
}


def build_async_client(
    base_url: str,
    *,
    extra_headers: Optional[dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the terminal's defaults.

    The per-request timeout is set on each call; the client only carries
    the base URL and headers. `transport` replaces the network layer (tests
    pass an `httpx.MockTransport`).
    """
    headers = dict(DEFAULT_HEADERS)
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        headers=headers,
        follow_redirects=True,
        transport=transport,
    )


class HttpTransport:
    """Transport that talks to the real backend over HTTP."""

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = base_url
        self.client = client or build_async_client(base_url)

    async def send(self, request: RawRequest, timeout_seconds: float) -> RawResponse:
        """
        Send one request.

        Args:
            request: Request to send
            timeout_seconds: Timeout for this attempt

        Returns:
            RawResponse with status, headers and body text

        Raises:
            RequestTimeoutError: If the attempt timed out
            NetworkError: If the backend could not be reached
        """
        try:
            response = await self.client.request(
                request.method,
                request.path,
                params=request.params,
                json=request.body if request.method == "POST" else None,
                timeout=httpx.Timeout(timeout_seconds),
            )
        except httpx.TimeoutException as e:
            logger.warning(
                "http_request_timed_out",
                request=request.describe(),
                timeout_seconds=timeout_seconds,
            )
            raise RequestTimeoutError(
                int(timeout_seconds * 1000),
                details={"request": request.describe(), "error": str(e)}
            ) from e
        except httpx.RequestError as e:
            logger.warning(
                "http_request_failed",
                request=request.describe(),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise NetworkError(
                message=_describe_transport_error(e),
                details={"request": request.describe(), "error": str(e)}
            ) from e

        return RawResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            text=response.text,
        )

    async def aclose(self) -> None:
        await self.client.aclose()


def _describe_transport_error(error: httpx.RequestError) -> str:
    if isinstance(error, httpx.ConnectError):
        return "No se pudo conectar al servidor - verifica la URL de la API"
    if isinstance(error, httpx.ProxyError):
        return "Error de proxy - verifica la configuración de red"
    if isinstance(error, httpx.TooManyRedirects):
        return "Demasiadas redirecciones - verifica la URL de la API"
    return "Error de red - verifica tu conexión a internet"
