"""
Transport contract.

A transport executes one raw request against the warehouse backend and
returns the response as received. It is injected into the request executor
at construction time; the HTTP client and the simulated backend are two
implementations of the same contract.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from config import Settings
from models.requests import RawRequest, RawResponse


@runtime_checkable
class Transport(Protocol):
    """Minimal contract for sending a request.

    Rules:
    - `send` is async because it performs I/O.
    - Any HTTP status is returned as a RawResponse, never raised.
    - Connection-level failures raise NetworkError; expired attempts raise
      RequestTimeoutError.
    """

    async def send(self, request: RawRequest, timeout_seconds: float) -> RawResponse:
        ...

    async def aclose(self) -> None:
        ...


def build_transport(settings: Settings) -> Transport:
    """
    Pick the transport for the given settings.

    Returns:
        SimulatedBackend when use_simulated_backend is on, HttpTransport otherwise
    """
    if settings.use_simulated_backend:
        from integrations.simulated_backend import SimulatedBackend
        return SimulatedBackend()

    from integrations.http_transport import HttpTransport
    return HttpTransport(base_url=settings.api_base_url)
