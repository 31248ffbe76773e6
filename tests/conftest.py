"""
Shared test fixtures.

Async code is driven with asyncio.run() from synchronous tests.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from typing import Generator

from config import get_code_length_table
from integrations.simulated_backend import SimulatedBackend
from models.requests import RequestConfig
from services.backend_service import BackendService
from services.request_executor import RequestExecutor


# ===================
# FAKE TRANSPORT
# ===================

class FakeTransport:
    """
    Transport that replays scripted outcomes.

    Each outcome is a RawResponse (returned), an exception (raised) or an
    async callable taking the request. The last outcome repeats once the
    script runs out.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []
        self.closed = False

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def send(self, request, timeout_seconds):
        self.requests.append(request)
        if not self.outcomes:
            raise AssertionError(f"Unexpected request: {request.describe()}")

        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return await outcome(request)
        return outcome

    async def aclose(self):
        self.closed = True


class RecordingSleep:
    """Sleep replacement that records delays and returns immediately."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def v3_table():
    """Current code lengths: box 15, pallet 12."""
    return get_code_length_table("v3")


@pytest.fixture
def no_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def request_config() -> RequestConfig:
    return RequestConfig(timeout_ms=1000, retries=3, max_backoff_seconds=30)


@pytest.fixture
def make_backend(no_sleep, request_config, v3_table):
    """Build a BackendService over any transport, with instant backoff."""
    def _make(transport) -> BackendService:
        executor = RequestExecutor(transport, request_config, sleep=no_sleep)
        return BackendService(executor, request_config, table=v3_table)
    return _make


@pytest.fixture
def simulated_backend() -> SimulatedBackend:
    return SimulatedBackend()


@pytest.fixture
def backend(make_backend, simulated_backend) -> BackendService:
    """BackendService over a fresh simulated backend."""
    return make_backend(simulated_backend)


@pytest.fixture
def client(monkeypatch, backend) -> Generator:
    """
    TestClient for the terminal API, wired to a fresh simulated backend.
    """
    from fastapi.testclient import TestClient
    from services import backend_service, sale_service, pallet_service, scan_orchestrator
    from main import app

    monkeypatch.setattr(backend_service, "_backend_service", backend)
    monkeypatch.setattr(sale_service, "_sale_scan_service", None)
    monkeypatch.setattr(pallet_service, "_pallet_service", None)
    scan_orchestrator.reset_scan_sessions()

    with TestClient(app) as test_client:
        yield test_client

    scan_orchestrator.reset_scan_sessions()
