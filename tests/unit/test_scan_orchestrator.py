"""
Unit tests for the scan orchestrator.

Run: pytest tests/unit/test_scan_orchestrator.py -v
"""

import asyncio

import httpx
import pytest

from exceptions import NetworkError
from models.results import Failure, Success
from models.scan import EntityType, Location, ScanState
from services.backend_service import BackendService
from services.request_executor import RequestExecutor
from services.scan_orchestrator import ScanOrchestrator
from tests.conftest import FakeTransport
from tests.factories import EnvelopeFactory, ResponseFactory


BOX = "123456789012345"
BOX_IN_BODEGA = "123456789012346"
LOOSE_BOX = "987654321098765"
PALLET = "123456789012"


@pytest.fixture
def orchestrator(backend, v3_table) -> ScanOrchestrator:
    """Session over the simulated backend."""
    return ScanOrchestrator(backend, table=v3_table, history_capacity=20)


@pytest.fixture
def make_orchestrator(make_backend, v3_table):
    """Session over a scripted transport."""
    def _make(transport, history_capacity=20) -> ScanOrchestrator:
        return ScanOrchestrator(make_backend(transport), table=v3_table, history_capacity=history_capacity)
    return _make


class TestBoxScan:
    """Boxes are committed right away"""

    def test_box_moves_with_one_request(self, orchestrator, simulated_backend):
        """'123456789012345' to BODEGA: one call, no confirmation step."""
        outcome = asyncio.run(orchestrator.submit_scan(BOX, "BODEGA"))

        assert outcome.ok
        assert outcome.state == ScanState.SUCCEEDED
        assert outcome.pending is None
        assert len(simulated_backend.requests) == 1
        assert simulated_backend.requests[0].body["resource"] == "box"
        assert simulated_backend.requests[0].body["action"] == "move"
        assert simulated_backend.boxes[BOX]["ubicacion"] == "BODEGA"

    def test_success_appended_to_history(self, orchestrator):
        asyncio.run(orchestrator.submit_scan(BOX, "bodega"))

        assert len(orchestrator.history) == 1
        entry = orchestrator.history[0]
        assert isinstance(entry.result, Success)
        assert entry.result.data.codigo == BOX
        assert entry.result.data.tipo == EntityType.BOX
        assert entry.result.data.ubicacion == Location.BODEGA

    def test_backend_not_found_translated_for_move(self, make_orchestrator):
        """BOX_NOT_FOUND on the move → move wording, no retry, history untouched."""
        body = EnvelopeFactory.unified_error("BOX_NOT_FOUND", "Box not found")
        transport = FakeTransport(ResponseFactory.json(404, body))
        orchestrator = make_orchestrator(transport)

        outcome = asyncio.run(orchestrator.submit_scan(BOX, "BODEGA"))

        assert outcome.state == ScanState.FAILED
        assert outcome.result.error_code == "BOX_NOT_FOUND"
        assert outcome.error.message == "No se puede mover: el código no existe"
        assert outcome.error.suggestion
        assert transport.calls == 1
        assert orchestrator.history == ()

    def test_network_failure_after_retries(self, make_orchestrator, no_sleep):
        """Connection failing on every attempt: 3 retries, then NETWORK_ERROR."""
        transport = FakeTransport(NetworkError())
        orchestrator = make_orchestrator(transport)

        outcome = asyncio.run(orchestrator.submit_scan(BOX, "BODEGA"))

        assert outcome.state == ScanState.FAILED
        assert outcome.result.error_code == "NETWORK_ERROR"
        assert outcome.error.message == "Error de conexión con el servidor"
        assert transport.calls == 4
        assert no_sleep.delays == [1, 2, 4]

    def test_backend_rejects_location_with_move_wording(self, make_orchestrator):
        body = EnvelopeFactory.unified_error("INVALID_LOCATION", "Location not allowed for box")
        transport = FakeTransport(ResponseFactory.json(400, body))
        orchestrator = make_orchestrator(transport)

        outcome = asyncio.run(orchestrator.submit_scan(BOX, "BODEGA"))

        assert outcome.state == ScanState.FAILED
        assert outcome.error.message == "No se puede mover: ubicación inválida"
        assert transport.calls == 1

    def test_unclassified_error_leaves_session_usable(self, make_orchestrator):
        """An exception nobody maps still ends the commit in FAILED."""
        request = httpx.Request("POST", "http://backend.local/inventory")
        transport = FakeTransport(
            httpx.TooManyRedirects("Exceeded maximum allowed redirects", request=request),
            ResponseFactory.ok({"codigo": BOX}),
        )
        orchestrator = make_orchestrator(transport)

        with pytest.raises(httpx.TooManyRedirects):
            asyncio.run(orchestrator.submit_scan(BOX, "BODEGA"))

        assert orchestrator.state == ScanState.FAILED
        assert orchestrator.busy is False

        outcome = asyncio.run(orchestrator.submit_scan(BOX, "BODEGA"))

        assert outcome.state == ScanState.SUCCEEDED
        assert transport.calls == 2


class TestValidation:
    """Validation happens before any network call"""

    def test_unrecognized_code(self, orchestrator, simulated_backend):
        outcome = asyncio.run(orchestrator.submit_scan("12345", "BODEGA"))

        assert outcome.state == ScanState.FAILED
        assert outcome.result.error_code == "UNRECOGNIZED_FORMAT"
        assert outcome.error.message == outcome.result.message
        assert simulated_backend.requests == []

    def test_empty_code(self, orchestrator, simulated_backend):
        outcome = asyncio.run(orchestrator.submit_scan("  ", "BODEGA"))

        assert outcome.result.error_code == "EMPTY"
        assert outcome.error.message == "El código es requerido"
        assert simulated_backend.requests == []

    def test_box_to_pallet_only_location(self, orchestrator, simulated_backend):
        outcome = asyncio.run(orchestrator.submit_scan(BOX, "PREVENTA"))

        assert outcome.state == ScanState.FAILED
        assert outcome.result.error_code == "INVALID_LOCATION"
        assert outcome.result.field == "ubicacion"
        assert "PREVENTA" not in outcome.result.details["allowed"]
        assert simulated_backend.requests == []

    def test_unknown_location(self, orchestrator, simulated_backend):
        outcome = asyncio.run(orchestrator.submit_scan(PALLET, "OFICINA"))

        assert outcome.result.error_code == "INVALID_LOCATION"
        assert simulated_backend.requests == []

    def test_failed_scan_leaves_history(self, orchestrator):
        asyncio.run(orchestrator.submit_scan(BOX, "BODEGA"))
        asyncio.run(orchestrator.submit_scan("1", "BODEGA"))

        assert len(orchestrator.history) == 1


class TestPalletConfirmation:
    """Pallets wait for explicit confirmation"""

    def test_pallet_waits_without_network(self, orchestrator, simulated_backend):
        """Pallet to BODEGA: AWAITING_CONFIRMATION, nothing sent."""
        outcome = asyncio.run(orchestrator.submit_scan(PALLET, "BODEGA"))

        assert outcome.state == ScanState.AWAITING_CONFIRMATION
        assert outcome.pending.code.normalized == PALLET
        assert outcome.pending.requested_location == Location.BODEGA
        assert simulated_backend.requests == []

    def test_confirm_sends_exactly_one_move(self, orchestrator, simulated_backend):
        async def scenario():
            await orchestrator.submit_scan(PALLET, "BODEGA")
            return await orchestrator.confirm()

        outcome = asyncio.run(scenario())

        assert outcome.state == ScanState.SUCCEEDED
        assert outcome.pending is None
        assert len(simulated_backend.requests) == 1
        assert simulated_backend.requests[0].body["resource"] == "pallet"
        assert simulated_backend.pallets[PALLET]["ubicacion"] == "BODEGA"
        assert orchestrator.history[0].result.data.estado == "open"

    def test_reconfirm_after_success_is_noop(self, orchestrator, simulated_backend):
        async def scenario():
            await orchestrator.submit_scan(PALLET, "BODEGA")
            first = await orchestrator.confirm()
            second = await orchestrator.confirm()
            return first, second

        first, second = asyncio.run(scenario())

        assert second == first
        assert len(simulated_backend.requests) == 1
        assert len(orchestrator.history) == 1

    def test_confirm_without_pending(self, orchestrator, simulated_backend):
        outcome = asyncio.run(orchestrator.confirm())

        assert outcome.result.error_code == "NO_PENDING_CONFIRMATION"
        assert outcome.state == ScanState.IDLE
        assert outcome.error.message == "No hay un pallet pendiente de confirmación"
        assert simulated_backend.requests == []

    def test_failed_commit_keeps_pending_for_retry(self, make_orchestrator):
        failure = EnvelopeFactory.unified_error("INTERNAL_ERROR", "Write failed")
        transport = FakeTransport(
            ResponseFactory.json(500, failure),
            ResponseFactory.ok({"codigo": PALLET, "estado": "open"}),
        )
        orchestrator = make_orchestrator(transport)

        async def scenario():
            await orchestrator.submit_scan(PALLET, "BODEGA")
            failed = await orchestrator.confirm()
            retried = await orchestrator.confirm()
            return failed, retried

        failed, retried = asyncio.run(scenario())

        assert failed.state == ScanState.FAILED
        assert failed.pending is not None
        assert orchestrator.history[0].result.data.codigo == PALLET
        assert retried.state == ScanState.SUCCEEDED
        assert transport.calls == 2

    def test_cancel_clears_pending(self, orchestrator, simulated_backend):
        async def scenario():
            await orchestrator.submit_scan(PALLET, "BODEGA")
            return await orchestrator.cancel()

        outcome = asyncio.run(scenario())

        assert outcome.state == ScanState.IDLE
        assert orchestrator.pending is None
        assert simulated_backend.requests == []

    def test_new_scan_replaces_pending(self, orchestrator):
        async def scenario():
            await orchestrator.submit_scan(PALLET, "BODEGA")
            return await orchestrator.submit_scan("210987654321", "VENTA")

        outcome = asyncio.run(scenario())

        assert outcome.pending.code.normalized == "210987654321"

    def test_load_pending_details(self, orchestrator, simulated_backend):
        async def scenario():
            await orchestrator.submit_scan(PALLET, "BODEGA")
            return await orchestrator.load_pending_details()

        outcome = asyncio.run(scenario())

        assert outcome.state == ScanState.AWAITING_CONFIRMATION
        assert outcome.pending_details["numeroCajas"] == 2
        assert simulated_backend.requests[0].body["action"] == "get"


class TestReportIssue:
    """Rejecting a pending pallet"""

    def test_report_issue_returns_to_idle(self, orchestrator, simulated_backend):
        async def scenario():
            await orchestrator.submit_scan(PALLET, "BODEGA")
            return await orchestrator.report_issue("Pallet roto")

        outcome = asyncio.run(scenario())

        assert outcome.state == ScanState.IDLE
        assert outcome.ok
        assert orchestrator.pending is None
        assert orchestrator.last_issue == {
            "codigo": PALLET,
            "ubicacion": "BODEGA",
            "reason": "Pallet roto",
        }
        assert simulated_backend.issues[0]["boxCode"] == PALLET
        assert "Pallet roto" in simulated_backend.issues[0]["descripcion"]

    def test_report_issue_after_failed_commit(self, make_orchestrator):
        failure = EnvelopeFactory.unified_error("INTERNAL_ERROR", "Write failed")
        transport = FakeTransport(
            ResponseFactory.json(500, failure),
            ResponseFactory.json(201, EnvelopeFactory.unified_success({"issueNumber": "ISSUE-0001"})),
        )
        orchestrator = make_orchestrator(transport)

        async def scenario():
            await orchestrator.submit_scan(PALLET, "BODEGA")
            await orchestrator.confirm()
            return await orchestrator.report_issue(None)

        outcome = asyncio.run(scenario())

        assert outcome.state == ScanState.IDLE
        assert transport.requests[-1].body["resource"] == "issue"
        assert orchestrator.last_issue["reason"] == ""

    def test_report_issue_failure_still_idle(self, make_orchestrator):
        transport = FakeTransport(NetworkError())
        orchestrator = make_orchestrator(transport)

        async def scenario():
            await orchestrator.submit_scan(PALLET, "BODEGA")
            return await orchestrator.report_issue("Etiqueta ilegible")

        outcome = asyncio.run(scenario())

        assert outcome.state == ScanState.IDLE
        assert isinstance(outcome.result, Failure)
        assert outcome.error.message == "Error de conexión con el servidor"

    def test_report_issue_without_pending(self, orchestrator):
        outcome = asyncio.run(orchestrator.report_issue("nada"))

        assert outcome.result.error_code == "NO_PENDING_CONFIRMATION"

    def test_reset_during_report_is_not_overwritten(self, make_orchestrator):
        async def scenario():
            release = asyncio.Event()

            async def slow(request):
                await release.wait()
                return ResponseFactory.json(201, EnvelopeFactory.unified_success({"issueNumber": "ISSUE-0001"}))

            transport = FakeTransport(slow)
            orchestrator = make_orchestrator(transport)

            await orchestrator.submit_scan(PALLET, "BODEGA")
            report = asyncio.create_task(orchestrator.report_issue("Film roto"))
            await asyncio.sleep(0)
            orchestrator.reset()
            release.set()
            return await report, orchestrator

        late, orchestrator = asyncio.run(scenario())

        assert late.stale is True
        assert orchestrator.last_outcome is None
        assert orchestrator.state == ScanState.IDLE


class TestConcurrency:
    """One scan in flight at a time"""

    def test_second_scan_rejected_while_first_in_flight(self, make_orchestrator):
        """Back-to-back scans: the second is rejected, not queued."""
        async def scenario():
            release = asyncio.Event()

            async def slow(request):
                await release.wait()
                return ResponseFactory.ok({"codigo": BOX})

            transport = FakeTransport(slow)
            orchestrator = make_orchestrator(transport)

            first = asyncio.create_task(orchestrator.submit_scan(BOX, "BODEGA"))
            await asyncio.sleep(0)
            second = await orchestrator.submit_scan(BOX_IN_BODEGA, "BODEGA")
            release.set()
            return await first, second, transport, orchestrator

        first, second, transport, orchestrator = asyncio.run(scenario())

        assert second.result.error_code == "SCAN_IN_PROGRESS"
        assert second.error.message == "Ya hay un escaneo en proceso"
        assert first.state == ScanState.SUCCEEDED
        assert transport.calls == 1
        assert len(orchestrator.history) == 1

    def test_confirm_rejected_while_committing(self, make_orchestrator):
        async def scenario():
            release = asyncio.Event()

            async def slow(request):
                await release.wait()
                return ResponseFactory.ok({"codigo": PALLET})

            transport = FakeTransport(slow)
            orchestrator = make_orchestrator(transport)

            await orchestrator.submit_scan(PALLET, "BODEGA")
            first = asyncio.create_task(orchestrator.confirm())
            await asyncio.sleep(0)
            second = await orchestrator.confirm()
            release.set()
            await first
            return second, transport

        second, transport = asyncio.run(scenario())

        assert second.result.error_code == "SCAN_IN_PROGRESS"
        assert transport.calls == 1

    def test_cancelled_commit_result_discarded(self, make_orchestrator):
        """A commit that resolves after cancel() is not applied."""
        async def scenario():
            release = asyncio.Event()

            async def slow(request):
                await release.wait()
                return ResponseFactory.ok({"codigo": BOX})

            transport = FakeTransport(slow)
            orchestrator = make_orchestrator(transport)

            first = asyncio.create_task(orchestrator.submit_scan(BOX, "BODEGA"))
            await asyncio.sleep(0)
            await orchestrator.cancel()
            release.set()
            return await first, orchestrator

        late, orchestrator = asyncio.run(scenario())

        assert late.stale is True
        assert orchestrator.state == ScanState.IDLE
        assert orchestrator.history == ()

    def test_cancel_during_backoff_stops_retries(self, request_config, v3_table):
        """Cancelling while the move waits to retry sends nothing more."""
        async def scenario():
            sleeping = asyncio.Event()
            release = asyncio.Event()

            async def gated_sleep(delay):
                sleeping.set()
                await release.wait()

            transport = FakeTransport(NetworkError(), ResponseFactory.ok({"codigo": BOX}))
            executor = RequestExecutor(transport, request_config, sleep=gated_sleep)
            backend = BackendService(executor, request_config, table=v3_table)
            orchestrator = ScanOrchestrator(backend, table=v3_table, history_capacity=20)

            first = asyncio.create_task(orchestrator.submit_scan(BOX, "BODEGA"))
            await sleeping.wait()
            cancelled = await orchestrator.cancel()
            release.set()
            late = await first
            await asyncio.sleep(0)
            return cancelled, late, transport, orchestrator

        cancelled, late, transport, orchestrator = asyncio.run(scenario())

        assert cancelled.result.message == "Operación cancelada"
        assert late.stale is True
        assert transport.calls == 1
        assert orchestrator.state == ScanState.IDLE
        assert orchestrator.busy is False
        assert orchestrator.history == ()

    def test_task_cancellation_frees_session(self, make_orchestrator):
        async def scenario():
            async def hang(request):
                await asyncio.sleep(10)

            transport = FakeTransport(hang)
            orchestrator = make_orchestrator(transport)

            task = asyncio.create_task(orchestrator.submit_scan(BOX, "BODEGA"))
            await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            return orchestrator

        orchestrator = asyncio.run(scenario())

        assert orchestrator.busy is False
        assert orchestrator.state == ScanState.FAILED


class TestHistory:
    """Bounded, most recent first"""

    def test_capacity_and_order(self, backend, v3_table):
        orchestrator = ScanOrchestrator(backend, table=v3_table, history_capacity=2)

        async def scenario():
            for code in (BOX, BOX_IN_BODEGA, LOOSE_BOX):
                await orchestrator.submit_scan(code, "TRANSITO")

        asyncio.run(scenario())

        codes = [entry.result.data.codigo for entry in orchestrator.history]
        assert codes == [LOOSE_BOX, BOX_IN_BODEGA]

    def test_history_is_immutable_snapshot(self, orchestrator):
        asyncio.run(orchestrator.submit_scan(BOX, "BODEGA"))

        history = orchestrator.history

        assert isinstance(history, tuple)
        with pytest.raises(Exception):
            history[0].result.data.codigo = "000"

    def test_clear_history(self, orchestrator):
        asyncio.run(orchestrator.submit_scan(BOX, "BODEGA"))

        orchestrator.clear_history()

        assert orchestrator.history == ()

    def test_reset_keeps_history(self, orchestrator):
        async def scenario():
            await orchestrator.submit_scan(BOX, "BODEGA")
            await orchestrator.submit_scan(PALLET, "BODEGA")

        asyncio.run(scenario())
        orchestrator.reset()

        assert orchestrator.state == ScanState.IDLE
        assert orchestrator.pending is None
        assert len(orchestrator.history) == 1

    def test_snapshot_reflects_state(self, orchestrator):
        asyncio.run(orchestrator.submit_scan(PALLET, "BODEGA"))

        snapshot = orchestrator.snapshot()

        assert snapshot.state == ScanState.AWAITING_CONFIRMATION
        assert snapshot.pending.code.normalized == PALLET
