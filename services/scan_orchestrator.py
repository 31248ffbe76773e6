"""
Scan orchestrator.

Drives one terminal's scan session: classify the code, check the target
location, then either move a box straight away or hold a pallet until the
operator confirms, cancels or reports an issue.

One orchestrator per terminal. It owns the session history and the pending
confirmation; readers get immutable snapshots.
"""

import asyncio
from collections import deque
from typing import Any, Optional

import structlog

from config import CodeLengthTable, get_settings
from models.issue import IssueReport, IssueType
from models.results import CanonicalResult, ErrorMessage, Failure, Success, fail, ok
from models.scan import (
    EntityType,
    Location,
    PendingConfirmation,
    ScanHistoryEntry,
    ScanOutcome,
    ScanResult,
    ScanState,
    ScannedCode,
)
from services.backend_service import BackendService, get_backend_service
from services.code_service import classify
from services.error_translation_service import translate
from services.location_service import is_valid_target, ordered_locations, parse_location
from services.scan_state import ScanEvent, transition

logger = structlog.get_logger(__name__)


class ScanOrchestrator:
    """
    Scan session for one terminal.

    Only one scan may be validating or committing at a time; anything
    submitted meanwhile is rejected with SCAN_IN_PROGRESS, never queued.
    """

    def __init__(
        self,
        backend: BackendService,
        table: Optional[CodeLengthTable] = None,
        history_capacity: Optional[int] = None
    ):
        self.backend = backend
        self.table = table
        capacity = history_capacity or get_settings().history_capacity
        self._history: deque[ScanHistoryEntry] = deque(maxlen=capacity)

        self.state = ScanState.IDLE
        self.pending: Optional[PendingConfirmation] = None
        self.pending_details: Any = None
        self.last_outcome: Optional[ScanOutcome] = None
        self.last_issue: Optional[dict] = None

        # Bumped by cancel/reset/new scans; commits from an older generation are discarded
        self._generation = 0
        self._in_flight: Optional[int] = None
        self._commit_task: Optional[asyncio.Future] = None

    # ===================
    # READ
    # ===================

    @property
    def history(self) -> tuple[ScanHistoryEntry, ...]:
        """Successful scans, most recent first."""
        return tuple(self._history)

    @property
    def busy(self) -> bool:
        return self._in_flight is not None

    def snapshot(self) -> ScanOutcome:
        """Current session state without doing anything."""
        if self.last_outcome is not None and self.last_outcome.state == self.state:
            return self.last_outcome
        return self._outcome(ok(None))

    # ===================
    # OPERATIONS
    # ===================

    async def submit_scan(self, raw: Optional[str], location: Any) -> ScanOutcome:
        """
        Handle a scanned code.

        Boxes are moved immediately. Pallets wait for confirm(); no network
        call happens until then.

        Args:
            raw: Code as scanned
            location: Target location name

        Returns:
            ScanOutcome (FAILED with a translated error on validation failure)
        """
        if self.busy:
            return self._reject_busy(raw)

        self._apply(ScanEvent.SCAN)
        self._generation += 1
        generation = self._generation
        self._in_flight = generation
        self.pending = None
        self.pending_details = None

        try:
            logger.info("scan_submitted", codigo=raw, ubicacion=str(location))

            classified = classify(raw, self.table)
            if isinstance(classified, Failure):
                return self._fail_validation(classified)

            code: ScannedCode = classified.data
            target = parse_location(location)
            if target is None or not is_valid_target(code.entity_type, target):
                return self._fail_validation(self._invalid_location(code, location))

            if code.entity_type == EntityType.PALLET:
                self.pending = PendingConfirmation(code=code, requested_location=target)
                self._apply(ScanEvent.PALLET_CLASSIFIED)
                logger.info(
                    "pallet_confirmation_pending",
                    codigo=code.normalized,
                    ubicacion=target.value,
                )
                return self._record(self._outcome(ok(
                    self.pending,
                    f"Confirma el movimiento del pallet {code.normalized} a {target.value}",
                )))

            self._apply(ScanEvent.BOX_CLASSIFIED)
            return await self._commit(code, target, generation)
        finally:
            self._release(generation)

    async def load_pending_details(self) -> ScanOutcome:
        """Fetch the pending pallet's contents for display."""
        if self.pending is None:
            return self._reject_no_pending()

        generation = self._generation
        code = self.pending.code.normalized
        result = await self.backend.get_pallet(code)

        if generation != self._generation:
            logger.info("pallet_details_discarded", codigo=code)
            return self._outcome(result, stale=True)

        if isinstance(result, Success):
            self.pending_details = result.data
            return self._outcome(result)
        return self._outcome(result, error=translate(result, "scan"))

    async def confirm(self) -> ScanOutcome:
        """
        Move the pending pallet.

        Issues exactly one move per confirmation. Confirming again after
        success returns the previous outcome without another request.
        """
        if self.busy:
            return self._reject_busy(self.pending.code.raw if self.pending else None)

        if self.state == ScanState.SUCCEEDED and self.last_outcome is not None:
            logger.debug("scan_confirm_ignored", reason="already_succeeded")
            return self.last_outcome

        if self.pending is None or self.state not in (
            ScanState.AWAITING_CONFIRMATION,
            ScanState.FAILED,
        ):
            return self._reject_no_pending()

        self._apply(ScanEvent.CONFIRM)
        generation = self._generation
        self._in_flight = generation
        try:
            return await self._commit(
                self.pending.code,
                self.pending.requested_location,
                generation,
            )
        finally:
            self._release(generation)

    async def cancel(self) -> ScanOutcome:
        """Drop the pending pallet, stop any in-flight move and go back to IDLE."""
        if self.pending is not None:
            logger.info("scan_cancelled", codigo=self.pending.code.normalized)
        self._apply(ScanEvent.CANCEL)
        self._abandon()
        return self._record(self._outcome(ok(None, "Operación cancelada")))

    async def report_issue(self, reason: Optional[str] = None) -> ScanOutcome:
        """
        Reject the pending pallet and report it.

        The session goes back to IDLE whatever the backend answers; the
        outcome carries the backend result of the report.

        Args:
            reason: Operator's explanation

        Returns:
            ScanOutcome in IDLE
        """
        if self.busy:
            return self._reject_busy(self.pending.code.raw if self.pending else None)
        if self.pending is None:
            return self._reject_no_pending()

        pending = self.pending
        self._apply(ScanEvent.REPORT_ISSUE)
        self._abandon()

        code = pending.code.normalized
        reason = (reason or "").strip()
        self.last_issue = {
            "codigo": code,
            "ubicacion": pending.requested_location.value,
            "reason": reason,
        }
        report = IssueReport(
            descripcion=(
                f"Pallet {code} rechazado: {reason}"
                if reason
                else f"Pallet {code} rechazado en confirmación"
            ),
            box_code=code,
            type=IssueType.OTHER,
            ubicacion=pending.requested_location.value,
        )
        logger.info("scan_issue_reported", codigo=code, reason=reason)

        generation = self._generation
        self._in_flight = generation
        try:
            result = await self.backend.create_issue(report)
        finally:
            self._release(generation)

        if generation != self._generation:
            logger.info("scan_issue_result_discarded", codigo=code, generation=generation)
            return self._outcome(result, stale=True)

        if isinstance(result, Failure):
            logger.warning("scan_issue_report_failed", codigo=code, error_code=result.error_code)
            return self._record(self._outcome(result, error=translate(result, "issue")))
        return self._record(self._outcome(result))

    def clear_history(self) -> None:
        self._history.clear()

    def reset(self) -> None:
        """Back to IDLE from any state. History is kept."""
        self.state = ScanState.IDLE
        self._abandon()
        self.last_outcome = None
        self.last_issue = None

    # ===================
    # INTERNALS
    # ===================

    async def _commit(
        self,
        code: ScannedCode,
        location: Location,
        generation: int
    ) -> ScanOutcome:
        """
        Send the move for a classified code and apply its result.

        The move runs as its own task so cancel() and reset() can stop it,
        backoff included. A move stopped that way comes back as a stale
        outcome; cancelling the caller's task still propagates.
        """
        if code.entity_type == EntityType.BOX:
            move = self.backend.move_box(code.normalized, location)
        else:
            move = self.backend.move_pallet(code.normalized, location)

        task = asyncio.ensure_future(move)
        self._commit_task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.info("scan_commit_stopped", codigo=code.normalized, generation=generation)
                return self._outcome(ok(None, "Operación cancelada"), stale=True)
            self._apply(ScanEvent.COMMIT_FAILED)
            raise
        except Exception:
            logger.exception("scan_commit_crashed", codigo=code.normalized, ubicacion=location.value)
            if generation == self._generation:
                self._apply(ScanEvent.COMMIT_FAILED)
            raise
        finally:
            if self._commit_task is task:
                self._commit_task = None

        if generation != self._generation:
            logger.info(
                "scan_result_discarded",
                codigo=code.normalized,
                generation=generation,
                current_generation=self._generation,
            )
            return self._outcome(result, stale=True)

        if isinstance(result, Failure):
            self._apply(ScanEvent.COMMIT_FAILED)
            logger.warning(
                "scan_commit_failed",
                codigo=code.normalized,
                ubicacion=location.value,
                error_code=result.error_code,
            )
            return self._record(self._outcome(result, error=translate(result, "move")))

        scan_result = ScanResult(
            codigo=code.normalized,
            tipo=code.entity_type,
            ubicacion=location,
            estado=result.data.get("estado") if isinstance(result.data, dict) else None,
            extra=result.data if isinstance(result.data, dict) else {"data": result.data},
        )
        committed = ok(scan_result, result.message)
        self._history.appendleft(ScanHistoryEntry(result=committed))
        self.pending = None
        self.pending_details = None
        self._apply(ScanEvent.COMMIT_SUCCEEDED)

        logger.info(
            "scan_committed",
            codigo=code.normalized,
            tipo=code.entity_type.value,
            ubicacion=location.value,
        )
        return self._record(self._outcome(committed))

    def _apply(self, event: ScanEvent) -> None:
        self.state = transition(self.state, event)

    def _abandon(self) -> None:
        self._generation += 1
        self._in_flight = None
        self.pending = None
        self.pending_details = None
        if self._commit_task is not None and not self._commit_task.done():
            self._commit_task.cancel()
        self._commit_task = None

    def _release(self, generation: int) -> None:
        if self._in_flight == generation:
            self._in_flight = None

    def _fail_validation(self, result: Failure) -> ScanOutcome:
        self._apply(ScanEvent.VALIDATION_FAILED)
        logger.info("scan_validation_failed", error_code=result.error_code)
        return self._record(self._outcome(result, error=translate(result, "scan")))

    def _invalid_location(self, code: ScannedCode, location: Any) -> Failure:
        allowed = [loc.value for loc in ordered_locations(code.entity_type)]
        label = "la caja" if code.entity_type == EntityType.BOX else "el pallet"
        return fail(
            "INVALID_LOCATION",
            f"Ubicación no válida para {label}: {location}",
            field="ubicacion",
            details={"ubicacion": str(location), "allowed": allowed},
        )

    def _reject_busy(self, raw: Optional[str]) -> ScanOutcome:
        logger.warning("scan_rejected_busy", codigo=raw, state=self.state.value)
        result = fail("SCAN_IN_PROGRESS", "Ya hay un escaneo en proceso")
        return self._outcome(result, error=translate(result))

    def _reject_no_pending(self) -> ScanOutcome:
        result = fail("NO_PENDING_CONFIRMATION", "No hay un pallet pendiente de confirmación")
        return self._outcome(result, error=translate(result))

    def _outcome(
        self,
        result: CanonicalResult,
        error: Optional[ErrorMessage] = None,
        stale: bool = False
    ) -> ScanOutcome:
        return ScanOutcome(
            state=self.state,
            result=result,
            error=error,
            pending=self.pending,
            pending_details=self.pending_details,
            stale=stale,
        )

    def _record(self, outcome: ScanOutcome) -> ScanOutcome:
        self.last_outcome = outcome
        return outcome


# One session per terminal, keyed by terminal ID
_sessions: dict[str, ScanOrchestrator] = {}


def get_scan_orchestrator(terminal_id: str = "default") -> ScanOrchestrator:
    """Get or create the scan session of a terminal."""
    if terminal_id not in _sessions:
        _sessions[terminal_id] = ScanOrchestrator(get_backend_service())
        logger.info("scan_session_created", terminal_id=terminal_id)
    return _sessions[terminal_id]


def reset_scan_sessions() -> None:
    """Drop every terminal session."""
    _sessions.clear()
