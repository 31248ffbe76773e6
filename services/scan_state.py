"""
Scan session state machine.

A pure reducer over an explicit transition table. The orchestrator feeds
it events; every legal move is listed in TRANSITIONS, so the whole machine
can be enumerated and tested without touching the network.

    IDLE ──SCAN──> VALIDATING ──BOX_CLASSIFIED──> COMMITTING ──> SUCCEEDED | FAILED
                       │
                       ├──PALLET_CLASSIFIED──> AWAITING_CONFIRMATION ──CONFIRM──> COMMITTING
                       │                          │
                       │                          └──CANCEL / REPORT_ISSUE──> IDLE
                       └──VALIDATION_FAILED──> FAILED
"""

from enum import Enum

from exceptions import InvalidTransitionError
from models.scan import ScanState


class ScanEvent(str, Enum):
    """Inputs to the scan state machine."""

    SCAN = "SCAN"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    BOX_CLASSIFIED = "BOX_CLASSIFIED"
    PALLET_CLASSIFIED = "PALLET_CLASSIFIED"
    CONFIRM = "CONFIRM"
    CANCEL = "CANCEL"
    REPORT_ISSUE = "REPORT_ISSUE"
    COMMIT_SUCCEEDED = "COMMIT_SUCCEEDED"
    COMMIT_FAILED = "COMMIT_FAILED"


TRANSITIONS: dict[ScanState, dict[ScanEvent, ScanState]] = {
    ScanState.IDLE: {
        ScanEvent.SCAN: ScanState.VALIDATING,
        ScanEvent.CANCEL: ScanState.IDLE,
    },
    ScanState.VALIDATING: {
        ScanEvent.VALIDATION_FAILED: ScanState.FAILED,
        ScanEvent.BOX_CLASSIFIED: ScanState.COMMITTING,
        ScanEvent.PALLET_CLASSIFIED: ScanState.AWAITING_CONFIRMATION,
    },
    ScanState.AWAITING_CONFIRMATION: {
        ScanEvent.SCAN: ScanState.VALIDATING,
        ScanEvent.CONFIRM: ScanState.COMMITTING,
        ScanEvent.CANCEL: ScanState.IDLE,
        ScanEvent.REPORT_ISSUE: ScanState.IDLE,
    },
    # CANCEL while committing stops the in-flight move
    ScanState.COMMITTING: {
        ScanEvent.COMMIT_SUCCEEDED: ScanState.SUCCEEDED,
        ScanEvent.COMMIT_FAILED: ScanState.FAILED,
        ScanEvent.CANCEL: ScanState.IDLE,
    },
    ScanState.SUCCEEDED: {
        ScanEvent.SCAN: ScanState.VALIDATING,
        ScanEvent.CANCEL: ScanState.IDLE,
    },
    # A failed pallet commit keeps its pending confirmation, so it can be
    # confirmed again or reported without re-scanning
    ScanState.FAILED: {
        ScanEvent.SCAN: ScanState.VALIDATING,
        ScanEvent.CONFIRM: ScanState.COMMITTING,
        ScanEvent.CANCEL: ScanState.IDLE,
        ScanEvent.REPORT_ISSUE: ScanState.IDLE,
    },
}

BUSY_STATES = frozenset({ScanState.VALIDATING, ScanState.COMMITTING})


def transition(state: ScanState, event: ScanEvent) -> ScanState:
    """
    Apply an event to a state.

    Args:
        state: Current state
        event: Event to apply

    Returns:
        Next state

    Raises:
        InvalidTransitionError: If the event is not allowed in this state
    """
    state = ScanState(state)
    event = ScanEvent(event)
    try:
        return TRANSITIONS[state][event]
    except KeyError:
        raise InvalidTransitionError(state.value, event.value) from None


def allowed_events(state: ScanState) -> frozenset[ScanEvent]:
    """Events accepted in a state."""
    return frozenset(TRANSITIONS[ScanState(state)])


def can_apply(state: ScanState, event: ScanEvent) -> bool:
    return ScanEvent(event) in TRANSITIONS[ScanState(state)]
