"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/lifecycle.py
Scan lifecycle state machine.

    IDLE -> SCANNING -> {COMPLETED, CANCELLED, FAILED}
    COMPLETED / CANCELLED / FAILED -> SCANNING   (next scan start)

apply_event() is total: every (state, event) pair has an answer. Events that
arrive after the scan has left SCANNING leave the state unchanged, so late or
duplicate notifications from the scanner are harmless.
"""
from enum import Enum
from typing import Dict


class ScanState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ScanState.COMPLETED, ScanState.CANCELLED, ScanState.FAILED)


class ScanEvent(Enum):
    START = "start"
    PROGRESS = "progress"
    CANCEL_REQUESTED = "cancel-requested"
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    FAILED = "failed"


_SCANNING_TRANSITIONS: Dict[ScanEvent, ScanState] = {
    ScanEvent.PROGRESS: ScanState.SCANNING,
    ScanEvent.CANCEL_REQUESTED: ScanState.SCANNING,
    ScanEvent.SUCCEEDED: ScanState.COMPLETED,
    ScanEvent.CANCELLED: ScanState.CANCELLED,
    ScanEvent.FAILED: ScanState.FAILED,
}


def apply_event(state: ScanState, event: ScanEvent) -> ScanState:
    """Returns the state reached by applying event to state."""
    if event is ScanEvent.START:
        return ScanState.SCANNING
    if state is not ScanState.SCANNING:
        return state
    return _SCANNING_TRANSITIONS[event]
