"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/controller.py
Scan lifecycle controller: starts a scan through the Scanner collaborator,
folds its progress events and its result back into the session, and handles
cooperative cancellation.

Usage:
    # For GUI (scan runs on a worker thread, cancel comes from the UI thread):
    controller = ScanController(session, FileSystemScanner())
    worker = ScanWorker(controller, roots)      # calls controller.start_scan(roots)
    ...
    controller.cancel_scan()

    # For CLI:
    state = controller.start_scan(["/home/user/Pictures"])
"""
import logging
import threading
from typing import Iterable, Optional

from dupesweep.core.exceptions import InvalidInputError, ScanCancelledError, ScanError, ScanInProgressError
from dupesweep.core.interfaces import Scanner
from dupesweep.core.lifecycle import ScanEvent, ScanState, apply_event
from dupesweep.core.models import (
    FileCategory, ProgressState, SelectionStrategy, meaningful_groups, normalize_roots
)
from dupesweep.core.selection import SelectionEngine
from dupesweep.core.session import DuplicateSession

logger = logging.getLogger(__name__)

INITIAL_PHASE = "Initializing…"
CANCELLED_NOTICE = "Scan cancelled by user."


class ScanController:
    """
    Drives one scan at a time against the shared session.

    Every scan gets a generation number. Progress events and results are only
    applied while their generation is current and the scan has not finished,
    so a late event can never overwrite a newer state.
    """

    def __init__(
            self,
            session: DuplicateSession,
            scanner: Scanner,
            default_strategy: SelectionStrategy = SelectionStrategy.NEWEST
    ):
        self.session = session
        self.scanner = scanner
        self.default_strategy = default_strategy
        self._lock = threading.RLock()
        self._generation = 0
        self._cancel_requested = False

    @property
    def state(self) -> ScanState:
        return self.session.state

    def is_scanning(self) -> bool:
        return self.session.state is ScanState.SCANNING

    def is_cancel_requested(self) -> bool:
        with self._lock:
            return self._cancel_requested

    def start_scan(self, roots: Iterable[str]) -> ScanState:
        """
        Runs a scan over roots and blocks until the scanner returns.
        Returns the terminal state reached (COMPLETED, CANCELLED or FAILED).

        Raises:
            InvalidInputError: roots is empty.
            ScanInProgressError: another scan is still running.
            OperationInProgressError: a cleanup is running.
        """
        roots = normalize_roots(roots)
        if not roots:
            raise InvalidInputError("At least one directory must be selected")

        with self._lock:
            if self.session.state is ScanState.SCANNING:
                raise ScanInProgressError()
            self.session.begin_operation(DuplicateSession.SCAN)
            self._generation += 1
            generation = self._generation
            self._cancel_requested = False
            self.session.update(
                state=apply_event(self.session.state, ScanEvent.START),
                groups=(),
                selection=frozenset(),
                active_categories=FileCategory.get_all(),
                stats=None,
                error=None,
                notice=None,
                progress=ProgressState(phase=INITIAL_PHASE, current=0, total=0),
            )

        logger.info(f"Scan #{generation} started for {len(roots)} root(s): {roots}")

        def on_progress(phase: str, current: int, total: Optional[int] = 0) -> None:
            self._on_progress(generation, phase, current, total)

        try:
            groups = self.scanner.scan(roots, progress_callback=on_progress)
        except ScanCancelledError:
            return self._finish(generation, ScanEvent.CANCELLED)
        except ScanError as e:
            logger.warning(f"Scan #{generation} failed: {e}")
            return self._finish(generation, ScanEvent.FAILED, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error in scan #{generation}")
            return self._finish(generation, ScanEvent.FAILED, error=str(e))
        else:
            return self._finish(generation, ScanEvent.SUCCEEDED, groups=groups)

    def cancel_scan(self) -> bool:
        """
        Requests cooperative cancellation of the running scan.
        Returns False when no scan is running. The state moves to CANCELLED once
        the scanner call returns, whatever it returns.
        """
        with self._lock:
            if self.session.state is not ScanState.SCANNING or self._cancel_requested:
                return False
            self._cancel_requested = True
            generation = self._generation

            # Still under the lock: only the current generation is cancelled
            self.scanner.cancel()

        logger.info(f"Cancellation requested for scan #{generation}")
        return True

    def _on_progress(self, generation: int, phase: str, current: int, total: Optional[int]) -> None:
        with self._lock:
            if generation != self._generation or self._cancel_requested:
                return
            if self.session.state is not ScanState.SCANNING:
                return
            self.session.update(progress=ProgressState(phase=phase, current=current, total=total or 0))

    def _finish(self, generation: int, event: ScanEvent, groups=None, error: Optional[str] = None) -> ScanState:
        with self._lock:
            try:
                if self._cancel_requested and event is not ScanEvent.CANCELLED:
                    logger.info(f"Discarding late {event.value} result of cancelled scan #{generation}")
                    event = ScanEvent.CANCELLED

                new_state = apply_event(self.session.state, event)
                if event is ScanEvent.SUCCEEDED:
                    groups = meaningful_groups(groups or ())
                    selection = SelectionEngine.auto_select(groups, self.default_strategy)
                    self.session.update(state=new_state, groups=groups, selection=selection, progress=None)
                    logger.info(
                        f"Scan #{generation} completed: {len(groups)} duplicate group(s), "
                        f"{len(selection)} file(s) preselected"
                    )
                elif event is ScanEvent.CANCELLED:
                    self.session.update(state=new_state, progress=None, notice=CANCELLED_NOTICE)
                    logger.info(f"Scan #{generation} cancelled")
                else:
                    self.session.update(state=new_state, progress=None, error=error)
                return new_state
            finally:
                self._cancel_requested = False
                self.session.end_operation(DuplicateSession.SCAN)
