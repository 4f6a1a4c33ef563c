"""
Qt worker runnables — follows modern Qt pattern: QRunnable + QThreadPool.
Run the scan controller and the cleanup orchestrator off the UI thread.
"""
from typing import AbstractSet, Iterable

from PySide6.QtCore import QRunnable, QObject, Signal, QMutex, QMutexLocker

from dupesweep.core.cleanup import CleanupOrchestrator
from dupesweep.core.controller import ScanController
from dupesweep.core.models import CleanupMode


class WorkerSignals(QObject):
    """Separate QObject to hold signals (QRunnable cannot emit signals directly)."""
    progress = Signal(str, int, int)   # phase, current, total
    finished = Signal(object)          # ScanState or CleanupOutcome
    error = Signal(str)


class ScanWorker(QRunnable):
    """
    Runs ScanController.start_scan() in the thread pool.
    stop() forwards to cancel_scan(); the controller settles the final state.
    Automatically deleted after execution (setAutoDelete=True).
    """

    def __init__(self, controller: ScanController, roots: Iterable[str]):
        super().__init__()
        self.controller = controller
        self.roots = list(roots)
        self.signals = WorkerSignals()
        self._stopped = False
        self._mutex = QMutex()
        self.setAutoDelete(True)

    def stop(self):
        """Requests cooperative cancellation of the scan."""
        with QMutexLocker(self._mutex):
            self._stopped = True
        self.controller.cancel_scan()

    def is_stopped(self) -> bool:
        with QMutexLocker(self._mutex):
            return self._stopped

    def _on_session_change(self, snapshot):
        """Emits progress signal safely with mutex protection."""
        progress = snapshot.progress
        if progress is None:
            return
        with QMutexLocker(self._mutex):
            if not self._stopped:
                try:
                    self.signals.progress.emit(progress.phase, progress.current, progress.total)
                except RuntimeError:
                    pass

    def run(self):
        """Main execution method. Runs in thread pool thread."""
        self.controller.session.add_listener(self._on_session_change)
        try:
            state = self.controller.start_scan(self.roots)
            self.signals.finished.emit(state)
        except Exception as e:
            self.signals.error.emit(f"{type(e).__name__}: {str(e)}")
        finally:
            self.controller.session.remove_listener(self._on_session_change)


class CleanupWorker(QRunnable):
    """Runs CleanupOrchestrator.execute_cleanup() in the thread pool."""

    def __init__(self, orchestrator: CleanupOrchestrator, selection: AbstractSet[str], mode: CleanupMode):
        super().__init__()
        self.orchestrator = orchestrator
        self.selection = frozenset(selection)
        self.mode = mode
        self.signals = WorkerSignals()
        self.setAutoDelete(True)

    def run(self):
        try:
            outcome = self.orchestrator.execute_cleanup(self.selection, self.mode)
            self.signals.finished.emit(outcome)
        except Exception as e:
            self.signals.error.emit(f"{type(e).__name__}: {str(e)}")
