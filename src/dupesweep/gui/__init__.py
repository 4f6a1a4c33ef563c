"""Qt integration (install with the [gui] extra)."""

from .worker import ScanWorker, CleanupWorker, WorkerSignals

__all__ = ["ScanWorker", "CleanupWorker", "WorkerSignals"]
