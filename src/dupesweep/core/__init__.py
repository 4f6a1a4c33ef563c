"""
Core sweep engine — session model, selection and filter engines, scan lifecycle and cleanup.

This package contains the UI-independent foundation of dupesweep:
- Models: FileRecord, DuplicateGroup, ProgressState, OperationStats, SweepParams
- SelectionEngine / FilterEngine: pure functions over immutable groups
- DuplicateSession: single owner of the session state
- ScanController: scan start / progress / cancel / completion
- CleanupOrchestrator: batch trash/delete with partial-failure accounting
- FileSystemScanner + HasherImpl: default xxHash-based Scanner

No GUI dependencies — suitable for CLI and server usage.
"""

from .exceptions import (
    DupeSweepError, InvalidInputError, ScanInProgressError, OperationInProgressError,
    ScanCancelledError, ScanError, FileOpError, BatchOpError)
from .models import (
    FileRecord, DuplicateGroup, FileCategory, SelectionStrategy, CleanupMode, ExecutionMode,
    ProgressState, OperationStats, BatchResult, CleanupOutcome, SweepParams)
from .lifecycle import ScanState, ScanEvent, apply_event
from .selection import SelectionEngine
from .filters import FilterEngine
from .session import DuplicateSession, SessionSnapshot
from .controller import ScanController
from .cleanup import CleanupOrchestrator
from .hasher import HasherImpl, XXHashAlgorithmImpl
from .scanner import FileSystemScanner

__all__ = [
    "DupeSweepError",
    "InvalidInputError",
    "ScanInProgressError",
    "OperationInProgressError",
    "ScanCancelledError",
    "ScanError",
    "FileOpError",
    "BatchOpError",
    "FileRecord",
    "DuplicateGroup",
    "FileCategory",
    "SelectionStrategy",
    "CleanupMode",
    "ExecutionMode",
    "ProgressState",
    "OperationStats",
    "BatchResult",
    "CleanupOutcome",
    "SweepParams",
    "ScanState",
    "ScanEvent",
    "apply_event",
    "SelectionEngine",
    "FilterEngine",
    "DuplicateSession",
    "SessionSnapshot",
    "ScanController",
    "CleanupOrchestrator",
    "HasherImpl",
    "XXHashAlgorithmImpl",
    "FileSystemScanner",
]
