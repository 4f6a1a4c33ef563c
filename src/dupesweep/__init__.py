"""
dupesweep — find duplicate files across several folders and remove the extra copies safely.

Core features:
- Scan lifecycle with progress reporting and cooperative cancellation
- Keep-newest / keep-oldest / keep-shortest-path auto-selection
- Category filters (documents, images, videos, other)
- Removal to system trash (via send2trash) or permanent delete, per item or as one batch
- Optional Qt workers with PySide6 (install with [gui] extra)
- CLI interface for headless/server usage
"""

# Get version
try:
    from importlib.metadata import version as _version, PackageNotFoundError
    __version__ = _version("dupesweep")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API — only what users should import directly
from dupesweep.core import (
    FileRecord, DuplicateGroup, FileCategory, SelectionStrategy, CleanupMode, ExecutionMode,
    SweepParams, DuplicateSession, ScanController, CleanupOrchestrator, FileSystemScanner,
    SelectionEngine, FilterEngine, ScanState)
from dupesweep.services import SystemFileOps
from dupesweep.utils.convert_utils import ConvertUtils

__all__ = [
    "FileRecord",
    "DuplicateGroup",
    "FileCategory",
    "SelectionStrategy",
    "CleanupMode",
    "ExecutionMode",
    "SweepParams",
    "DuplicateSession",
    "ScanController",
    "CleanupOrchestrator",
    "FileSystemScanner",
    "SelectionEngine",
    "FilterEngine",
    "ScanState",
    "SystemFileOps",
    "ConvertUtils",
    "__version__",
]
