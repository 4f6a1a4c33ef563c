"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/exceptions.py
Error kinds raised across the sweep engine and its collaborators.
"""
from typing import Optional


class DupeSweepError(Exception):
    """Base class for every error raised by dupesweep."""


class InvalidInputError(DupeSweepError, ValueError):
    """Raised when an operation is called with unusable input (e.g. no roots to scan)."""


class ScanInProgressError(InvalidInputError):
    """Raised when a scan is requested while another scan is still running."""

    def __init__(self):
        super().__init__("A scan is already in progress")


class OperationInProgressError(DupeSweepError):
    """Raised when a scan and a cleanup would mutate the session at the same time."""

    def __init__(self, running: str, requested: str):
        self.running = running
        self.requested = requested
        super().__init__(f"Cannot start {requested} while {running} is running")


class ScanCancelledError(DupeSweepError):
    """Raised by a scanner once it has honoured a cancellation request."""

    def __init__(self, message: str = "Scan cancelled by user"):
        super().__init__(message)


class ScanError(DupeSweepError):
    """Raised by a scanner when the scan itself fails."""


class FileOpError(DupeSweepError):
    """Raised when removing a single file fails."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class BatchOpError(DupeSweepError):
    """Raised when a batch removal request fails as a whole."""
