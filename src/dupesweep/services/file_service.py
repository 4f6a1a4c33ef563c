"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Cross-platform file removal: move to the system trash (send2trash) or delete permanently.
Every successful removal can be recorded in an append-only audit log.
"""
import logging
import os
import time
from pathlib import Path
from typing import Optional, Sequence

from send2trash import send2trash

from dupesweep.core.exceptions import FileOpError
from dupesweep.core.interfaces import FileOps
from dupesweep.core.models import BatchResult, CleanupMode

logger = logging.getLogger(__name__)

AUDIT_LOGGER_NAME = "dupesweep.audit"


def configure_audit_log(log_path: Optional[str]) -> logging.Logger:
    """
    Routes the audit logger to log_path (append mode).
    Lines look like: [1718000000] TRASH: /path/to/file
    """
    audit = logging.getLogger(AUDIT_LOGGER_NAME)
    for handler in list(audit.handlers):
        audit.removeHandler(handler)
        handler.close()

    if log_path:
        handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(message)s"))
        audit.addHandler(handler)
        audit.setLevel(logging.INFO)
    audit.propagate = False
    return audit


class SystemFileOps(FileOps):
    """
    FileOps backed by the local filesystem.
    Single-item calls raise FileOpError; batch calls return a BatchResult.
    """

    def __init__(self, audit_logger: Optional[logging.Logger] = None):
        self.audit_logger = audit_logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def trash_one(self, path: str) -> None:
        """Moves a file to the system trash."""
        self._check_exists(path)
        try:
            send2trash(str(Path(path).resolve()))
        except Exception as e:
            raise FileOpError(f"Failed to move to trash: {e}", path=path) from e
        self._audit(CleanupMode.TRASH, path)

    def delete_one(self, path: str) -> None:
        """Deletes a file permanently."""
        self._check_exists(path)
        try:
            os.remove(path)
        except OSError as e:
            raise FileOpError(f"Failed to delete: {e}", path=path) from e
        self._audit(CleanupMode.PERMANENT_DELETE, path)

    def trash_many(self, paths: Sequence[str]) -> BatchResult:
        return self._run_batch(paths, CleanupMode.TRASH)

    def delete_many(self, paths: Sequence[str]) -> BatchResult:
        return self._run_batch(paths, CleanupMode.PERMANENT_DELETE)

    def _run_batch(self, paths: Sequence[str], mode: CleanupMode) -> BatchResult:
        """
        Refuses the whole batch unless every path is an existing regular file,
        then removes them in order and stops at the first failure. A stopped batch
        reports the paths removed before the failure.
        """
        missing = [p for p in paths if not Path(p).is_file()]
        if missing:
            return BatchResult(
                success=False,
                error=f"{len(missing)} of {len(paths)} file(s) not found, first: {missing[0]}"
            )

        remove = self.trash_one if mode is CleanupMode.TRASH else self.delete_one
        for index, path in enumerate(paths):
            try:
                remove(path)
            except FileOpError as e:
                logger.warning(f"Batch {mode.value} stopped at {path}: {e}")
                return BatchResult(
                    success=False,
                    error=f"Removed {index} of {len(paths)} file(s) before failing on {path}: {e}",
                    removed=tuple(paths[:index]),
                )
        return BatchResult(success=True)

    @staticmethod
    def _check_exists(path: str) -> None:
        if not Path(path).exists():
            raise FileOpError(f"File not found: {path}", path=path)

    def _audit(self, mode: CleanupMode, path: str) -> None:
        self.audit_logger.info(f"[{int(time.time())}] {mode.audit_action}: {path}")
