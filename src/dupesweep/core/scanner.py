"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Default Scanner: walks a set of root directories and returns groups of
byte-identical files.
Features:
- Recursively scans every root with os.walk (sorted, so results are stable)
- Skips symlinks, zero-byte files and OS trash directories
- Narrows candidates by size, then partial hash, then full content hash
- Reports progress per phase and honours cooperative cancel()
"""

import os
import sys
import threading
import time
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from dupesweep.core.exceptions import ScanCancelledError, ScanError
from dupesweep.core.hasher import HasherImpl
from dupesweep.core.interfaces import ProgressCallback, Scanner
from dupesweep.core.models import DuplicateGroup, FileRecord

logger = logging.getLogger(__name__)

PHASE_SCANNING = "Scanning"
PHASE_PARTIAL = "Phase 1/2: Partial Hash"
PHASE_FULL = "Phase 2/2: Full Hash"
PHASE_COMPLETE = "Complete"


class FileSystemScanner(Scanner):
    """
    Finds duplicate files below a set of root directories.

    Attributes:
        hasher: Computes partial and full content hashes
        progress_interval: Files between two "Scanning" progress reports
    """

    def __init__(self, hasher: Optional[HasherImpl] = None, progress_interval: int = 100):
        self.hasher = hasher or HasherImpl()
        self.progress_interval = progress_interval
        self._stop_event = threading.Event()

    def cancel(self) -> None:
        """Sets the stopped flag; the running scan raises ScanCancelledError at its next check."""
        self._stop_event.set()

    def is_stopped(self) -> bool:
        return self._stop_event.is_set()

    def _check_cancelled(self) -> None:
        if self._stop_event.is_set():
            logger.debug("Scan interrupted by user")
            raise ScanCancelledError()

    def scan(
            self,
            roots: Sequence[str],
            progress_callback: Optional[ProgressCallback] = None
    ) -> List[DuplicateGroup]:
        """
        Walks the roots and returns duplicate groups with 2+ files each.
        Raises ScanError for a root that is missing or not a directory.
        """
        self._stop_event.clear()
        start_time = time.time()

        def report(phase: str, current: int, total: int) -> None:
            if progress_callback:
                progress_callback(phase, current, total)

        for root in roots:
            root_path = Path(root)
            if not root_path.exists():
                raise ScanError(f"Directory does not exist: {root}")
            if not root_path.is_dir():
                raise ScanError(f"Not a directory: {root}")

        # Phase 0: collect files and group them by size
        report(PHASE_SCANNING, 0, 0)
        records = self._collect_files(roots, report)
        self._check_cancelled()

        candidates = list(self._group_by(records, lambda r: r.size).values())

        # Phase 1: partial hash (head + tail)
        candidates = self._refine(
            candidates, PHASE_PARTIAL, report,
            lambda r: self.hasher.compute_partial_hash(r.path, r.size)
        )

        # Phase 2: full content hash
        results = []
        total = len(candidates)
        report(PHASE_FULL, 0, total)
        for index, group in enumerate(candidates, 1):
            self._check_cancelled()
            for fingerprint, files in self._group_by(group, lambda r: self.hasher.compute_full_hash(r.path)).items():
                results.append(DuplicateGroup(fingerprint=fingerprint, files=tuple(files)))
            report(PHASE_FULL, index, total)
        self._check_cancelled()

        report(PHASE_COMPLETE, 100, 100)
        logger.debug(
            f"Scan completed in {time.time() - start_time:.2f}s: "
            f"{len(records)} files, {len(results)} duplicate groups"
        )
        return results

    def _collect_files(self, roots: Iterable[str], report: Callable[[str, int, int], None]) -> List[FileRecord]:
        records = []
        seen = set()
        processed = 0

        for root in roots:
            logger.debug(f"Scanning directory: {root}")
            for dirpath, dirs, files in os.walk(root):
                self._check_cancelled()

                # Pre-filter subdirectories BEFORE os.walk enters them
                dirs[:] = sorted(d for d in dirs if self._prefilter_dirs(Path(dirpath) / d))

                for filename in sorted(files):
                    path = Path(dirpath) / filename
                    record = self._process_file(path)
                    processed += 1
                    if record is not None:
                        real = os.path.realpath(record.path)
                        if real not in seen:
                            seen.add(real)
                            records.append(record)
                    if processed % self.progress_interval == 0:
                        self._check_cancelled()
                        report(PHASE_SCANNING, processed, 0)

        report(PHASE_SCANNING, processed, 0)
        return records

    def _refine(
            self,
            groups: List[List[FileRecord]],
            phase: str,
            report: Callable[[str, int, int], None],
            key_func: Callable[[FileRecord], Any]
    ) -> List[List[FileRecord]]:
        refined = []
        total = len(groups)
        report(phase, 0, total)
        for index, group in enumerate(groups, 1):
            self._check_cancelled()
            refined.extend(self._group_by(group, key_func).values())
            report(phase, index, total)
        return refined

    @staticmethod
    def _group_by(records: List[FileRecord], key_func: Callable[[FileRecord], Any]) -> Dict[Any, List[FileRecord]]:
        """
        Groups records by a computed key, keeping only keys shared by 2+ records.
        Records whose key cannot be computed (unreadable files) are skipped.
        """
        groups = defaultdict(list)
        skipped_files = 0
        for record in records:
            try:
                groups[key_func(record)].append(record)
            except OSError as e:
                logger.debug(f"Skipping {record.path}: {e}")
                skipped_files += 1

        if skipped_files > 0:
            logger.warning(f"Skipped {skipped_files} files due to read errors")

        return {key: group for key, group in groups.items() if len(group) >= 2}

    @staticmethod
    def _is_system_trash(path: Path) -> bool:
        """
        Check if path belongs to OS trash/recycle bin (cross-platform).
        Returns False on any error (fail-safe: better to scan than skip valid data).
        """
        try:
            path_str = str(path.resolve(strict=False))

            if sys.platform == "win32":
                return "$Recycle.Bin" in path_str or "\\Recycler\\" in path_str
            elif sys.platform == "darwin":
                return "/.Trash/" in path_str or path_str.endswith("/.Trash")
            else:
                return ".local/share/Trash" in path_str or "/.trash/" in path_str
        except (OSError, ValueError):
            return False

    def _prefilter_dirs(self, path: Path) -> bool:
        """Skip system trash, symlinked and inaccessible directories."""
        if FileSystemScanner._is_system_trash(path):
            logger.debug(f"Skipping system trash directory: {path}")
            return False

        try:
            if path.is_symlink():
                return False
            return path.is_dir() and os.access(path, os.R_OK | os.X_OK)
        except OSError:
            logger.debug(f"Skipping inaccessible directory: {path}")
            return False

    @staticmethod
    def _process_file(path: Path) -> Optional[FileRecord]:
        """Returns a FileRecord for a regular, non-empty, non-symlink file."""
        try:
            if path.is_symlink():
                logger.debug(f"Skipping symbolic link: {path}")
                return None
            stat_result = path.stat()
        except OSError as e:
            logger.debug(f"Could not stat {path}: {e}")
            return None

        if not path.is_file():
            return None

        if stat_result.st_size == 0:
            logger.debug(f"Skipping zero-byte file: {path}")
            return None

        return FileRecord(path=str(path), size=stat_result.st_size, modified_at=stat_result.st_mtime)
