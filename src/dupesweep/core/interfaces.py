"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines the collaborator interfaces (Protocols) the sweep engine talks to.
The engine never walks the filesystem or removes files itself; it calls these.

Key Components:
---------------
- ProgressCallback: (phase, current, total) notification, total == 0 means indeterminate.
- Scanner: produces duplicate groups for a set of roots, supports cooperative cancel().
- FileOps: removes files one at a time and/or as a batch.
- HashAlgorithm: pluggable hash function used by the default scanner.
"""

from typing import Protocol, List, Optional, Callable, Sequence
from dupesweep.core.models import DuplicateGroup, BatchResult

ProgressCallback = Callable[[str, int, int], None]


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different hashing functions without affecting the scanner.
    """

    def new(self):
        """Returns a fresh incremental hasher exposing update() and hexdigest()."""
        ...


class Scanner(Protocol):
    """
    Interface for the duplicate-finding engine.

    Methods:
        scan: Walks the roots and returns duplicate groups.
        cancel: Requests cooperative termination of an in-flight scan.
    """

    def scan(
        self,
        roots: Sequence[str],
        progress_callback: Optional[ProgressCallback] = None
    ) -> List[DuplicateGroup]:
        """
        Scan the given directories.

        Args:
            roots: Directory paths to scan.
            progress_callback: Optional callback for progress updates (phase, current, total).

        Returns:
            List of duplicate groups.

        Raises:
            ScanCancelledError: The scan stopped because cancel() was called.
            ScanError: The scan failed.
        """
        ...

    def cancel(self) -> None:
        ...


class FileOps(Protocol):
    """
    Interface for low-level file removal.

    Single-item calls raise FileOpError on failure.
    Batch calls return a single BatchResult verdict.
    """

    def trash_one(self, path: str) -> None: ...

    def delete_one(self, path: str) -> None: ...

    def trash_many(self, paths: Sequence[str]) -> BatchResult: ...

    def delete_many(self, paths: Sequence[str]) -> BatchResult: ...
