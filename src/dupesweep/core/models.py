"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for one duplicate-sweep session: scanned files, duplicate groups,
progress and cleanup results, plus the validated parameter object shared by GUI and CLI.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple
from enum import Enum

from dupesweep.core.exceptions import InvalidInputError


# =============================
# Enums
# =============================

class FileCategory(str, Enum):
    """Coarse file category derived from the extension."""
    DOCUMENT = "document"
    IMAGE = "image"
    VIDEO = "video"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        mapping = {
            FileCategory.DOCUMENT: "Documents",
            FileCategory.IMAGE: "Images",
            FileCategory.VIDEO: "Videos",
            FileCategory.OTHER: "Other",
        }
        return mapping.get(self, self.value)

    @classmethod
    def get_all(cls) -> FrozenSet["FileCategory"]:
        return frozenset(cls)


class SelectionStrategy(Enum):
    """Which copy of a duplicate group is kept by auto-selection."""
    NEWEST = "newest"
    OLDEST = "oldest"
    SHORTEST_PATH = "shortest"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            SelectionStrategy.NEWEST: "Keep newest",
            SelectionStrategy.OLDEST: "Keep oldest",
            SelectionStrategy.SHORTEST_PATH: "Keep shortest path",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class CleanupMode(Enum):
    """Removal flavour: recoverable trash or permanent delete."""
    TRASH = "trash"
    PERMANENT_DELETE = "delete"

    @property
    def phase_label(self) -> str:
        """Progress label shown while the cleanup runs."""
        if self is CleanupMode.TRASH:
            return "Moving to trash…"
        return "Deleting…"

    @property
    def audit_action(self) -> str:
        return "TRASH" if self is CleanupMode.TRASH else "DELETE"


class ExecutionMode(Enum):
    """
    Execution shape of a cleanup batch.
    PER_ITEM calls FileOps once per path and tolerates partial failure,
    BATCH sends every path in one request and gets a single verdict.
    """
    PER_ITEM = "per-item"
    BATCH = "batch"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class FileRecord:
    """
    One file reported by the scanner. Immutable once produced.
    modified_at is the modification time in seconds since the epoch.
    """
    path: str
    size: int  # in bytes
    modified_at: float = 0.0

    def __post_init__(self):
        if not self.path:
            raise ValueError("File path cannot be empty")
        if self.size < 0:
            raise ValueError("File size cannot be negative")

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}, modified_at={self.modified_at}>"


@dataclass(frozen=True)
class DuplicateGroup:
    """
    Files sharing identical content, identified by a content fingerprint.
    A group with fewer than two files is not a duplicate group and is never shown.
    """
    fingerprint: str
    files: Tuple[FileRecord, ...]

    def __post_init__(self):
        # Accept any iterable but always store an immutable tuple
        if not isinstance(self.files, tuple):
            object.__setattr__(self, "files", tuple(self.files))

    @property
    def duplicate_count(self) -> int:
        """How many files are in this group."""
        return len(self.files)

    @property
    def size(self) -> int:
        """Size of a single copy (all copies are byte-identical)."""
        return self.files[0].size if self.files else 0

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    def is_duplicate(self) -> bool:
        """True if this group contains at least two files."""
        return self.duplicate_count >= 2

    def without(self, paths: Iterable[str]) -> "DuplicateGroup":
        """Returns a copy of this group with the given paths removed."""
        excluded = set(paths)
        return DuplicateGroup(
            fingerprint=self.fingerprint,
            files=tuple(f for f in self.files if f.path not in excluded),
        )

    def __repr__(self):
        return f"<DuplicateGroup fingerprint={self.fingerprint}, count={len(self.files)}>"


def meaningful_groups(groups: Iterable[DuplicateGroup]) -> Tuple[DuplicateGroup, ...]:
    """Drops every group with fewer than two files."""
    return tuple(g for g in groups if g.is_duplicate())


@dataclass(frozen=True)
class ProgressState:
    """
    Last progress report. total == 0 means the phase is indeterminate.
    """
    phase: str
    current: int = 0
    total: int = 0

    @property
    def is_indeterminate(self) -> bool:
        return self.total == 0

    @property
    def percent(self) -> Optional[float]:
        if self.total <= 0:
            return None
        return min(100.0, (self.current / self.total) * 100)


@dataclass(frozen=True)
class OperationStats:
    """Summary of a finished cleanup batch: what was actually removed."""
    files_removed: int
    bytes_freed: int


@dataclass(frozen=True)
class BatchResult:
    """
    Single verdict returned by the batch variants of FileOps.
    A failed batch lists in `removed` any paths that were already gone before it stopped.
    """
    success: bool
    error: Optional[str] = None
    removed: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.removed, tuple):
            object.__setattr__(self, "removed", tuple(self.removed))


@dataclass(frozen=True)
class CleanupOutcome:
    """
    Result of one cleanup batch. Counts always reflect the actual effect,
    never the requested totals.
    """
    mode: CleanupMode
    execution: ExecutionMode
    requested: int = 0
    requested_bytes: int = 0
    removed_paths: Tuple[str, ...] = ()
    failures: Dict[str, str] = field(default_factory=dict)
    bytes_freed: int = 0
    error: Optional[str] = None

    @property
    def files_removed(self) -> int:
        return len(self.removed_paths)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures) or self.error is not None

    def to_stats(self) -> OperationStats:
        return OperationStats(files_removed=self.files_removed, bytes_freed=self.bytes_freed)


"""
DTO for sweep parameters with built-in validation.
Interface-agnostic — used by both GUI and CLI.
"""

@dataclass
class SweepParams:
    """Parameters for a scan-and-cleanup session with validation."""
    roots: List[str]
    default_strategy: SelectionStrategy = SelectionStrategy.NEWEST
    categories: FrozenSet[FileCategory] = field(default_factory=FileCategory.get_all)
    removal_mode: CleanupMode = CleanupMode.TRASH
    execution: ExecutionMode = ExecutionMode.PER_ITEM
    max_workers: int = 1
    audit_log_path: Optional[str] = None

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        self.roots = normalize_roots(self.roots)
        if not self.roots:
            raise InvalidInputError("At least one directory must be selected")

        if self.max_workers < 1:
            raise InvalidInputError("Worker count must be at least 1")

        self.categories = frozenset(self.categories)

    @staticmethod
    def from_cli_values(
            roots: List[str],
            strategy: str = "newest",
            categories: Optional[List[str]] = None,
            removal_mode: str = "trash",
            batch: bool = False,
            max_workers: int = 1,
            audit_log_path: Optional[str] = None,
    ) -> "SweepParams":
        """
        Factory method to create params from plain string inputs.
        Useful for CLI argument parsing or GUI input conversion.
        """
        try:
            strategy_enum = SelectionStrategy(strategy.strip().lower())
        except ValueError:
            raise InvalidInputError(f"Unknown selection strategy: '{strategy}'")

        try:
            mode_enum = CleanupMode(removal_mode.strip().lower())
        except ValueError:
            raise InvalidInputError(f"Unknown removal mode: '{removal_mode}'")

        category_set = FileCategory.get_all()
        if categories:
            try:
                category_set = frozenset(FileCategory(c.strip().lower()) for c in categories)
            except ValueError as e:
                raise InvalidInputError(f"Unknown file category: {e}")

        return SweepParams(
            roots=roots,
            default_strategy=strategy_enum,
            categories=category_set,
            removal_mode=mode_enum,
            execution=ExecutionMode.BATCH if batch else ExecutionMode.PER_ITEM,
            max_workers=max_workers,
            audit_log_path=audit_log_path,
        )


def normalize_roots(roots: Optional[Iterable[str]]) -> List[str]:
    """Strips whitespace, drops empty entries and duplicates while keeping order."""
    if not roots:
        return []
    seen = set()
    result = []
    for root in roots:
        root = (root or "").strip()
        if root and root not in seen:
            seen.add(root)
            result.append(root)
    return result
