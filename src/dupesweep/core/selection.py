"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/selection.py
Pure selection logic for duplicate groups.
Decides which copies are marked for removal; never mutates the groups it is given.
"""
from typing import AbstractSet, Callable, Dict, FrozenSet, Iterable, List

from dupesweep.core.models import DuplicateGroup, FileRecord, SelectionStrategy


class SelectionEngine:
    """
    Computes selection sets (paths marked for removal) from duplicate groups.

    Auto-selection keeps exactly one file per group:
    - NEWEST: the most recently modified file is kept
    - OLDEST: the least recently modified file is kept
    - SHORTEST_PATH: the file with the shortest path string is kept
    Python's sort is stable, so ties keep the order reported by the scanner.
    """

    _SORT_KEYS: Dict[SelectionStrategy, Callable[[FileRecord], object]] = {
        SelectionStrategy.NEWEST: lambda f: -f.modified_at,
        SelectionStrategy.OLDEST: lambda f: f.modified_at,
        SelectionStrategy.SHORTEST_PATH: lambda f: len(f.path),
    }

    @staticmethod
    def sort_for_strategy(files: Iterable[FileRecord], strategy: SelectionStrategy) -> List[FileRecord]:
        """Returns the files ordered so that the one to keep comes first."""
        return sorted(files, key=SelectionEngine._SORT_KEYS[strategy])

    @staticmethod
    def auto_select(
            groups: Iterable[DuplicateGroup],
            strategy: SelectionStrategy = SelectionStrategy.NEWEST
    ) -> FrozenSet[str]:
        """Marks every file except the kept one in each group with 2+ files."""
        selected = set()
        for group in groups:
            if not group.is_duplicate():
                continue
            ordered = SelectionEngine.sort_for_strategy(group.files, strategy)
            selected.update(f.path for f in ordered[1:])
        return frozenset(selected)

    @staticmethod
    def kept_files(
            groups: Iterable[DuplicateGroup],
            strategy: SelectionStrategy = SelectionStrategy.NEWEST
    ) -> List[FileRecord]:
        """The file each group would keep under the given strategy."""
        return [
            SelectionEngine.sort_for_strategy(g.files, strategy)[0]
            for g in groups if g.is_duplicate()
        ]

    @staticmethod
    def select_all(groups: Iterable[DuplicateGroup]) -> FrozenSet[str]:
        """Union of every path in the given (already filtered) groups."""
        return frozenset(f.path for g in groups if g.is_duplicate() for f in g.files)

    @staticmethod
    def deselect_all() -> FrozenSet[str]:
        return frozenset()

    @staticmethod
    def toggle(selection: AbstractSet[str], path: str) -> FrozenSet[str]:
        """Returns a new selection with the membership of one path flipped."""
        if path in selection:
            return frozenset(selection - {path})
        return frozenset(selection | {path})

    @staticmethod
    def compute_selection_size(groups: Iterable[DuplicateGroup], selection: AbstractSet[str]) -> int:
        """
        Sums the size of every file in the current groups whose path is selected.
        Stale paths (no longer in any group) contribute nothing.
        """
        if not selection:
            return 0
        return sum(
            f.size
            for group in groups
            for f in group.files
            if f.path in selection
        )

    @staticmethod
    def prune_selection(groups: Iterable[DuplicateGroup], selection: AbstractSet[str]) -> FrozenSet[str]:
        """Drops every selected path that is no longer present in the groups."""
        present = {f.path for g in groups for f in g.files}
        return frozenset(p for p in selection if p in present)
