"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/session.py
Single owner of one sweep session's state: scan results, selection, category
filter, progress, last cleanup stats and messages.

Every field holds an immutable value that is replaced wholesale under one lock,
so a reader never sees a half-updated selection or group list. Filtered groups
and the selection size are derived on demand, never stored.
"""
import logging
import threading
from dataclasses import dataclass, replace
from typing import AbstractSet, Callable, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from dupesweep.core.exceptions import OperationInProgressError
from dupesweep.core.filters import FilterEngine
from dupesweep.core.lifecycle import ScanState
from dupesweep.core.models import (
    DuplicateGroup, FileCategory, OperationStats, ProgressState, SelectionStrategy, meaningful_groups
)
from dupesweep.core.selection import SelectionEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSnapshot:
    """Point-in-time copy of the whole session."""
    state: ScanState = ScanState.IDLE
    groups: Tuple[DuplicateGroup, ...] = ()
    selection: FrozenSet[str] = frozenset()
    active_categories: FrozenSet[FileCategory] = FileCategory.get_all()
    progress: Optional[ProgressState] = None
    stats: Optional[OperationStats] = None
    error: Optional[str] = None
    notice: Optional[str] = None

    @property
    def visible_groups(self) -> Sequence[DuplicateGroup]:
        return FilterEngine.apply_filters(self.groups, self.active_categories)

    @property
    def selection_size(self) -> int:
        return SelectionEngine.compute_selection_size(self.groups, self.selection)


SessionListener = Callable[[SessionSnapshot], None]


class DuplicateSession:
    """
    Holds the state shared by the scan controller and the cleanup orchestrator.
    Only one of them may run at a time (see begin_operation()).
    """

    SCAN = "scan"
    CLEANUP = "cleanup"

    def __init__(self):
        self._lock = threading.RLock()
        self._snapshot = SessionSnapshot()
        self._running: Optional[str] = None
        self._listeners: List[SessionListener] = []

    # ---------- observation ----------

    def add_listener(self, listener: SessionListener) -> None:
        """Adds a listener that receives the new snapshot after every change."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def state(self) -> ScanState:
        return self.snapshot().state

    @property
    def groups(self) -> Tuple[DuplicateGroup, ...]:
        return self.snapshot().groups

    @property
    def selection(self) -> FrozenSet[str]:
        return self.snapshot().selection

    def visible_groups(self) -> Sequence[DuplicateGroup]:
        return self.snapshot().visible_groups

    def selection_size(self) -> int:
        return self.snapshot().selection_size

    # ---------- mutual exclusion of scan / cleanup ----------

    def begin_operation(self, name: str) -> None:
        """Claims the session for a scan or a cleanup."""
        with self._lock:
            if self._running is not None:
                raise OperationInProgressError(running=self._running, requested=name)
            self._running = name

    def end_operation(self, name: str) -> None:
        with self._lock:
            if self._running == name:
                self._running = None

    @property
    def running_operation(self) -> Optional[str]:
        with self._lock:
            return self._running

    # ---------- state replacement ----------

    def update(self, **changes) -> SessionSnapshot:
        """
        Replaces the given snapshot fields atomically and notifies listeners.
        Groups are re-filtered so that no group with fewer than 2 files is ever stored.
        """
        with self._lock:
            snapshot = self._commit(changes)
        self._notify(snapshot)
        return snapshot

    def _commit(self, changes) -> SessionSnapshot:
        if "groups" in changes:
            changes["groups"] = meaningful_groups(changes["groups"])
        self._snapshot = replace(self._snapshot, **changes)
        return self._snapshot

    def _notify(self, snapshot: SessionSnapshot) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Error in session listener")

    def remove_files(self, paths: Iterable[str], **changes) -> SessionSnapshot:
        """
        Prunes removed files from the groups, drops groups left with fewer than
        two files and clears stale selection entries, all in one replacement.
        Extra snapshot fields can be replaced in the same step.
        """
        removed = frozenset(paths)
        with self._lock:
            current = self._snapshot
            groups = meaningful_groups(g.without(removed) for g in current.groups)
            selection = SelectionEngine.prune_selection(groups, current.selection - removed)
            snapshot = self._commit(dict(changes, groups=groups, selection=selection))
        self._notify(snapshot)
        return snapshot

    def _replace_selection(self, compute: Callable[[SessionSnapshot], AbstractSet[str]]) -> FrozenSet[str]:
        with self._lock:
            current = self._snapshot
            selection = SelectionEngine.prune_selection(current.groups, compute(current))
            snapshot = self._commit({"selection": selection})
        self._notify(snapshot)
        return selection

    # ---------- operator actions ----------

    def toggle(self, path: str) -> FrozenSet[str]:
        """Flips one path. Paths that are not part of the current results are ignored."""
        return self._replace_selection(lambda s: SelectionEngine.toggle(s.selection, path))

    def select_all_visible(self) -> FrozenSet[str]:
        """Selects every file in the currently filtered view."""
        return self._replace_selection(lambda s: SelectionEngine.select_all(s.visible_groups))

    def deselect_all(self) -> FrozenSet[str]:
        return self._replace_selection(lambda s: SelectionEngine.deselect_all())

    def auto_select(self, strategy: SelectionStrategy) -> FrozenSet[str]:
        return self._replace_selection(lambda s: SelectionEngine.auto_select(s.groups, strategy))

    def keep_newest(self) -> FrozenSet[str]:
        return self.auto_select(SelectionStrategy.NEWEST)

    def keep_oldest(self) -> FrozenSet[str]:
        return self.auto_select(SelectionStrategy.OLDEST)

    def keep_shortest_path(self) -> FrozenSet[str]:
        return self.auto_select(SelectionStrategy.SHORTEST_PATH)

    def set_categories(self, categories: AbstractSet[FileCategory]) -> FrozenSet[FileCategory]:
        active = frozenset(categories)
        self.update(active_categories=active)
        return active

    def toggle_category(self, category: FileCategory) -> FrozenSet[FileCategory]:
        with self._lock:
            current = self._snapshot.active_categories
            active = current - {category} if category in current else current | {category}
            snapshot = self._commit({"active_categories": frozenset(active)})
        self._notify(snapshot)
        return snapshot.active_categories

    def dismiss_stats(self) -> None:
        self.update(stats=None)
