"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/cleanup.py
Cleanup orchestrator: removes the selected files through the FileOps collaborator,
accounts for every item, then prunes the session's groups and selection.

EXECUTION SHAPES
----------------
PER_ITEM : FileOps is called once per path. A failure is recorded and the
           remaining items still run. Optional bounded parallelism.
BATCH    : One FileOps call for all paths with a single verdict. On failure
           only the paths the verdict reports as removed are pruned; with none
           reported the session is left untouched.

Both shapes report what was actually removed, never what was requested.
The operator confirmation step happens before execute_cleanup() is called.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import AbstractSet, Dict, List, Optional, Sequence

from dupesweep.core.exceptions import BatchOpError, FileOpError
from dupesweep.core.interfaces import FileOps
from dupesweep.core.models import (
    BatchResult, CleanupMode, CleanupOutcome, DuplicateGroup, ExecutionMode, FileRecord, ProgressState
)
from dupesweep.core.selection import SelectionEngine
from dupesweep.core.session import DuplicateSession

logger = logging.getLogger(__name__)


class CleanupOrchestrator:
    """Runs trash/delete batches against the session's current results."""

    def __init__(
            self,
            session: DuplicateSession,
            file_ops: FileOps,
            execution: ExecutionMode = ExecutionMode.PER_ITEM,
            max_workers: int = 1
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.session = session
        self.file_ops = file_ops
        self.execution = execution
        self.max_workers = max_workers

    def execute_cleanup(
            self,
            selection: AbstractSet[str],
            mode: CleanupMode = CleanupMode.TRASH
    ) -> CleanupOutcome:
        """
        Removes every selected file that is part of the current results.

        Raises:
            OperationInProgressError: a scan is running.
        """
        if not selection:
            return CleanupOutcome(mode=mode, execution=self.execution)

        self.session.begin_operation(DuplicateSession.CLEANUP)
        try:
            groups = self.session.groups
            targets = self._resolve_targets(groups, selection)
            requested_bytes = SelectionEngine.compute_selection_size(groups, selection)
            total = len(targets)

            logger.info(
                f"Cleanup started: {total} file(s), {requested_bytes} bytes, "
                f"mode={mode.value}, execution={self.execution.value}"
            )
            self.session.update(progress=ProgressState(phase=mode.phase_label, current=0, total=total))

            if self.execution is ExecutionMode.BATCH:
                outcome = self._run_batch(targets, mode, requested_bytes)
            else:
                outcome = self._run_per_item(targets, mode, requested_bytes)

            self._reconcile(outcome)
            return outcome
        finally:
            self.session.end_operation(DuplicateSession.CLEANUP)

    @staticmethod
    def _resolve_targets(groups: Sequence[DuplicateGroup], selection: AbstractSet[str]) -> List[FileRecord]:
        """Selected files in result order. Stale paths are not sent to FileOps."""
        targets = []
        seen = set()
        for group in groups:
            for f in group.files:
                if f.path in selection and f.path not in seen:
                    seen.add(f.path)
                    targets.append(f)
        return targets

    # ---------- per-item ----------

    def _remove_one(self, path: str, mode: CleanupMode) -> None:
        if mode is CleanupMode.TRASH:
            self.file_ops.trash_one(path)
        else:
            self.file_ops.delete_one(path)

    def _run_per_item(self, targets: List[FileRecord], mode: CleanupMode, requested_bytes: int) -> CleanupOutcome:
        total = len(targets)
        errors: Dict[str, str] = {}
        done = 0
        counter_lock = threading.Lock()

        def attempt(record: FileRecord) -> None:
            nonlocal done
            try:
                self._remove_one(record.path, mode)
            except FileOpError as e:
                errors[record.path] = str(e)
                logger.warning(f"Failed to remove {record.path}: {e}")
            except Exception as e:
                errors[record.path] = f"{type(e).__name__}: {e}"
                logger.exception(f"Unexpected error removing {record.path}")
            with counter_lock:
                done += 1
                self.session.update(progress=ProgressState(phase=mode.phase_label, current=done, total=total))

        if self.max_workers == 1 or total <= 1:
            for record in targets:
                attempt(record)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [executor.submit(attempt, record) for record in targets]
                for future in as_completed(futures):
                    future.result()

        # Accounting walks the request order, so completion order does not matter
        removed = tuple(r.path for r in targets if r.path not in errors)
        failures = {r.path: errors[r.path] for r in targets if r.path in errors}
        bytes_freed = sum(r.size for r in targets if r.path not in errors)

        return CleanupOutcome(
            mode=mode,
            execution=ExecutionMode.PER_ITEM,
            requested=total,
            requested_bytes=requested_bytes,
            removed_paths=removed,
            failures=failures,
            bytes_freed=bytes_freed,
        )

    # ---------- batch ----------

    def _run_batch(self, targets: List[FileRecord], mode: CleanupMode, requested_bytes: int) -> CleanupOutcome:
        paths = [r.path for r in targets]
        try:
            if mode is CleanupMode.TRASH:
                result = self.file_ops.trash_many(paths)
            else:
                result = self.file_ops.delete_many(paths)
        except BatchOpError as e:
            result = BatchResult(success=False, error=str(e))
        except Exception as e:
            logger.exception("Unexpected error in batch removal")
            result = BatchResult(success=False, error=f"{type(e).__name__}: {e}")

        if not result.success:
            message = result.error or "Batch operation failed"
            logger.warning(f"Batch {mode.value} of {len(paths)} file(s) failed: {message}")
            already_removed = set(result.removed)
            removed = tuple(p for p in paths if p in already_removed)
            return CleanupOutcome(
                mode=mode,
                execution=ExecutionMode.BATCH,
                requested=len(paths),
                requested_bytes=requested_bytes,
                removed_paths=removed,
                bytes_freed=sum(r.size for r in targets if r.path in already_removed),
                error=message,
            )

        return CleanupOutcome(
            mode=mode,
            execution=ExecutionMode.BATCH,
            requested=len(paths),
            requested_bytes=requested_bytes,
            removed_paths=tuple(paths),
            bytes_freed=sum(r.size for r in targets),
        )

    # ---------- reconciliation ----------

    def _reconcile(self, outcome: CleanupOutcome) -> None:
        """Prunes removed files from the session and publishes the stats."""
        if outcome.error is not None and not outcome.removed_paths:
            self.session.update(progress=None, error=outcome.error)
            return

        if outcome.error is not None:
            # Batch stopped part way: prune what is already gone
            self.session.remove_files(
                outcome.removed_paths,
                progress=None,
                stats=outcome.to_stats(),
                error=outcome.error,
            )
            logger.info(
                f"Batch stopped after removing {outcome.files_removed}/{outcome.requested} file(s), "
                f"{outcome.bytes_freed} bytes freed"
            )
            return

        self.session.remove_files(
            outcome.removed_paths,
            progress=None,
            stats=outcome.to_stats(),
            error=self._summarize_failures(outcome.failures),
        )

        logger.info(
            f"Cleanup finished: {outcome.files_removed}/{outcome.requested} file(s) removed, "
            f"{outcome.bytes_freed} bytes freed"
        )

    @staticmethod
    def _summarize_failures(failures: Dict[str, str], limit: int = 5) -> Optional[str]:
        if not failures:
            return None
        lines = [f"Failed to remove {len(failures)} file(s):"]
        for path, message in list(failures.items())[:limit]:
            lines.append(f"  • {path}: {message}")
        if len(failures) > limit:
            lines.append(f"  • ...and {len(failures) - limit} more files")
        return "\n".join(lines)
