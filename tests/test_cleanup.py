"""
Tests for core/cleanup.py
Per-item and batch removal, partial failure accounting and session reconciliation.
"""
from unittest import mock

import pytest

from dupesweep.core.cleanup import CleanupOrchestrator
from dupesweep.core.exceptions import BatchOpError, OperationInProgressError
from dupesweep.core.lifecycle import ScanState
from dupesweep.core.models import BatchResult, CleanupMode, ExecutionMode, OperationStats, ProgressState
from dupesweep.core.session import DuplicateSession
from dupesweep.services import file_service
from dupesweep.services.file_service import SystemFileOps
from conftest import FakeFileOps, make_group


@pytest.fixture
def loaded(session, sample_groups):
    session.update(state=ScanState.COMPLETED, groups=sample_groups)
    return session


class TestPerItem:

    def test_partial_failure_keeps_failed_file(self, session):
        """Two of three selected files succeed: only those two are accounted for."""
        session.update(groups=[
            make_group("g", ("/k", 10, 1), ("/x", 10, 1), ("/y", 10, 1), ("/z", 10, 1)),
        ])
        ops = FakeFileOps(failing={"/y"})

        outcome = CleanupOrchestrator(session, ops).execute_cleanup({"/x", "/y", "/z"})

        assert outcome.files_removed == 2
        assert outcome.bytes_freed == 20
        assert outcome.requested == 3
        assert outcome.requested_bytes == 30
        assert list(outcome.failures) == ["/y"]
        assert session.groups[0].paths == ["/k", "/y"]
        assert session.selection == frozenset()
        assert session.snapshot().stats == OperationStats(files_removed=2, bytes_freed=20)
        assert "/y" in session.snapshot().error

    def test_group_dropped_when_one_file_survives(self, session):
        session.update(groups=[make_group("g", ("/x", 10, 1), ("/y", 10, 1), ("/z", 10, 1))])
        ops = FakeFileOps(failing={"/y"})

        outcome = CleanupOrchestrator(session, ops).execute_cleanup({"/x", "/y", "/z"})

        assert outcome.files_removed == 2
        assert session.groups == ()

    def test_trash_calls_trash_one(self, loaded):
        ops = FakeFileOps()

        CleanupOrchestrator(loaded, ops).execute_cleanup({"/a/p1.jpg"}, CleanupMode.TRASH)

        assert ops.calls == [("trash", "/a/p1.jpg")]

    def test_delete_calls_delete_one(self, loaded):
        ops = FakeFileOps()

        CleanupOrchestrator(loaded, ops).execute_cleanup({"/a/p1.jpg"}, CleanupMode.PERMANENT_DELETE)

        assert ops.calls == [("delete", "/a/p1.jpg")]

    def test_all_succeed(self, loaded):
        loaded.keep_newest()
        ops = FakeFileOps()

        outcome = CleanupOrchestrator(loaded, ops).execute_cleanup(loaded.selection)

        assert outcome.files_removed == 4
        assert outcome.bytes_freed == 100 + 50 + 50 + 1000
        assert not outcome.has_failures
        assert loaded.groups == ()
        assert loaded.snapshot().error is None

    def test_unexpected_exception_recorded_as_failure(self, loaded):
        class Exploding(FakeFileOps):
            def trash_one(self, path):
                raise RuntimeError("kaboom")

        outcome = CleanupOrchestrator(loaded, Exploding()).execute_cleanup({"/a/p1.jpg"})

        assert outcome.failures == {"/a/p1.jpg": "RuntimeError: kaboom"}
        assert outcome.files_removed == 0

    def test_parallel_accounting_is_deterministic(self, session):
        files = [(f"/dup/{i:02d}.bin", 7, i) for i in range(20)]
        session.update(groups=[make_group("g", ("/keep", 7, 0), *files)])
        failing = {"/dup/03.bin", "/dup/11.bin"}
        ops = FakeFileOps(failing=failing)

        outcome = CleanupOrchestrator(session, ops, max_workers=4).execute_cleanup({p for p, _, _ in files})

        assert outcome.removed_paths == tuple(p for p, _, _ in files if p not in failing)
        assert list(outcome.failures) == sorted(failing)
        assert outcome.bytes_freed == 7 * 18
        assert len(ops.calls) == 20

    def test_invalid_worker_count(self, session):
        with pytest.raises(ValueError):
            CleanupOrchestrator(session, FakeFileOps(), max_workers=0)


class TestBatch:

    def test_success_removes_everything(self, loaded):
        ops = FakeFileOps()
        orchestrator = CleanupOrchestrator(loaded, ops, execution=ExecutionMode.BATCH)

        outcome = orchestrator.execute_cleanup({"/a/p1.jpg", "/c/clip.mp4"})

        assert ops.calls == [("trash_many", ("/a/p1.jpg", "/c/clip.mp4"))]
        assert outcome.files_removed == 2
        assert outcome.bytes_freed == 1100
        assert [g.fingerprint for g in loaded.groups] == ["h2"]

    def test_delete_uses_delete_many(self, loaded):
        ops = FakeFileOps()

        CleanupOrchestrator(loaded, ops, execution=ExecutionMode.BATCH).execute_cleanup(
            {"/a/p1.jpg"}, CleanupMode.PERMANENT_DELETE)

        assert ops.calls == [("delete_many", ("/a/p1.jpg",))]

    def test_failure_leaves_model_unchanged(self, loaded):
        loaded.keep_newest()
        before = loaded.snapshot()
        ops = FakeFileOps(batch_result=BatchResult(success=False, error="Trash unavailable"))

        outcome = CleanupOrchestrator(loaded, ops, execution=ExecutionMode.BATCH).execute_cleanup(
            before.selection)

        after = loaded.snapshot()
        assert outcome.files_removed == 0
        assert outcome.bytes_freed == 0
        assert outcome.error == "Trash unavailable"
        assert after.groups == before.groups
        assert after.selection == before.selection
        assert after.stats is None
        assert after.error == "Trash unavailable"
        assert after.progress is None

    def test_raised_batch_error_is_a_failed_verdict(self, loaded):
        class Raising(FakeFileOps):
            def trash_many(self, paths):
                raise BatchOpError("bus error")

        outcome = CleanupOrchestrator(loaded, Raising(), execution=ExecutionMode.BATCH).execute_cleanup(
            {"/a/p1.jpg"})

        assert outcome.error == "bus error"
        assert len(loaded.groups) == 3


    def test_stopped_batch_prunes_files_already_removed(self, loaded):
        ops = FakeFileOps(batch_result=BatchResult(
            success=False, error="Removed 1 of 2 file(s) before failing on /c/clip.mp4", removed=["/a/p1.jpg"]
        ))

        outcome = CleanupOrchestrator(loaded, ops, execution=ExecutionMode.BATCH).execute_cleanup(
            {"/a/p1.jpg", "/c/clip.mp4"})

        snapshot = loaded.snapshot()
        assert outcome.removed_paths == ("/a/p1.jpg",)
        assert outcome.bytes_freed == 100
        assert [g.fingerprint for g in snapshot.groups] == ["h2", "h3"]
        assert snapshot.stats == OperationStats(files_removed=1, bytes_freed=100)
        assert snapshot.error.startswith("Removed 1 of 2")
        assert snapshot.progress is None

    def test_system_batch_failing_midway_keeps_session_in_sync(self, tmp_path, session):
        """Files deleted before the failure leave the results; a retry only touches what is left."""
        paths = []
        for name in ("keep.bin", "b.bin", "c.bin"):
            (tmp_path / name).write_bytes(b"same")
            paths.append(str(tmp_path / name))
        keep, first, second = paths
        session.update(groups=[make_group("g", (keep, 4, 3), (first, 4, 2), (second, 4, 1))])
        orchestrator = CleanupOrchestrator(session, SystemFileOps(), execution=ExecutionMode.BATCH)
        real_remove = file_service.os.remove

        def remove(path):
            if path == second:
                raise PermissionError("locked")
            real_remove(path)

        with mock.patch.object(file_service.os, "remove", side_effect=remove):
            outcome = orchestrator.execute_cleanup({first, second}, CleanupMode.PERMANENT_DELETE)

        assert outcome.removed_paths == (first,)
        assert "Removed 1 of 2" in outcome.error
        assert session.groups[0].paths == [keep, second]
        assert session.snapshot().stats == OperationStats(files_removed=1, bytes_freed=4)

        retry = orchestrator.execute_cleanup({first, second}, CleanupMode.PERMANENT_DELETE)

        assert retry.error is None
        assert retry.removed_paths == (second,)
        assert session.groups == ()
        assert (tmp_path / "keep.bin").exists()


class TestGuards:

    def test_empty_selection_is_noop(self, loaded):
        ops = FakeFileOps()
        before = loaded.snapshot()

        outcome = CleanupOrchestrator(loaded, ops).execute_cleanup(set())

        assert ops.calls == []
        assert outcome.files_removed == 0
        assert loaded.snapshot() is before

    def test_stale_paths_not_sent(self, loaded):
        ops = FakeFileOps()

        outcome = CleanupOrchestrator(loaded, ops).execute_cleanup({"/a/p1.jpg", "/gone.jpg"})

        assert ops.calls == [("trash", "/a/p1.jpg")]
        assert outcome.requested == 1

    def test_rejected_while_scanning(self, loaded):
        loaded.begin_operation(DuplicateSession.SCAN)

        with pytest.raises(OperationInProgressError):
            CleanupOrchestrator(loaded, FakeFileOps()).execute_cleanup({"/a/p1.jpg"})

        assert len(loaded.groups) == 3

    def test_guard_released_after_cleanup(self, loaded):
        CleanupOrchestrator(loaded, FakeFileOps()).execute_cleanup({"/a/p1.jpg"})
        assert loaded.running_operation is None

    def test_progress_published_then_cleared(self, loaded):
        seen = []
        loaded.add_listener(lambda s: seen.append(s.progress))

        CleanupOrchestrator(loaded, FakeFileOps()).execute_cleanup({"/a/p1.jpg", "/a/doc.pdf"})

        assert seen[0] == ProgressState("Moving to trash…", 0, 2)
        assert ProgressState("Moving to trash…", 2, 2) in seen
        assert seen[-1] is None
