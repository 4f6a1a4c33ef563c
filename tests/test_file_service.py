"""
Tests for file service — critical for safe file removal.
send2trash is patched where the system trash would be touched; permanent
delete runs against real files in tmp_path.
"""
import logging
from unittest import mock

import pytest

from dupesweep.core.exceptions import FileOpError
from dupesweep.services import file_service
from dupesweep.services.file_service import AUDIT_LOGGER_NAME, SystemFileOps, configure_audit_log


@pytest.fixture(autouse=True)
def reset_audit_log():
    yield
    configure_audit_log(None)


@pytest.fixture
def audit_file(tmp_path):
    path = tmp_path / "audit.log"
    configure_audit_log(str(path))
    return path


class TestTrashOne:

    def test_calls_send2trash_with_resolved_path(self, tmp_path):
        f = tmp_path / "photo.jpg"
        f.write_text("content")

        with mock.patch.object(file_service, "send2trash") as mock_trash:
            SystemFileOps().trash_one(str(f))

        mock_trash.assert_called_once_with(str(f.resolve()))

    def test_missing_file_raises(self, tmp_path):
        with mock.patch.object(file_service, "send2trash") as mock_trash:
            with pytest.raises(FileOpError, match="File not found"):
                SystemFileOps().trash_one(str(tmp_path / "nope.jpg"))
        mock_trash.assert_not_called()

    def test_trash_failure_wrapped(self, tmp_path):
        f = tmp_path / "photo.jpg"
        f.write_text("content")

        with mock.patch.object(file_service, "send2trash", side_effect=OSError("no trash can")):
            with pytest.raises(FileOpError, match="Failed to move to trash: no trash can") as exc_info:
                SystemFileOps().trash_one(str(f))
        assert exc_info.value.path == str(f)


class TestDeleteOne:

    def test_deletes_file(self, tmp_path):
        f = tmp_path / "delete_me.txt"
        keep = tmp_path / "keep_me.txt"
        f.write_text("x")
        keep.write_text("y")

        SystemFileOps().delete_one(str(f))

        assert not f.exists()
        assert keep.exists(), "Sibling files must not be touched"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileOpError, match="File not found"):
            SystemFileOps().delete_one(str(tmp_path / "gone.txt"))

    def test_directory_cannot_be_deleted(self, tmp_path):
        d = tmp_path / "dir"
        d.mkdir()
        with pytest.raises(FileOpError, match="Failed to delete"):
            SystemFileOps().delete_one(str(d))
        assert d.exists()


class TestAuditLog:

    def test_delete_is_recorded(self, tmp_path, audit_file):
        f = tmp_path / "a.txt"
        f.write_text("x")

        SystemFileOps().delete_one(str(f))

        lines = audit_file.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        assert lines[0].startswith("[")
        assert lines[0].endswith(f"] DELETE: {f}")

    def test_trash_is_recorded(self, tmp_path, audit_file):
        f = tmp_path / "a.txt"
        f.write_text("x")

        with mock.patch.object(file_service, "send2trash"):
            SystemFileOps().trash_one(str(f))

        assert audit_file.read_text(encoding="utf-8").strip().endswith(f"TRASH: {f}")

    def test_failures_not_recorded(self, tmp_path, audit_file):
        with pytest.raises(FileOpError):
            SystemFileOps().delete_one(str(tmp_path / "missing"))

        assert audit_file.read_text(encoding="utf-8") == ""

    def test_log_is_appended(self, tmp_path):
        path = tmp_path / "audit.log"
        path.write_text("[1] TRASH: /earlier\n", encoding="utf-8")
        configure_audit_log(str(path))
        f = tmp_path / "b.txt"
        f.write_text("x")

        SystemFileOps().delete_one(str(f))

        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "[1] TRASH: /earlier"
        assert len(lines) == 2

    def test_audit_lines_do_not_propagate(self, audit_file):
        assert logging.getLogger(AUDIT_LOGGER_NAME).propagate is False


class TestBatch:

    def test_delete_many_success(self, tmp_path):
        files = [tmp_path / f"{i}.txt" for i in range(3)]
        for f in files:
            f.write_text("x")

        result = SystemFileOps().delete_many([str(f) for f in files])

        assert result.success
        assert not any(f.exists() for f in files)

    def test_missing_file_refuses_whole_batch(self, tmp_path):
        present = tmp_path / "present.txt"
        present.write_text("x")

        result = SystemFileOps().delete_many([str(present), str(tmp_path / "missing.txt")])

        assert not result.success
        assert "1 of 2 file(s) not found" in result.error
        assert present.exists(), "Nothing may be removed when the batch is refused"

    def test_trash_many_stops_at_first_failure(self, tmp_path):
        files = [tmp_path / f"{i}.txt" for i in range(3)]
        for f in files:
            f.write_text("x")

        def fake_trash(path):
            if path.endswith("1.txt"):
                raise OSError("locked")

        with mock.patch.object(file_service, "send2trash", side_effect=fake_trash) as mock_trash:
            result = SystemFileOps().trash_many([str(f) for f in files])

        assert not result.success
        assert "Removed 1 of 3 file(s) before failing" in result.error
        assert mock_trash.call_count == 2

    def test_stopped_batch_reports_removed_paths(self, tmp_path):
        """A batch that fails part way names the files it already deleted."""
        files = [tmp_path / f"{i}.txt" for i in range(3)]
        for f in files:
            f.write_text("x")
        real_remove = file_service.os.remove

        def remove(path):
            if path.endswith("1.txt"):
                raise PermissionError("locked")
            real_remove(path)

        with mock.patch.object(file_service.os, "remove", side_effect=remove):
            result = SystemFileOps().delete_many([str(f) for f in files])

        assert not result.success
        assert result.removed == (str(files[0]),)
        assert not files[0].exists()
        assert files[1].exists() and files[2].exists()

    def test_refused_batch_reports_nothing_removed(self, tmp_path):
        result = SystemFileOps().delete_many([str(tmp_path / "missing.txt")])
        assert result.removed == ()
