"""
Shared fixtures for sweep engine tests.
Provides in-memory Scanner/FileOps doubles and isolated temporary directories
with controlled duplicate files.
"""
import os
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from dupesweep.core.exceptions import FileOpError, ScanCancelledError
from dupesweep.core.models import BatchResult, DuplicateGroup, FileRecord
from dupesweep.core.session import DuplicateSession


class FakeScanner:
    """
    Scanner double. Emits the configured progress events, then either returns
    `result` or raises `error`.

    With block=True the scan waits until release() is called, which lets a test
    cancel or send stale events while the scan is in flight. honour_cancel
    controls whether a cancelled scan raises ScanCancelledError or resolves
    normally anyway (late success / late failure).
    """

    def __init__(self, result=None, error: Optional[Exception] = None, progress=None,
                 block: bool = False, honour_cancel: bool = True):
        self.result = result if result is not None else []
        self.error = error
        self.progress = progress or []
        self.block = block
        self.honour_cancel = honour_cancel
        self.cancel_calls = 0
        self.scan_calls: List[Sequence[str]] = []
        self.callback = None
        self.started = threading.Event()
        self._release = threading.Event()
        self._cancelled = threading.Event()

    def release(self):
        self._release.set()

    def cancel(self):
        self.cancel_calls += 1
        self._cancelled.set()

    def scan(self, roots, progress_callback=None):
        self.scan_calls.append(list(roots))
        self.callback = progress_callback
        for event in self.progress:
            progress_callback(*event)
        self.started.set()
        if self.block:
            assert self._release.wait(5), "test never released the scanner"
        if self._cancelled.is_set() and self.honour_cancel:
            raise ScanCancelledError()
        if self.error is not None:
            raise self.error
        return self.result


class FakeFileOps:
    """FileOps double: paths in `failing` raise FileOpError, batch verdict is configurable."""

    def __init__(self, failing=(), batch_result: Optional[BatchResult] = None):
        self.failing = set(failing)
        self.batch_result = batch_result or BatchResult(success=True)
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def _single(self, action, path):
        with self._lock:
            self.calls.append((action, path))
        if path in self.failing:
            raise FileOpError(f"Permission denied: {path}", path=path)

    def trash_one(self, path):
        self._single("trash", path)

    def delete_one(self, path):
        self._single("delete", path)

    def trash_many(self, paths):
        self.calls.append(("trash_many", tuple(paths)))
        return self.batch_result

    def delete_many(self, paths):
        self.calls.append(("delete_many", tuple(paths)))
        return self.batch_result


def make_group(fingerprint: str, *files) -> DuplicateGroup:
    """make_group("h1", ("/a/p1.jpg", 100, 10), ...) -> DuplicateGroup"""
    return DuplicateGroup(
        fingerprint=fingerprint,
        files=tuple(FileRecord(path=p, size=s, modified_at=t) for p, s, t in files),
    )


@pytest.fixture
def sample_groups() -> List[DuplicateGroup]:
    """Three groups: images, mixed document/other, and videos."""
    return [
        make_group("h1", ("/a/p1.jpg", 100, 10), ("/a/p2.jpg", 100, 20)),
        make_group("h2", ("/a/doc.pdf", 50, 5), ("/b/doc.PDF", 50, 30), ("/b/doc.bin", 50, 15)),
        make_group("h3", ("/a/clip.mp4", 1000, 1), ("/c/clip.mp4", 1000, 2)),
    ]


@pytest.fixture
def session() -> DuplicateSession:
    return DuplicateSession()


@pytest.fixture
def test_files(tmp_path) -> Dict[str, Path]:
    """
    Creates controlled test files:
    - 3 identical photos with increasing modification times (one in a subdir)
    - 2 identical documents
    - 1 unique file and 1 empty file (never reported)
    """
    files = {}

    photo = b"P" * 4096
    (tmp_path / "photos").mkdir()
    (tmp_path / "photos" / "backup").mkdir()
    files["photo_old"] = tmp_path / "photos" / "old.jpg"
    files["photo_mid"] = tmp_path / "photos" / "backup" / "mid.jpg"
    files["photo_new"] = tmp_path / "photos" / "new.jpg"
    for index, key in enumerate(["photo_old", "photo_mid", "photo_new"]):
        files[key].write_bytes(photo)
        os.utime(files[key], (1_000_000 + index * 1000, 1_000_000 + index * 1000))

    doc = b"D" * 2048
    files["doc_a"] = tmp_path / "report.pdf"
    files["doc_b"] = tmp_path / "report_copy.pdf"
    files["doc_a"].write_bytes(doc)
    files["doc_b"].write_bytes(doc)
    os.utime(files["doc_a"], (2_000_000, 2_000_000))
    os.utime(files["doc_b"], (1_000_000, 1_000_000))

    files["unique"] = tmp_path / "unique.txt"
    files["unique"].write_bytes(b"U" * 4096)

    files["empty"] = tmp_path / "empty.txt"
    files["empty"].write_bytes(b"")

    return files
