"""Tests for jot.core.utils.file_io."""

import fcntl
import os
import stat

import pytest

from jot.core.exceptions import ConsistencyError, DecodeError, FileIOError, NotFoundError
from jot.core.utils.file_io import (
    WORLD_READABLE,
    FileLock,
    create_exclusive,
    read_text,
    remove_file,
    safe_write,
)


def _mode(path) -> int:
    return stat.S_IMODE(os.stat(path).st_mode)


class TestSafeWrite:
    def test_creates_parents_and_writes(self, tmp_path):
        target = tmp_path / "a" / "b" / "doc.json"
        safe_write(target, "hello")
        assert target.read_text() == "hello"

    def test_owner_only_by_default(self, tmp_path):
        target = tmp_path / "secret.json"
        safe_write(target, "x")
        assert _mode(target) == 0o600

    def test_custom_mode(self, tmp_path):
        target = tmp_path / "public.txt"
        safe_write(target, "x", mode=WORLD_READABLE)
        assert _mode(target) == 0o644

    def test_replaces_existing(self, tmp_path):
        target = tmp_path / "doc.json"
        safe_write(target, "old")
        safe_write(target, "new")
        assert target.read_text() == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["doc.json"]

    def test_unwritable_parent_raises_file_io_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(FileIOError):
            safe_write(blocker / "child.json", "x")


class TestCreateExclusive:
    def test_creates(self, tmp_path):
        target = tmp_path / "0001.json"
        create_exclusive(target, "{}")
        assert target.read_text() == "{}"
        assert _mode(target) == 0o600

    def test_existing_raises_consistency_error(self, tmp_path):
        target = tmp_path / "0001.json"
        target.write_text("original")
        with pytest.raises(ConsistencyError):
            create_exclusive(target, "clobber")
        assert target.read_text() == "original"


class TestReadAndRemove:
    def test_read_missing_raises_not_found(self, tmp_path):
        with pytest.raises(NotFoundError):
            read_text(tmp_path / "missing.txt")

    def test_read_invalid_utf8_raises_decode_error(self, tmp_path):
        target = tmp_path / "binary.json"
        target.write_bytes(b"\xff\xfe{garbage")
        with pytest.raises(DecodeError):
            read_text(target)

    def test_remove_is_idempotent(self, tmp_path):
        target = tmp_path / "x"
        target.write_text("x")
        assert remove_file(target) is True
        assert remove_file(target) is False


class TestFileLock:
    def test_excludes_other_descriptors(self, tmp_path):
        lock = FileLock(tmp_path / ".lock")
        with lock:
            fd = os.open(lock.path, os.O_RDWR)
            try:
                with pytest.raises(BlockingIOError):
                    fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            finally:
                os.close(fd)

    def test_released_after_block(self, tmp_path):
        lock = FileLock(tmp_path / ".lock")
        with lock:
            pass
        fd = os.open(lock.path, os.O_RDWR)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)

    def test_reentrant(self, tmp_path):
        lock = FileLock(tmp_path / ".lock")
        with lock:
            with lock:
                assert lock.locked
            assert lock.locked
        assert not lock.locked

    def test_release_without_acquire(self, tmp_path):
        with pytest.raises(RuntimeError):
            FileLock(tmp_path / ".lock").release()
