"""
File I/O utilities: permission-aware writes and the store's advisory lock.

All functions operate on explicit paths; there are no implicit directory lookups.
OSError is translated to FileIOError / NotFoundError at this boundary.
"""

from __future__ import annotations

import errno
import fcntl
import os
import tempfile
import threading
from pathlib import Path

from loguru import logger

from ..exceptions import ConsistencyError, DecodeError, FileIOError, NotFoundError

OWNER_ONLY = 0o600
WORLD_READABLE = 0o644
PRIVATE_DIR = 0o700


def ensure_dir(path: str | Path, mode: int = PRIVATE_DIR) -> Path:
    """Create a directory (and parents) if missing."""
    path = Path(path)
    try:
        path.mkdir(mode=mode, parents=True, exist_ok=True)
    except OSError as e:
        raise FileIOError(f"Cannot create directory {path}: {e}") from e
    return path


def safe_write(filepath: str | Path, content: str | bytes, mode: int = OWNER_ONLY) -> None:
    """Atomically replace *filepath* with *content*, applying file *mode*.

    Writes to a temp file in the same directory and renames it over the
    target, so readers never observe a half-written document.
    """
    filepath = Path(filepath)
    ensure_dir(filepath.parent)
    data = content.encode("utf-8") if isinstance(content, str) else content
    try:
        fd, tmp_name = tempfile.mkstemp(dir=filepath.parent, prefix=f".{filepath.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, filepath)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise FileIOError(f"Cannot write {filepath}: {e}") from e


def create_exclusive(filepath: str | Path, content: str | bytes, mode: int = OWNER_ONLY) -> None:
    """Create *filepath* with *content*; fail if it already exists.

    Raises:
        ConsistencyError: The file already exists.
        FileIOError: Any other filesystem failure.
    """
    filepath = Path(filepath)
    ensure_dir(filepath.parent)
    data = content.encode("utf-8") if isinstance(content, str) else content
    try:
        fd = os.open(filepath, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
    except FileExistsError as e:
        raise ConsistencyError(f"Refusing to overwrite existing record {filepath}") from e
    except OSError as e:
        raise FileIOError(f"Cannot create {filepath}: {e}") from e
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
    except OSError as e:
        filepath.unlink(missing_ok=True)
        raise FileIOError(f"Cannot write {filepath}: {e}") from e


def read_text(filepath: str | Path) -> str:
    """Read a UTF-8 text file.

    Raises:
        NotFoundError: The file does not exist.
        DecodeError: The file is not valid UTF-8.
        FileIOError: The file exists but cannot be read.
    """
    filepath = Path(filepath)
    try:
        return filepath.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise NotFoundError(f"File not found: {filepath}") from e
    except UnicodeDecodeError as e:
        raise DecodeError(f"File {filepath} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise FileIOError(f"Cannot read {filepath}: {e}") from e


def remove_file(filepath: str | Path) -> bool:
    """Delete a file. Returns False if it was already gone."""
    filepath = Path(filepath)
    try:
        filepath.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise FileIOError(f"Cannot delete {filepath}: {e}") from e
    return True


class FileLock:
    """Reentrant, process-exclusive advisory lock on a lock file.

    Uses ``flock(LOCK_EX)`` so cooperating processes serialize on the same
    path. Re-entering from the thread that holds it only bumps a depth
    counter; the OS lock is released when the outermost block exits.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._fd: int | None = None
        self._depth = 0
        self._mutex = threading.RLock()

    @property
    def locked(self) -> bool:
        return self._depth > 0

    def acquire(self) -> None:
        self._mutex.acquire()
        if self._depth == 0:
            ensure_dir(self.path.parent)
            try:
                fd = os.open(self.path, os.O_RDWR | os.O_CREAT, OWNER_ONLY)
            except OSError as e:
                self._mutex.release()
                raise FileIOError(f"Cannot open lock file {self.path}: {e}") from e
            try:
                while True:
                    try:
                        fcntl.flock(fd, fcntl.LOCK_EX)
                        break
                    except InterruptedError:
                        continue
            except OSError as e:
                os.close(fd)
                self._mutex.release()
                raise FileIOError(f"Cannot lock {self.path}: {e}") from e
            self._fd = fd
            logger.debug(f"Acquired lock {self.path}")
        self._depth += 1

    def release(self) -> None:
        if self._depth == 0:
            raise RuntimeError(f"Lock {self.path} released while not held")
        self._depth -= 1
        if self._depth == 0 and self._fd is not None:
            try:
                fcntl.flock(self._fd, fcntl.LOCK_UN)
            except OSError as e:
                if e.errno != errno.EBADF:
                    logger.warning(f"Failed to unlock {self.path}: {e}")
            os.close(self._fd)
            self._fd = None
            logger.debug(f"Released lock {self.path}")
        self._mutex.release()

    def __enter__(self) -> FileLock:
        self.acquire()
        return self

    def __exit__(self, *exc) -> None:
        self.release()
