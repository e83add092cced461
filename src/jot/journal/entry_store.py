"""Entry store: one owner-only JSON file per entry.

Entries live under ``entries/<id>.json``. IDs are four-digit, zero-padded,
and monotonic. ``next_id`` derives the next ID from a directory scan;
``reserve_id`` also consults a persisted counter (``entries/.counter``) so
IDs of deleted entries are never handed out again. Callers that create
entries hold the store lock from ``reserve_id`` through ``create``.
"""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger

from jot.core.config import Config, get_config
from jot.core.exceptions import DecodeError, NotFoundError
from jot.core.utils.file_io import create_exclusive, ensure_dir, read_text, remove_file, safe_write

from .models import Entry, format_id

COUNTER_FILE = ".counter"


class EntryStore:
    """File-backed store of encrypted entries keyed by ID."""

    def __init__(self, entries_dir: str | Path | None = None, config: Config | None = None) -> None:
        if entries_dir is None:
            entries_dir = (config or get_config()).get_path("entries_dir")
        self.entries_dir = Path(entries_dir).expanduser()

    def _path(self, entry_id: str) -> Path:
        if not entry_id or "/" in entry_id or "\\" in entry_id or entry_id.startswith("."):
            raise NotFoundError(f"Invalid entry id: {entry_id!r}")
        return self.entries_dir / f"{entry_id}.json"

    @property
    def counter_path(self) -> Path:
        return self.entries_dir / COUNTER_FILE

    # -- IDs ----------------------------------------------------------------

    def _scan_max(self) -> int:
        """Highest numeric ID on disk; non-numeric names are ignored."""
        if not self.entries_dir.is_dir():
            return 0
        max_id = 0
        for p in self.entries_dir.glob("*.json"):
            try:
                max_id = max(max_id, int(p.stem))
            except ValueError:
                continue
        return max_id

    def _read_counter(self) -> int:
        try:
            text = read_text(self.counter_path).strip()
        except NotFoundError:
            return 0
        try:
            return int(text)
        except ValueError as e:
            raise DecodeError(f"Corrupt ID counter {self.counter_path}: {text!r}") from e

    def next_id(self) -> str:
        """Return max(existing IDs) + 1, or ``"0001"`` for an empty store."""
        return format_id(self._scan_max() + 1)

    def reserve_id(self) -> str:
        """Advance the persisted counter and return the new ID.

        Never returns an ID at or below any ID ever reserved or present on
        disk. Must be called under the store lock.
        """
        n = max(self._read_counter(), self._scan_max()) + 1
        ensure_dir(self.entries_dir)
        safe_write(self.counter_path, f"{n}\n")
        return format_id(n)

    def list_ids(self) -> list[str]:
        """All entry IDs on disk, sorted."""
        if not self.entries_dir.is_dir():
            return []
        return sorted(p.stem for p in self.entries_dir.glob("*.json") if not p.name.startswith("."))

    # -- CRUD ---------------------------------------------------------------

    @staticmethod
    def _serialize(entry: Entry) -> str:
        return json.dumps(entry.to_dict(), indent=2)

    def put(self, entry: Entry) -> None:
        """Write *entry*, overwriting any existing record with the same ID."""
        safe_write(self._path(entry.id), self._serialize(entry))

    def create(self, entry: Entry) -> None:
        """Write *entry* only if its ID is unused.

        Raises:
            ConsistencyError: A record with this ID already exists.
        """
        create_exclusive(self._path(entry.id), self._serialize(entry))
        logger.debug(f"Stored entry {entry.id} for journal '{entry.journal_id}'")

    def get(self, entry_id: str) -> Entry:
        """Load an entry.

        Raises:
            NotFoundError: No record for *entry_id*.
            DecodeError: The record is corrupt.
        """
        path = self._path(entry_id)
        text = read_text(path)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Corrupt entry file {path}: {e}") from e
        return Entry.from_dict(data)

    def exists(self, entry_id: str) -> bool:
        return self._path(entry_id).exists()

    def delete(self, entry_id: str) -> bool:
        """Delete an entry. Idempotent: returns False if it was already gone."""
        deleted = remove_file(self._path(entry_id))
        if deleted:
            logger.debug(f"Deleted entry {entry_id}")
        return deleted
