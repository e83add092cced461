"""Collection: the aggregate root for all journals.

The collection document (``collection.json``) is the single source of
truth for journal membership and the default-journal pointer. Every
mutation runs reload → mutate → save while holding the store's advisory
lock, so concurrent processes serialize instead of silently discarding
each other's writes. Entry creation holds the same lock from ID
reservation through the index update.

Entry records and journal indexes are only changed together, through
this class. ``find_orphans`` reports any drift left by crashes or by the
best-effort cascade in ``remove_journal``.
"""

from __future__ import annotations

import copy
import json
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from jot.core.config import Config, get_config
from jot.core.exceptions import (
    AuthenticationError,
    ConsistencyError,
    DecodeError,
    DuplicateError,
    FileIOError,
    FormatError,
    InvalidArgumentError,
    JotError,
    NotFoundError,
)
from jot.core.utils.file_io import FileLock, read_text, safe_write
from jot.crypto import KeyStore

from .entry_store import EntryStore
from .models import CollectionDocument, Entry, JournalRecord

if TYPE_CHECKING:
    from .journal import Journal

COLLECTION_FILE = "collection.json"
LOCK_FILE = ".lock"


@dataclass
class JournalRemoval:
    """Outcome of deleting a journal.

    Attributes:
        name: The journal that was removed from the collection.
        deleted: Entry IDs whose records were deleted.
        failed: Entry IDs whose records could not be deleted, with the error.
    """

    name: str
    deleted: list[str] = field(default_factory=list)
    failed: dict[str, JotError] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failed


@dataclass
class OrphanReport:
    """Drift between entry records and journal indexes.

    Attributes:
        unreferenced: Entry IDs on disk that no journal lists.
        dangling: Per journal, listed entry IDs with no record on disk.
    """

    unreferenced: list[str] = field(default_factory=list)
    dangling: dict[str, list[str]] = field(default_factory=dict)

    @property
    def clean(self) -> bool:
        return not self.unreferenced and not self.dangling


@dataclass
class EntryRead:
    """One entry of a journal read: the plaintext, or why it could not be opened."""

    entry: Entry
    text: str | None = None
    error: JotError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Collection:
    """All journals, their entry indexes, and the default-journal pointer."""

    def __init__(
        self,
        data_dir: str | Path,
        document: CollectionDocument | None = None,
        entry_store: EntryStore | None = None,
        keystore: KeyStore | None = None,
    ) -> None:
        self.data_dir = Path(data_dir).expanduser()
        self.document = document or CollectionDocument()
        self.entry_store = entry_store or EntryStore(self.data_dir / "entries")
        self.keystore = keystore or KeyStore(self.data_dir / "backup")
        self.lock = FileLock(self.data_dir / LOCK_FILE)

    @property
    def path(self) -> Path:
        return self.data_dir / COLLECTION_FILE

    # -- persistence --------------------------------------------------------

    @classmethod
    def load(
        cls,
        config: Config | None = None,
        keystore: KeyStore | None = None,
        entry_store: EntryStore | None = None,
    ) -> Collection:
        """Load the collection, generating the key pair on first run.

        A missing collection file yields an empty collection; nothing is
        written until the first mutation.
        """
        config = config or get_config()
        collection = cls(
            config.get_data_dir(),
            entry_store=entry_store or EntryStore(config=config),
            keystore=keystore or KeyStore(config=config),
        )
        collection.keystore.ensure()
        collection.document = collection._read()
        logger.debug(f"Loaded collection with {len(collection.document.journals)} journal(s) from {collection.path}")
        return collection

    def _read(self) -> CollectionDocument:
        try:
            text = read_text(self.path)
        except NotFoundError:
            return CollectionDocument()
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Corrupt collection file {self.path}: {e}") from e
        return CollectionDocument.from_dict(data)

    def _write(self, document: CollectionDocument | None = None) -> None:
        if document is None:
            document = self.document
        safe_write(self.path, json.dumps(document.to_dict(), indent=2))

    def save(self) -> None:
        """Overwrite the collection file with the in-memory document."""
        with self.lock:
            self._write()

    def reload(self) -> None:
        with self.lock:
            self.document = self._read()

    @contextmanager
    def _mutate(self) -> Iterator[CollectionDocument]:
        """Hold the lock, refresh from disk, yield a staged copy, then save it.

        The staged copy becomes the in-memory document only once it is on
        disk; if the block or the save raises, the refreshed on-disk state
        is kept instead.
        """
        with self.lock:
            self.document = self._read()
            staged = copy.deepcopy(self.document)
            yield staged
            self._write(staged)
            self.document = staged

    # -- queries ------------------------------------------------------------

    def names(self) -> list[str]:
        return list(self.document.journals)

    def list(self) -> list[str]:
        """Journal names in creation order, the default marked with ``" *"``."""
        default = self.document.default_journal
        return [f"{name} *" if name == default else name for name in self.document.journals]

    def get_default_journal(self) -> str:
        """Name of the default journal, or ``""`` when none is set."""
        return self.document.default_journal

    def __contains__(self, name: object) -> bool:
        return name in self.document.journals

    def __len__(self) -> int:
        return len(self.document.journals)

    def record(self, name: str) -> JournalRecord:
        try:
            return self.document.journals[name]
        except KeyError:
            raise NotFoundError(f"Journal '{name}' does not exist") from None

    def journal(self, name: str | None = None) -> Journal:
        """Return a view of *name*, or of the default journal when omitted."""
        from .journal import Journal

        name = self._resolve(name)
        self.record(name)
        return Journal(self, name)

    def _resolve(self, name: str | None) -> str:
        if name:
            return name
        if not self.document.default_journal:
            raise NotFoundError("No default journal set; name a journal explicitly")
        return self.document.default_journal

    # -- journal mutations --------------------------------------------------

    def add_journal(self, name: str) -> Journal:
        """Create a journal. The first journal becomes the default.

        Raises:
            InvalidArgumentError: The name is blank.
            DuplicateError: A journal with this name exists.
        """
        from .journal import Journal

        name = name.strip()
        if not name:
            raise InvalidArgumentError("Journal name must be a non-empty string")
        with self._mutate() as doc:
            if name in doc.journals:
                raise DuplicateError(f"Journal '{name}' already exists")
            doc.journals[name] = JournalRecord(name=name)
            if len(doc.journals) == 1:
                doc.default_journal = name
        logger.info(f"Created journal '{name}'")
        return Journal(self, name)

    def set_default(self, name: str) -> None:
        with self._mutate() as doc:
            if name not in doc.journals:
                raise NotFoundError(f"Journal '{name}' does not exist")
            doc.default_journal = name

    def remove_journal(self, name: str) -> JournalRemoval:
        """Delete a journal and, best effort, its entry records.

        The journal always leaves the collection once it is found; entry
        records that cannot be deleted are reported in the result and left
        behind as orphans.
        """
        with self._mutate() as doc:
            record = doc.journals.get(name)
            if record is None:
                raise NotFoundError(f"Journal '{name}' does not exist")
            removal = JournalRemoval(name=name)
            for entry_id in record.entry_ids:
                try:
                    self.entry_store.delete(entry_id)
                except JotError as e:
                    logger.warning(f"Failed to delete entry {entry_id} of journal '{name}': {e}")
                    removal.failed[entry_id] = e
                else:
                    removal.deleted.append(entry_id)
            del doc.journals[name]
            if doc.default_journal == name:
                doc.default_journal = ""
        logger.info(f"Deleted journal '{name}' ({len(removal.deleted)} entries, {len(removal.failed)} failed)")
        return removal

    # -- entry mutations ----------------------------------------------------

    def add_entry(self, journal: str | None, text: str) -> Entry:
        """Encrypt *text* into a new entry and append it to *journal*.

        *journal* ``None`` means the default journal. The lock is held from
        ID reservation until the index is saved.

        Raises:
            NotFoundError: No such journal, or no key pair.
            ConsistencyError: The reserved ID is already taken on disk.
        """
        stored: Entry | None = None
        with self.lock:
            try:
                with self._mutate() as doc:
                    name = self._resolve(journal)
                    record = doc.journals.get(name)
                    if record is None:
                        raise NotFoundError(f"Journal '{name}' does not exist")
                    entry_id = self.entry_store.reserve_id()
                    with self.keystore.restore() as keys:
                        entry = Entry.new(entry_id, name, text, keys)
                    self.entry_store.create(entry)
                    stored = entry
                    record.entry_ids.append(entry_id)
            except JotError:
                # index save failed after the record landed
                if stored is not None:
                    try:
                        self.entry_store.delete(stored.id)
                    except JotError as e:
                        logger.warning(f"Could not roll back entry {stored.id}: {e}")
                raise
        logger.debug(f"Added entry {entry.id} to journal '{name}'")
        return entry

    def remove_entry(self, journal: str, entry_id: str) -> None:
        """Remove *entry_id* from *journal* and delete its record.

        Raises:
            NotFoundError: No such journal, or the ID is not in its list.
            ConsistencyError: The stored record belongs to another journal.
        """
        with self.lock:
            with self._mutate() as doc:
                record = doc.journals.get(journal)
                if record is None:
                    raise NotFoundError(f"Journal '{journal}' does not exist")
                if entry_id not in record.entry_ids:
                    raise NotFoundError(f"Entry {entry_id} not found in journal '{journal}'")
                try:
                    owner = self.entry_store.get(entry_id).journal_id
                except NotFoundError:
                    logger.warning(f"Entry {entry_id} listed in '{journal}' has no record; dropping the reference")
                    owner = journal
                if owner != journal:
                    raise ConsistencyError(f"Entry {entry_id} belongs to journal '{owner}', not '{journal}'")
                record.entry_ids.remove(entry_id)
            self.entry_store.delete(entry_id)
        logger.debug(f"Removed entry {entry_id} from journal '{journal}'")

    # -- reads --------------------------------------------------------------

    def get_entries(self, journal: str) -> list[Entry]:
        """Load the entry records of *journal* in index order.

        Raises:
            ConsistencyError: A listed ID has no record.
        """
        entries = []
        for entry_id in self.record(journal).entry_ids:
            try:
                entries.append(self.entry_store.get(entry_id))
            except NotFoundError as e:
                raise ConsistencyError(f"Journal '{journal}' lists entry {entry_id} but it has no record") from e
        return entries

    def read_journal(self, journal: str) -> list[EntryRead]:
        """Decrypt every entry of *journal*, in index order.

        An entry that fails to open is reported in its own result with the
        typed error and no text; the remaining entries are still returned.

        Raises:
            NotFoundError: No such journal, or no key pair.
            ConsistencyError: A listed ID has no record.
        """
        entries = self.get_entries(journal)
        if not entries:
            return []
        results = []
        with self.keystore.restore() as keys:
            for entry in entries:
                try:
                    results.append(EntryRead(entry, text=entry.decrypted_body(keys)))
                except (AuthenticationError, FormatError, DecodeError) as e:
                    logger.warning(f"Error decrypting entry {entry.id}: {e}")
                    results.append(EntryRead(entry, error=e))
        return results

    # -- maintenance --------------------------------------------------------

    def find_orphans(self) -> OrphanReport:
        """Compare entry records on disk with the journal indexes."""
        with self.lock:
            self.document = self._read()
            return self._orphans()

    def _orphans(self) -> OrphanReport:
        on_disk = set(self.entry_store.list_ids())
        report = OrphanReport()
        referenced: set[str] = set()
        for name, record in self.document.journals.items():
            referenced.update(record.entry_ids)
            missing = [i for i in record.entry_ids if i not in on_disk]
            if missing:
                report.dangling[name] = missing
        report.unreferenced = sorted(on_disk - referenced)
        return report

    def prune_orphans(self) -> OrphanReport:
        """Delete unreferenced records and drop dangling IDs. Returns what was pruned."""
        with self._mutate() as doc:
            report = self._orphans()
            for entry_id in report.unreferenced:
                self.entry_store.delete(entry_id)
            for name, missing in report.dangling.items():
                record = doc.journals[name]
                record.entry_ids = [i for i in record.entry_ids if i not in missing]
        if not report.clean:
            logger.info(
                f"Pruned {len(report.unreferenced)} unreferenced record(s) and "
                f"{sum(len(v) for v in report.dangling.values())} dangling reference(s)"
            )
        return report


def reset_store(config: Config | None = None) -> str:
    """Delete every journal, entry, and key, then generate a new key pair.

    Runs under the store lock. The lock file itself is kept so other
    processes keep serializing on the same inode.

    Returns:
        The new base64 public key.
    """
    config = config or get_config()
    data_dir = Path(config.get_data_dir()).expanduser()
    with FileLock(data_dir / LOCK_FILE):
        _clear_dir(data_dir, keep=LOCK_FILE)
        for name in ("entries_dir", "backup_dir"):
            root = Path(config.get_path(name)).expanduser()
            if root.exists():
                _remove(root)
                logger.warning(f"Removed all journal data under {root}")
        return KeyStore(config=config).generate()


def _clear_dir(directory: Path, keep: str) -> None:
    removed = False
    for child in list(directory.iterdir()):
        if child.name != keep:
            _remove(child)
            removed = True
    if removed:
        logger.warning(f"Removed all journal data under {directory}")


def _remove(path: Path) -> None:
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise FileIOError(f"Cannot remove {path}: {e}") from e
