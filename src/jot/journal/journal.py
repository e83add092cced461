"""Journal views over a loaded Collection."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from .models import Entry, JournalRecord

if TYPE_CHECKING:
    from .collection import Collection, EntryRead, JournalRemoval


class Journal:
    """A named journal inside a Collection.

    Holds no state of its own: every property reads the collection's
    current document, and every mutation goes through the collection so
    the entry records and the index change together.
    """

    def __init__(self, collection: Collection, name: str) -> None:
        self.collection = collection
        self.name = name

    def __repr__(self) -> str:
        return f"Journal(name='{self.name}')"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Journal) and other.collection is self.collection and other.name == self.name

    def __hash__(self) -> int:
        return hash((id(self.collection), self.name))

    @property
    def record(self) -> JournalRecord:
        return self.collection.record(self.name)

    @property
    def created(self) -> datetime:
        return self.record.created

    @property
    def entry_ids(self) -> list[str]:
        return list(self.record.entry_ids)

    @property
    def is_default(self) -> bool:
        return self.collection.get_default_journal() == self.name

    def add_entry(self, text: str) -> Entry:
        return self.collection.add_entry(self.name, text)

    def remove_entry(self, entry_id: str) -> None:
        self.collection.remove_entry(self.name, entry_id)

    def get_entries(self) -> list[Entry]:
        return self.collection.get_entries(self.name)

    def read(self) -> list[EntryRead]:
        """One result per entry, in the order they were written; see Collection.read_journal."""
        return self.collection.read_journal(self.name)

    def set_default(self) -> None:
        self.collection.set_default(self.name)

    def delete(self) -> JournalRemoval:
        return self.collection.remove_journal(self.name)

    def describe(self) -> str:
        record = self.record
        return f"Journal: {record.name}\nCreated: {record.created.isoformat(timespec='seconds')}\nEntries: {len(record.entry_ids)}"
