"""Journals, entries, and the collection that owns them.

Provides the entry record store, the Collection aggregate (the single
API that mutates journal indexes and entry records together), and
transient Journal views.
"""

from .collection import Collection, EntryRead, JournalRemoval, OrphanReport, reset_store
from .entry_store import EntryStore
from .journal import Journal
from .models import CollectionDocument, Entry, JournalRecord

__all__ = [
    "Collection",
    "CollectionDocument",
    "Entry",
    "EntryRead",
    "EntryStore",
    "Journal",
    "JournalRecord",
    "JournalRemoval",
    "OrphanReport",
    "reset_store",
]
