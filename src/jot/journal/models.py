"""Persistent records: entries, journals, and the collection document.

JSON shapes on disk:

    entries/<id>.json   {"id", "created", "body", "journalId"}
    collection.json     {"journals": {name: {"name", "created", "entry_ids"}},
                         "default_journal", "key_id"?}

``created`` is ISO-8601 with offset; ``body`` is standard base64 of the
ciphertext blob.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from jot.core.exceptions import DecodeError
from jot.crypto import KeyPair, decrypt, encrypt

ID_WIDTH = 4


def format_id(n: int) -> str:
    """Zero-pad an integer entry ID."""
    return f"{n:0{ID_WIDTH}d}"


def now() -> datetime:
    return datetime.now().astimezone()


def _parse_datetime(value: Any, what: str) -> datetime:
    if not isinstance(value, str) or not value:
        raise DecodeError(f"{what}: missing or invalid 'created' timestamp")
    try:
        # Go-style RFC3339 with a trailing Z
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise DecodeError(f"{what}: invalid 'created' timestamp {value!r}") from e


def _format_datetime(dt: datetime) -> str:
    return dt.isoformat()


@dataclass
class Entry:
    """A single encrypted journal entry.

    Attributes:
        id: Four-digit zero-padded identifier, unique across the store.
        created: Creation timestamp.
        body: Ciphertext blob (nonce prefix + authenticated ciphertext).
        journal_id: Name of the owning journal.
    """

    id: str
    created: datetime
    body: bytes
    journal_id: str

    @classmethod
    def new(cls, entry_id: str, journal_id: str, text: str, keys: KeyPair) -> Entry:
        """Encrypt *text* into a new entry; the caller still owns *keys*."""
        return cls(id=entry_id, created=now(), body=encrypt(text, keys), journal_id=journal_id)

    def decrypted_body(self, keys: KeyPair) -> str:
        return decrypt(self.body, keys)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "created": _format_datetime(self.created),
            "body": base64.b64encode(self.body).decode("ascii"),
            "journalId": self.journal_id,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Entry:
        if not isinstance(data, dict):
            raise DecodeError("Entry record must be a JSON object")
        entry_id = data.get("id")
        if not isinstance(entry_id, str) or not entry_id:
            raise DecodeError("Entry record has no 'id'")
        what = f"Entry {entry_id}"
        body = data.get("body")
        if not isinstance(body, str):
            raise DecodeError(f"{what}: missing 'body'")
        try:
            raw = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"{what}: body is not valid base64") from e
        journal_id = data.get("journalId", "")
        if not isinstance(journal_id, str):
            raise DecodeError(f"{what}: 'journalId' must be a string")
        return cls(
            id=entry_id,
            created=_parse_datetime(data.get("created"), what),
            body=raw,
            journal_id=journal_id,
        )

    def __repr__(self) -> str:
        return f"Entry(id='{self.id}', journal='{self.journal_id}', created='{self.created:%Y-%m-%d %H:%M:%S}')"


@dataclass
class JournalRecord:
    """Metadata for one journal: its name, creation time, and ordered entry IDs."""

    name: str
    created: datetime = field(default_factory=now)
    entry_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "created": _format_datetime(self.created),
            "entry_ids": list(self.entry_ids),
        }

    @classmethod
    def from_dict(cls, data: Any) -> JournalRecord:
        if not isinstance(data, dict):
            raise DecodeError("Journal record must be a JSON object")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise DecodeError("Journal record has no 'name'")
        entry_ids = data.get("entry_ids") or []
        if not isinstance(entry_ids, list) or not all(isinstance(i, str) for i in entry_ids):
            raise DecodeError(f"Journal {name}: 'entry_ids' must be a list of strings")
        return cls(
            name=name,
            created=_parse_datetime(data.get("created"), f"Journal {name}"),
            entry_ids=list(entry_ids),
        )


@dataclass
class CollectionDocument:
    """The whole ``collection.json`` document.

    ``key_id`` is carried through load/save untouched; nothing reads it.
    """

    journals: dict[str, JournalRecord] = field(default_factory=dict)
    default_journal: str = ""
    key_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "journals": {name: j.to_dict() for name, j in self.journals.items()},
            "default_journal": self.default_journal,
        }
        if self.key_id:
            data["key_id"] = self.key_id
        return data

    @classmethod
    def from_dict(cls, data: Any) -> CollectionDocument:
        if not isinstance(data, dict):
            raise DecodeError("Collection document must be a JSON object")
        raw_journals = data.get("journals") or {}
        if not isinstance(raw_journals, dict):
            raise DecodeError("Collection 'journals' must be an object")
        journals = {}
        for key, raw in raw_journals.items():
            record = JournalRecord.from_dict(raw)
            if record.name != key:
                raise DecodeError(f"Journal key {key!r} does not match its name {record.name!r}")
            journals[key] = record
        default = data.get("default_journal") or ""
        if not isinstance(default, str):
            raise DecodeError("Collection 'default_journal' must be a string")
        if default and default not in journals:
            raise DecodeError(f"Default journal {default!r} is not in the collection")
        key_id = data.get("key_id")
        return cls(journals=journals, default_journal=default, key_id=key_id if isinstance(key_id, str) else None)
