"""Tests for jot.journal.models."""

import base64
from datetime import datetime, timezone

import pytest

from jot.core.exceptions import DecodeError
from jot.journal.models import CollectionDocument, Entry, JournalRecord, format_id


class TestFormatId:
    def test_zero_padded(self):
        assert format_id(1) == "0001"
        assert format_id(42) == "0042"
        assert format_id(9999) == "9999"


class TestEntry:
    def test_new_encrypts(self, keys):
        entry = Entry.new("0001", "diary", "hello", keys)
        assert entry.id == "0001"
        assert entry.journal_id == "diary"
        assert b"hello" not in entry.body
        assert entry.created.tzinfo is not None
        assert entry.decrypted_body(keys) == "hello"

    def test_to_dict_shape(self, keys):
        entry = Entry.new("0001", "diary", "hello", keys)
        data = entry.to_dict()
        assert set(data) == {"id", "created", "body", "journalId"}
        assert base64.b64decode(data["body"]) == entry.body

    def test_from_dict_round_trip(self, keys):
        entry = Entry.new("0007", "work", "notes", keys)
        loaded = Entry.from_dict(entry.to_dict())
        assert loaded == entry
        assert loaded.decrypted_body(keys) == "notes"

    def test_accepts_rfc3339_zulu(self):
        data = {
            "id": "0001",
            "created": "2024-05-01T10:00:00Z",
            "body": base64.b64encode(b"x" * 40).decode(),
            "journalId": "diary",
        }
        entry = Entry.from_dict(data)
        assert entry.created == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"created": "2024-05-01T10:00:00Z", "body": "", "journalId": "d"},
            {"id": "0001", "created": "yesterday", "body": "", "journalId": "d"},
            {"id": "0001", "created": "2024-05-01T10:00:00Z", "body": "%%%", "journalId": "d"},
            {"id": "0001", "created": "2024-05-01T10:00:00Z", "journalId": "d"},
        ],
    )
    def test_corrupt_records(self, data):
        with pytest.raises(DecodeError):
            Entry.from_dict(data)

    def test_repr_has_no_body(self, keys):
        entry = Entry.new("0001", "diary", "very private", keys)
        assert "very private" not in repr(entry)
        assert "0001" in repr(entry)


class TestCollectionDocument:
    def test_round_trip(self):
        doc = CollectionDocument(
            journals={"diary": JournalRecord(name="diary", entry_ids=["0001", "0002"])},
            default_journal="diary",
        )
        loaded = CollectionDocument.from_dict(doc.to_dict())
        assert loaded.default_journal == "diary"
        assert loaded.journals["diary"].entry_ids == ["0001", "0002"]

    def test_key_id_preserved_but_optional(self):
        assert "key_id" not in CollectionDocument().to_dict()
        data = {"journals": {}, "default_journal": "", "key_id": "abc"}
        assert CollectionDocument.from_dict(data).to_dict()["key_id"] == "abc"

    def test_empty_document(self):
        doc = CollectionDocument.from_dict({})
        assert doc.journals == {}
        assert doc.default_journal == ""

    def test_default_must_exist(self):
        with pytest.raises(DecodeError, match="Default journal"):
            CollectionDocument.from_dict({"journals": {}, "default_journal": "ghost"})

    def test_name_mismatch(self):
        raw = JournalRecord(name="a").to_dict()
        with pytest.raises(DecodeError):
            CollectionDocument.from_dict({"journals": {"b": raw}})

    def test_bad_entry_ids(self):
        raw = JournalRecord(name="a").to_dict()
        raw["entry_ids"] = [1, 2]
        with pytest.raises(DecodeError):
            CollectionDocument.from_dict({"journals": {"a": raw}})
