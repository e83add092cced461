"""Shared test fixtures for jot."""

import os
import tempfile

import pytest

from jot.core.config import Config, reset_config
from jot.crypto import KeyStore
from jot.crypto.keys import generate_key_pair
from jot.journal import Collection, EntryStore


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep the developer's JOT_* variables and config singleton out of tests."""
    for key in list(os.environ):
        if key.startswith("JOT_"):
            monkeypatch.delenv(key)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config(tmp_path):
    return Config(data_dir=str(tmp_path / "jot"))


@pytest.fixture
def keystore(config):
    return KeyStore(config=config)


@pytest.fixture
def keys():
    pair = generate_key_pair()
    yield pair
    pair.scrub()


@pytest.fixture
def entry_store(config):
    return EntryStore(config=config)


@pytest.fixture
def collection(config):
    return Collection.load(config)
