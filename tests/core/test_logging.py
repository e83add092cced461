"""Tests for jot.core.utils.logging."""

import sys

import pytest
from loguru import logger

from jot.core.config import Config
from jot.core.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)


class TestSetupLogging:
    def test_file_sink_from_config(self, tmp_path, monkeypatch):
        log_file = tmp_path / "jot.log"
        monkeypatch.setenv("JOT_LOGGING__LEVEL", "info")
        monkeypatch.setenv("JOT_LOGGING__FILE", str(log_file))
        setup_logging(Config(data_dir=str(tmp_path / "jot")))

        logger.debug("hidden detail")
        logger.info("Created journal 'diary'")
        logger.complete()

        text = log_file.read_text()
        assert "| INFO | " in text
        assert "Created journal 'diary'" in text
        assert "hidden detail" not in text

    def test_console_only_by_default(self, tmp_path, capsys):
        setup_logging(Config(data_dir=str(tmp_path / "jot")))
        logger.info("quiet")
        logger.warning("Failed to delete entry 0001")

        err = capsys.readouterr().err
        assert "WARNING: Failed to delete entry 0001" in err
        assert "quiet" not in err
        assert not list(tmp_path.glob("*.log"))
