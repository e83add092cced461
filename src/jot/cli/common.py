"""Shared setup logic for CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from jot.core.config import Config
from jot.core.exceptions import InvalidArgumentError, JotError
from jot.core.utils.logging import setup_logging

DEFAULT_CONFIG_PATH = Path.home() / ".jot" / "config.yaml"


def build_config(config_file: str | None = None, data_dir: str | None = None) -> Config:
    """Build the Config for this invocation and set up logging from it."""
    if config_file is None and DEFAULT_CONFIG_PATH.exists():
        config_file = str(DEFAULT_CONFIG_PATH)
    config = Config(config_file=config_file, data_dir=data_dir)
    setup_logging(config)
    return config


def open_collection(config: Config):
    """Load the collection, creating keys on first use."""
    from jot.journal import Collection

    return Collection.load(config)


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Turn jot errors into a clean CLI failure (exit code 1, or 2 for bad input)."""
    try:
        yield
    except InvalidArgumentError as e:
        raise click.BadParameter(str(e)) from e
    except JotError as e:
        raise click.ClickException(str(e)) from e
