"""
Logging configuration using loguru.

The CLI calls setup_logging() once per invocation; library code just uses
loguru directly and never adds sinks of its own.
"""

import sys

from loguru import logger

CONSOLE_FORMAT = "<level>{level}</level>: {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{line} | {message}"


def setup_logging(config) -> None:
    """Replace loguru's sinks according to the ``logging.*`` section of *config*.

    ``logging.level`` applies to both sinks. ``logging.file``, when set,
    adds an append-only log file next to stderr.
    """
    level = str(config.get("logging.level", "WARNING")).upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)

    log_file = config.get("logging.file")
    if log_file:
        logger.add(log_file, level=level, format=FILE_FORMAT)
