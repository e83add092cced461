"""Tests for jot.core.exceptions."""

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
    RandomnessError,
)


def test_hierarchy():
    """All exceptions should inherit from JotError."""
    for exc_cls in [
        FileIOError,
        DecodeError,
        NotFoundError,
        DuplicateError,
        AuthenticationError,
        FormatError,
        RandomnessError,
        ConsistencyError,
        InvalidArgumentError,
    ]:
        assert issubclass(exc_cls, JotError)


def test_authentication_is_distinct_from_not_found():
    assert not issubclass(AuthenticationError, NotFoundError)
    assert not issubclass(NotFoundError, AuthenticationError)


def test_file_io_error_does_not_shadow_oserror():
    assert not issubclass(FileIOError, OSError)


def test_catch_base():
    try:
        raise DuplicateError("journal 'work' already exists")
    except JotError as e:
        assert "work" in str(e)
