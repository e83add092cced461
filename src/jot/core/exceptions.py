"""
jot exception hierarchy.

All jot exceptions inherit from JotError, making it easy for consumers
(the CLI, tests) to catch library-level errors while still distinguishing
specific failure modes. The core never exits the process; it raises one of these.
"""


class JotError(Exception):
    """Base exception class for all jot errors."""


class FileIOError(JotError):
    """Raised when a file or directory cannot be created, read, or written."""


class DecodeError(JotError):
    """Raised for corrupt serialized documents or malformed encodings."""


class NotFoundError(JotError):
    """Raised when a journal, entry, or key file does not exist."""


class DuplicateError(JotError):
    """Raised when a journal name is already taken."""


class AuthenticationError(JotError):
    """Raised when a ciphertext fails its integrity check (wrong key or tampering)."""


class FormatError(JotError):
    """Raised when a ciphertext blob is too short to contain a nonce."""


class RandomnessError(JotError):
    """Raised when the secure random source is unavailable."""


class ConsistencyError(JotError):
    """Raised for entry ID collisions and detected dangling references."""


class InvalidArgumentError(JotError):
    """Raised for unusable inputs such as a blank journal name or a scrubbed key pair."""
