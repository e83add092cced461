"""Key pair generation, backup, and restore.

There is exactly one X25519 key pair per installation. Both halves are
stored as base64 text under the backup directory: the public key
world-readable, the private key owner-only. Every entry in every journal
is sealed with this one pair.

Restored key material lives in ``bytearray`` buffers so callers can zero
it. Use the pair as a context manager to scrub on every exit path::

    with keystore.restore() as keys:
        blob = encrypt(text, keys)
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey
from loguru import logger

from jot.core.config import Config, get_config
from jot.core.exceptions import DecodeError, NotFoundError, RandomnessError
from jot.core.utils.file_io import OWNER_ONLY, WORLD_READABLE, ensure_dir, read_text, safe_write

KEY_LEN = 32
PUBLIC_KEY_FILE = "jot.pub"
PRIVATE_KEY_FILE = "jot.sec"

_RAW = serialization.Encoding.Raw


@dataclass
class KeyPair:
    """A matched X25519 public/private key pair held in scrubbable buffers."""

    public_key: bytearray
    private_key: bytearray

    def __post_init__(self):
        if len(self.public_key) != KEY_LEN or len(self.private_key) != KEY_LEN:
            raise DecodeError(f"Key pair halves must be {KEY_LEN} bytes each")

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.fingerprint()!r}, private_key=<redacted>)"

    @property
    def scrubbed(self) -> bool:
        return not any(self.private_key) and not any(self.public_key)

    def scrub(self) -> None:
        """Overwrite both halves with zeros."""
        for buf in (self.private_key, self.public_key):
            for i in range(len(buf)):
                buf[i] = 0

    def fingerprint(self) -> str:
        """Short hex prefix of the public key, safe to log."""
        return bytes(self.public_key[:4]).hex()

    def __enter__(self) -> KeyPair:
        return self

    def __exit__(self, *exc) -> None:
        self.scrub()


def generate_key_pair() -> KeyPair:
    """Create a fresh key pair from the OS CSPRNG."""
    try:
        private = X25519PrivateKey.generate()
    except (OSError, NotImplementedError) as e:
        raise RandomnessError(f"Secure random source unavailable: {e}") from e
    private_raw = private.private_bytes(_RAW, serialization.PrivateFormat.Raw, serialization.NoEncryption())
    public_raw = private.public_key().public_bytes(_RAW, serialization.PublicFormat.Raw)
    return KeyPair(public_key=bytearray(public_raw), private_key=bytearray(private_raw))


def _decode_key(text: str, label: str) -> bytearray:
    try:
        raw = base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Failed to decode {label} key: {e}") from e
    if len(raw) != KEY_LEN:
        raise DecodeError(f"Failed to decode {label} key: expected {KEY_LEN} bytes, got {len(raw)}")
    return bytearray(raw)


class KeyStore:
    """Persists and restores the installation's single key pair."""

    def __init__(self, backup_dir: str | Path | None = None, config: Config | None = None) -> None:
        if backup_dir is None:
            backup_dir = (config or get_config()).get_path("backup_dir")
        self.backup_dir = Path(backup_dir).expanduser()

    @property
    def public_key_path(self) -> Path:
        return self.backup_dir / PUBLIC_KEY_FILE

    @property
    def private_key_path(self) -> Path:
        return self.backup_dir / PRIVATE_KEY_FILE

    def exists(self) -> bool:
        return self.public_key_path.exists() and self.private_key_path.exists()

    def generate(self) -> str:
        """Generate and persist a new key pair.

        Returns:
            The base64-encoded public key.

        Raises:
            RandomnessError: The CSPRNG failed.
            FileIOError: The backup directory or key files cannot be written.
        """
        keys = generate_key_pair()
        try:
            public_text = base64.b64encode(bytes(keys.public_key)).decode("ascii")
            private_text = base64.b64encode(bytes(keys.private_key)).decode("ascii")
            ensure_dir(self.backup_dir)
            safe_write(self.public_key_path, public_text, mode=WORLD_READABLE)
            safe_write(self.private_key_path, private_text, mode=OWNER_ONLY)
            logger.info(f"Generated key pair {keys.fingerprint()} in {self.backup_dir}")
        finally:
            keys.scrub()
        return public_text

    def restore(self) -> KeyPair:
        """Read both key files back into a KeyPair.

        The caller owns the returned pair and must scrub it (or use it as a
        context manager).

        Raises:
            NotFoundError: Either key file is absent.
            DecodeError: A key file is malformed or the halves do not match.
        """
        for path, label in ((self.public_key_path, "public"), (self.private_key_path, "private")):
            if not path.exists():
                raise NotFoundError(f"{label.capitalize()} key backup not found: {path}")

        public_key = _decode_key(read_text(self.public_key_path), "public")
        private_key = _decode_key(read_text(self.private_key_path), "private")
        keys = KeyPair(public_key=public_key, private_key=private_key)

        derived = (
            X25519PrivateKey.from_private_bytes(bytes(private_key))
            .public_key()
            .public_bytes(_RAW, serialization.PublicFormat.Raw)
        )
        if derived != bytes(public_key):
            keys.scrub()
            raise DecodeError("Stored public key does not match the private key")
        return keys

    def ensure(self) -> None:
        """Make sure a usable key pair exists, generating one on first run.

        A fresh pair is only generated when neither key file exists. If one
        half is missing, restore() raises NotFoundError and both files are
        left untouched.
        """
        if not self.public_key_path.exists() and not self.private_key_path.exists():
            logger.info("No key pair found; generating a new one")
            self.generate()
            return
        self.restore().scrub()
