"""Authenticated encryption of entry bodies.

Entries are sealed to the installation's own key pair: the AEAD key is
HKDF-SHA256 over X25519(private, public), and every call draws a fresh
12-byte nonce. A blob is ``nonce || ciphertext || tag``.
"""

from __future__ import annotations

import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from jot.core.exceptions import AuthenticationError, DecodeError, FormatError, InvalidArgumentError, RandomnessError

from .keys import KeyPair

NONCE_LEN = 12
AEAD_KEY_LEN = 32
HKDF_INFO_BODY = b"jot/entry-body"


def _random_nonce() -> bytes:
    try:
        return secrets.token_bytes(NONCE_LEN)
    except (OSError, NotImplementedError) as e:
        raise RandomnessError(f"Secure random source unavailable: {e}") from e


def _derive_key(keys: KeyPair) -> bytearray:
    """Derive the self-addressed AEAD key for *keys*."""
    if keys.scrubbed:
        raise InvalidArgumentError("Key pair has been scrubbed")
    private = X25519PrivateKey.from_private_bytes(bytes(keys.private_key))
    public = X25519PublicKey.from_public_bytes(bytes(keys.public_key))
    shared = private.exchange(public)
    hk = HKDF(algorithm=hashes.SHA256(), length=AEAD_KEY_LEN, salt=None, info=HKDF_INFO_BODY)
    return bytearray(hk.derive(shared))


def _zero(buf: bytearray) -> None:
    for i in range(len(buf)):
        buf[i] = 0


def encrypt(plaintext: str, keys: KeyPair) -> bytes:
    """Seal *plaintext* with *keys*; return nonce-prefixed ciphertext."""
    nonce = _random_nonce()
    aead_key = _derive_key(keys)
    try:
        sealed = AESGCM(bytes(aead_key)).encrypt(nonce, plaintext.encode("utf-8"), None)
    finally:
        _zero(aead_key)
    return nonce + sealed


def decrypt(blob: bytes, keys: KeyPair) -> str:
    """Open a blob produced by :func:`encrypt`.

    Raises:
        FormatError: *blob* is shorter than the nonce.
        AuthenticationError: Wrong key, or the blob was altered.
    """
    if len(blob) < NONCE_LEN:
        raise FormatError(f"Invalid encrypted data: {len(blob)} bytes is shorter than the {NONCE_LEN}-byte nonce")
    nonce, sealed = blob[:NONCE_LEN], blob[NONCE_LEN:]
    aead_key = _derive_key(keys)
    try:
        plain = AESGCM(bytes(aead_key)).decrypt(nonce, sealed, None)
    except InvalidTag as e:
        raise AuthenticationError("Decryption failed: wrong key or tampered ciphertext") from e
    finally:
        _zero(aead_key)
    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Decrypted body is not valid UTF-8: {e}") from e
