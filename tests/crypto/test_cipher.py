"""Tests for jot.crypto.cipher."""

import pytest

from jot.core.exceptions import AuthenticationError, FormatError, InvalidArgumentError, RandomnessError
from jot.crypto import NONCE_LEN, decrypt, encrypt
from jot.crypto.keys import generate_key_pair


class TestRoundTrip:
    @pytest.mark.parametrize(
        "text",
        ["hello", "", "multi\nline\nentry", "ünïcødé ✓ 日本語", "x" * 10_000],
    )
    def test_round_trip(self, keys, text):
        assert decrypt(encrypt(text, keys), keys) == text

    def test_blob_layout(self, keys):
        blob = encrypt("hello", keys)
        # nonce + plaintext + 16-byte tag
        assert len(blob) == NONCE_LEN + len("hello") + 16

    def test_nonce_uniqueness(self, keys):
        a = encrypt("same text", keys)
        b = encrypt("same text", keys)
        assert a != b
        assert a[:NONCE_LEN] != b[:NONCE_LEN]

    def test_does_not_scrub_callers_keys(self, keys):
        encrypt("hello", keys)
        assert not keys.scrubbed


class TestFailures:
    def test_every_bit_flip_detected(self, keys):
        blob = encrypt("tamper me", keys)
        for i in range(len(blob)):
            for bit in range(8):
                altered = bytearray(blob)
                altered[i] ^= 1 << bit
                with pytest.raises(AuthenticationError):
                    decrypt(bytes(altered), keys)

    def test_wrong_key(self, keys):
        blob = encrypt("secret", keys)
        with generate_key_pair() as other:
            with pytest.raises(AuthenticationError):
                decrypt(blob, other)

    def test_too_short_for_nonce(self, keys):
        with pytest.raises(FormatError):
            decrypt(b"\x00" * (NONCE_LEN - 1), keys)

    def test_empty_blob(self, keys):
        with pytest.raises(FormatError):
            decrypt(b"", keys)

    def test_nonce_only_fails_authentication(self, keys):
        with pytest.raises(AuthenticationError):
            decrypt(b"\x00" * NONCE_LEN, keys)

    def test_truncated_tag(self, keys):
        blob = encrypt("hello", keys)
        with pytest.raises(AuthenticationError):
            decrypt(blob[:-1], keys)

    def test_scrubbed_keys_rejected(self, keys):
        blob = encrypt("hello", keys)
        keys.scrub()
        with pytest.raises(InvalidArgumentError):
            decrypt(blob, keys)

    def test_randomness_failure(self, keys, monkeypatch):
        from jot.crypto import cipher

        def _fail(n):
            raise OSError("getrandom failed")

        monkeypatch.setattr(cipher.secrets, "token_bytes", _fail)
        with pytest.raises(RandomnessError):
            encrypt("hello", keys)
