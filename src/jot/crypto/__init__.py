"""Key lifecycle and authenticated encryption of entry bodies."""

from .cipher import NONCE_LEN, decrypt, encrypt
from .keys import KEY_LEN, KeyPair, KeyStore

__all__ = [
    "KEY_LEN",
    "NONCE_LEN",
    "KeyPair",
    "KeyStore",
    "decrypt",
    "encrypt",
]
