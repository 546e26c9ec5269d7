"""
Encryption utilities for tableless columns.

Derives a column key from the secret given to
:func:`~tableless_model.records.host.has_tableless` and wraps AES-GCM
encryption into text that fits a string column.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag

from ..config.settings import (
    AES_GCM_KEY_SIZE,
    AES_GCM_NONCE_SIZE,
    KEY_DERIVATION_SALT,
    PBKDF2_ITERATIONS,
)
from ..security.crypto import decrypt_data, encrypt_data
from .errors import CodecFailure


@dataclass(frozen=True)
class EncryptionKey:
    """Container for a derived column key."""
    key: bytes

    @classmethod
    def from_secret(cls, secret: str | bytes) -> "EncryptionKey":
        return cls(derive_column_key(secret))

    def __repr__(self) -> str:
        return "EncryptionKey(key=<redacted>)"


def derive_column_key(secret: str | bytes) -> bytes:
    """
    Derive an AES key from ``secret`` using PBKDF2-HMAC-SHA256.
    The same secret always yields the same key.
    """
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    if not secret:
        raise ValueError("An encryption key must not be empty")
    return hashlib.pbkdf2_hmac(
        "sha256",
        secret,
        KEY_DERIVATION_SALT,
        PBKDF2_ITERATIONS,
        dklen=AES_GCM_KEY_SIZE,
    )


class MessageEncryptor:
    """Encrypts text to base64 text and back with one derived key."""

    def __init__(self, secret: str | bytes) -> None:
        self._key = EncryptionKey.from_secret(secret)

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt *plaintext*.
        Returns base64 of the nonce followed by the ciphertext and tag.
        """
        ciphertext, nonce = encrypt_data(plaintext.encode("utf-8"), self._key.key)
        return base64.b64encode(nonce + ciphertext).decode("ascii")

    def decrypt(self, message: str) -> str:
        """
        Decrypt a message produced by :meth:`encrypt`.
        """
        try:
            raw = base64.b64decode(message, validate=True)
            if len(raw) <= AES_GCM_NONCE_SIZE:
                raise ValueError("message is too short")
            nonce, ciphertext = raw[:AES_GCM_NONCE_SIZE], raw[AES_GCM_NONCE_SIZE:]
            return decrypt_data(ciphertext, nonce, self._key.key).decode("utf-8")
        except (binascii.Error, InvalidTag, TypeError, ValueError) as exc:
            raise CodecFailure(f"Failed to decrypt column value: {exc!r}") from exc
