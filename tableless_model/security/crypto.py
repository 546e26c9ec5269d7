"""
security.crypto
~~~~~~~~~~~~~~~

Lightweight AES-GCM helpers used to encrypt tableless columns at rest.
The implementation uses the `cryptography` package and keeps key
handling to the caller: every function takes the raw key explicitly.

The module exposes three public functions:

* :func:`generate_key`
* :func:`encrypt_data`
* :func:`decrypt_data`

All of them operate on ``bytes``.
"""

from __future__ import annotations

import os
from typing import Tuple

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..config.settings import AES_GCM_KEY_SIZE, AES_GCM_NONCE_SIZE


# --------------------------------------------------------------------------- #
# Helper Functions
# --------------------------------------------------------------------------- #

def _generate_random_bytes(n: int) -> bytes:
    """Return ``n`` cryptographically-secure random bytes."""
    return os.urandom(n)


# --------------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------------- #

def generate_key() -> bytes:
    """Return a fresh random key of :data:`AES_GCM_KEY_SIZE` bytes."""
    return _generate_random_bytes(AES_GCM_KEY_SIZE)


def encrypt_data(plaintext: bytes, key: bytes, nonce: bytes | None = None) -> Tuple[bytes, bytes]:
    """
    Encrypt ``plaintext`` using AES-GCM.

    Parameters
    ----------
    plaintext : bytes
        The data to encrypt.
    key : bytes
        A 16, 24 or 32 byte AES key.
    nonce : bytes | None
        Optional 12-byte nonce.  If omitted a random nonce is generated.
        It must be stored alongside the ciphertext to decrypt it.

    Returns
    -------
    Tuple[bytes, bytes]
        ``(ciphertext, nonce)``; the ciphertext carries the GCM tag.
    """
    if nonce is None:
        nonce = _generate_random_bytes(AES_GCM_NONCE_SIZE)
    aesgcm = AESGCM(key)
    ciphertext = aesgcm.encrypt(nonce, plaintext, None)
    return ciphertext, nonce


def decrypt_data(ciphertext: bytes, nonce: bytes, key: bytes) -> bytes:
    """
    Decrypt ``ciphertext`` using AES-GCM.

    Raises :class:`cryptography.exceptions.InvalidTag` if the data was
    tampered with or ``key`` is not the key it was encrypted with.
    """
    aesgcm = AESGCM(key)
    return aesgcm.decrypt(nonce, ciphertext, None)
