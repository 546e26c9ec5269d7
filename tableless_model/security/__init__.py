"""Security package initialization.

The :mod:`tableless_model.security` package contains the AES-GCM
primitives used by encrypted tableless columns.  The public API is
intentionally minimal to keep the top-level namespace clean.
"""

from .crypto import decrypt_data, encrypt_data, generate_key
