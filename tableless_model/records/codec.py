"""
records.codec
~~~~~~~~~~~~~

Moves tableless records in and out of a host column.

Plain columns hand a mapping of cast values to SQLAlchemy and let the
:class:`SerializedColumn` type serialize it to JSON.  Encrypted columns
serialize the record to canonical JSON themselves, encrypt it, and
store the resulting text in an ordinary ``Text`` column, so the stored
value only changes when the record's content does.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

import sqlalchemy as sa
from sqlalchemy.types import TypeDecorator

from .encryption import MessageEncryptor
from .errors import CodecFailure

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(data: Dict[str, Any]) -> str:
    """Canonical JSON for a record mapping: sorted keys, compact separators."""
    try:
        return json.dumps(data, default=_json_default, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise CodecFailure(f"Failed to serialize column value: {exc}") from exc


def loads(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise CodecFailure(f"Failed to deserialize column value: {exc}") from exc
    if not isinstance(data, dict):
        raise CodecFailure(f"Expected a serialized mapping, got {type(data).__name__}")
    return data


class SerializedColumn(TypeDecorator):
    """JSON-encoded mapping stored as text."""

    impl = sa.Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            value = dumps(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            value = loads(value)
        return value


class PlainCodec:
    encrypted = False

    def column_type(self) -> sa.types.TypeEngine:
        return SerializedColumn()

    def encode(self, record) -> Dict[str, Any]:
        return record.to_dict()

    def decode(self, raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise CodecFailure(f"Expected a mapping in the column, got {type(raw).__name__}")
        return dict(raw)


class EncryptedCodec:
    """Serialize-then-encrypt on write, decrypt-then-deserialize on read."""

    encrypted = True

    def __init__(self, encryption_key: str | bytes) -> None:
        self.encryptor = MessageEncryptor(encryption_key)

    def column_type(self) -> sa.types.TypeEngine:
        return sa.Text()

    def encode(self, record) -> str:
        return self.encryptor.encrypt(dumps(record.to_dict()))

    def decode(self, raw: Optional[str]) -> Dict[str, Any]:
        if not raw:
            return {}
        logger.debug("Decrypting tableless column value")
        return loads(self.encryptor.decrypt(raw))


def codec_for(encryption_key: str | bytes | None = None):
    if encryption_key is None:
        return PlainCodec()
    return EncryptedCodec(encryption_key)
