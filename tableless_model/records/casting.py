"""
records.casting
~~~~~~~~~~~~~~~

Best-effort coercion of raw values to the semantic type declared for an
attribute.

Every caster is total: input that cannot be coerced yields the type's
empty value (``""``, ``0``, ``0.0``, ``Decimal(0)``) rather than an
exception.  Temporal types (``time``, ``date``, ``datetime``) have no
meaningful empty value, so unparseable input yields ``None``.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional

from ..config.settings import DATETIME_FALLBACK_FORMATS, DEFAULT_ATTRIBUTE_TYPE, MAX_INTEGER_DIGITS

logger = logging.getLogger(__name__)


STRING = "string"
INTEGER = "integer"
FLOAT = "float"
DECIMAL = "decimal"
TIME = "time"
DATE = "date"
DATETIME = "datetime"
BOOLEAN = "boolean"

#: Python types accepted in place of the semantic type names.
TYPE_ALIASES: Dict[type, str] = {
    str: STRING,
    int: INTEGER,
    float: FLOAT,
    Decimal: DECIMAL,
    datetime: DATETIME,
    date: DATE,
    bool: BOOLEAN,
}

# Optional sign, digits with an optional fraction, optional exponent.
_NUMERIC_PREFIX = re.compile(r"\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #

def _numeric_prefix(value: Any) -> Optional[str]:
    """Return the leading number in ``str(value)``, or ``None``."""
    if value is None:
        return None
    match = _NUMERIC_PREFIX.match(str(value))
    return match.group(0).strip() if match else None


def _posix_seconds(value: datetime) -> float:
    """Seconds since the epoch; naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _decimal_to_int(number: Decimal) -> int:
    if not number.is_finite() or number.adjusted() >= MAX_INTEGER_DIGITS:
        return 0
    return int(number)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.debug("Timestamp %r is out of range", value)
            return None

    text = str(value).strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in DATETIME_FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    logger.debug("Could not parse %r as a date or time", text)
    return None


# --------------------------------------------------------------------------- #
# Casters
# --------------------------------------------------------------------------- #

def cast_string(value: Any) -> str:
    return "" if value is None else str(value)


def cast_integer(value: Any) -> int:
    if isinstance(value, int):
        return int(value)
    if isinstance(value, datetime):
        return int(_posix_seconds(value))
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, Decimal):
        return _decimal_to_int(value)
    prefix = _numeric_prefix(value)
    if prefix is None:
        return 0
    try:
        return _decimal_to_int(Decimal(prefix))
    except InvalidOperation:
        return 0


def cast_float(value: Any) -> float:
    if isinstance(value, datetime):
        return _posix_seconds(value)
    try:
        if isinstance(value, (int, float, Decimal)):
            number = float(value)
        else:
            prefix = _numeric_prefix(value)
            number = float(prefix) if prefix is not None else 0.0
    except OverflowError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def cast_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal(0)
    if isinstance(value, int):
        return Decimal(int(value))
    if isinstance(value, datetime):
        value = _posix_seconds(value)
    prefix = _numeric_prefix(value)
    if prefix is None:
        return Decimal(0)
    try:
        return Decimal(prefix)
    except InvalidOperation:
        return Decimal(0)


def cast_time(value: Any) -> Optional[datetime]:
    """Timezone-aware timestamp; naive input is taken to be UTC."""
    parsed = _parse_datetime(value)
    if parsed is not None and parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def cast_datetime(value: Any) -> Optional[datetime]:
    return _parse_datetime(value)


def cast_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = _parse_datetime(value)
    return parsed.date() if parsed is not None else None


def cast_boolean(value: Any) -> bool:
    return bool(value)


CASTERS: Dict[str, Callable[[Any], Any]] = {
    STRING: cast_string,
    INTEGER: cast_integer,
    FLOAT: cast_float,
    DECIMAL: cast_decimal,
    TIME: cast_time,
    DATE: cast_date,
    DATETIME: cast_datetime,
    BOOLEAN: cast_boolean,
}

ATTRIBUTE_TYPES = frozenset(CASTERS)


# --------------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------------- #

def normalize_type(type_: Any = None) -> str:
    """
    Return the semantic type name for ``type_``.

    Parameters
    ----------
    type_ : str | type | None
        A semantic type name, one of the Python types in
        :data:`TYPE_ALIASES`, or ``None`` for the default type.

    Raises
    ------
    ValueError
        If ``type_`` names no known type.
    """
    if type_ is None:
        return DEFAULT_ATTRIBUTE_TYPE
    if isinstance(type_, type):
        try:
            return TYPE_ALIASES[type_]
        except KeyError:
            raise ValueError(f"Unsupported attribute type: {type_.__name__}") from None
    name = str(type_).lower()
    if name not in ATTRIBUTE_TYPES:
        raise ValueError(
            f"Unsupported attribute type {type_!r}; "
            f"expected one of {', '.join(sorted(ATTRIBUTE_TYPES))}"
        )
    return name


def cast(type_name: str, value: Any) -> Any:
    """Coerce ``value`` to the declared semantic type ``type_name``."""
    return CASTERS[type_name](value)
