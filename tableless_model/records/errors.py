"""
records.errors
~~~~~~~~~~~~~~

Exceptions raised by tableless models and the columns that store them.

Casting is deliberately absent from this module: a declared attribute
type coerces bad input to the type's empty value instead of failing.
"""

from __future__ import annotations


class TablelessError(Exception):
    """Base class for every error raised by :mod:`tableless_model`."""


class AttributeUndefined(TablelessError, AttributeError):
    """Raised when reading or writing a name the model does not declare."""

    def __init__(self, model_name: str, attribute_name: str) -> None:
        super().__init__(
            f"The attribute {attribute_name!r} is undefined for {model_name}"
        )
        self.model_name = model_name
        self.attribute_name = attribute_name


class OperationNotSupported(TablelessError, TypeError):
    """Raised by bulk operations that would bypass the attribute schema."""


class CodecFailure(TablelessError, ValueError):
    """Raised when a column value cannot be serialized, encrypted or read back."""
