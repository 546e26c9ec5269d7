"""
records.host
~~~~~~~~~~~~

Attaches tableless models to SQLAlchemy-mapped host classes.

:func:`has_tableless` declares a column that stores one tableless record
serialized (and optionally encrypted) in a single string column::

    class Parent(TablelessHost, Base):
        __tablename__ = "parents"

        id = mapped_column(sa.Integer, primary_key=True)
        options = has_tableless(ParentOptions)
        secrets = has_tableless(ParentSecrets, encryption_key="...")

The descriptor maps a private attribute (``_options_serialized``) to the
database column ``options``; ``parent.options`` decodes that value into
a fresh ``ParentOptions`` bound to the parent, and assigning to it
encodes the record back.  :class:`TablelessHost` forwards unknown
attributes to the declared tableless records, in declaration order.

NOTE: the database column is expected to be of a string or text type.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import sqlalchemy as sa
from sqlalchemy.orm import mapped_column

from .codec import codec_for
from .model import TablelessModel, lookup_model, model_name_for

logger = logging.getLogger(__name__)


class TablelessColumn:
    """Descriptor for a host attribute backed by a serialized tableless record."""

    def __init__(self, model: type | str | None = None, encryption_key: str | bytes | None = None) -> None:
        self._model = model
        self.codec = codec_for(encryption_key)
        self.name: Optional[str] = None
        self.attribute_name: Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self.attribute_name = f"_{name}_serialized"

        # Runs before declarative mapping, so the column is picked up with the class
        if self.attribute_name not in vars(owner):
            setattr(
                owner,
                self.attribute_name,
                mapped_column(name, self.codec.column_type(), nullable=True),
            )
        if "__tableless_columns__" not in vars(owner):
            owner.__tableless_columns__ = tuple(getattr(owner, "__tableless_columns__", ()))
        if name not in owner.__tableless_columns__:
            owner.__tableless_columns__ += (name,)
        logger.debug(
            "Declared tableless column %s.%s (%s)",
            owner.__name__, name, "encrypted" if self.codec.encrypted else "plain",
        )

    @property
    def model(self) -> type:
        if not isinstance(self._model, type):
            self._model = lookup_model(self._model or model_name_for(self.name))
        if not issubclass(self._model, TablelessModel):
            raise TypeError(f"{self._model.__name__} is not a TablelessModel")
        return self._model

    def read_raw(self, instance: Any) -> Any:
        return getattr(instance, self.attribute_name)

    def write_raw(self, instance: Any, value: Any) -> None:
        setattr(instance, self.attribute_name, value)

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        record = self.model(self.codec.decode(self.read_raw(instance)))
        return record.bind(instance, self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        record = self.model(value or {})
        self.write_raw(instance, self.codec.encode(record))


def has_tableless(model: type | str | None = None, *, encryption_key: str | bytes | None = None) -> TablelessColumn:
    """
    Declare a host attribute holding an instance of ``model``.

    Parameters
    ----------
    model : type | str, optional
        The :class:`TablelessModel` subclass, or its registered name.
        Defaults to the camelized attribute name (``model_options`` ->
        ``ModelOptions``), resolved on first use.
    encryption_key : str | bytes, optional
        When given, the column stores the record encrypted with a key
        derived from this secret instead of plain JSON.
    """
    return TablelessColumn(model, encryption_key)


class TablelessHost:
    """
    Mixin for mapped classes declaring :func:`has_tableless` columns.

    Attribute reads and writes the host itself does not define are
    forwarded to the first tableless record that declares the name
    (or its ``?`` predicate form).
    """

    __tableless_columns__ = ()

    @classmethod
    def _tableless_column(cls, column: str) -> TablelessColumn:
        descriptor = getattr(cls, column, None)
        if not isinstance(descriptor, TablelessColumn):
            raise KeyError(f"{cls.__name__} has no tableless column {column!r}")
        return descriptor

    def read_raw_column(self, column: str) -> Any:
        """Return the value stored for ``column`` as the database sees it."""
        return self._tableless_column(column).read_raw(self)

    def write_raw_column(self, column: str, value: Any) -> None:
        self._tableless_column(column).write_raw(self, value)

    def _delegate_for(self, name: str) -> Optional[TablelessModel]:
        if name.startswith("_"):
            return None
        # Schemas are checked first so unrelated lookups never decode a column
        for column in type(self).__tableless_columns__:
            if type(self)._tableless_column(column).model.declares(name):
                return getattr(self, column)
        return None

    def __getattr__(self, name: str) -> Any:
        record = self._delegate_for(name)
        if record is None:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return getattr(record, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if not hasattr(type(self), name):
            record = self._delegate_for(name)
            if record is not None:
                setattr(record, name, value)
                return
        super().__setattr__(name, value)

    # ------------------------------------------------------------------ #
    # Change tracking
    # ------------------------------------------------------------------ #

    def changes(self) -> Dict[str, Tuple[Any, Any]]:
        """
        Map each modified column to ``(previous, current)``.

        Values are what the database would store; ``previous`` is ``None``
        when the column had no value before.
        """
        public_names = {
            type(self)._tableless_column(column).attribute_name: column
            for column in type(self).__tableless_columns__
        }
        state = sa.inspect(self)
        changes = {}
        for prop in state.mapper.column_attrs:
            history = state.attrs[prop.key].history
            if not history.has_changes():
                continue
            previous = history.deleted[0] if history.deleted else None
            current = history.added[0] if history.added else None
            changes[public_names.get(prop.key, prop.key)] = (previous, current)
        return changes

    def has_changes(self) -> bool:
        return bool(self.changes())
