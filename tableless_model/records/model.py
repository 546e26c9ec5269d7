"""
records.model
~~~~~~~~~~~~~

:class:`TablelessModel` is a ``dict`` whose keys must be declared in
advance, like the columns of a regular model but without a table::

    class ModelOptions(TablelessModel):
        enabled = attribute(type="boolean", default=True)
        retries = attribute(type="integer", default=5)
        label = attribute()

Reading or writing an undeclared key raises
:class:`~tableless_model.records.errors.AttributeUndefined`.  Values are
cast to their declared type both when written and when read.

A record materialized from a host column keeps a weak reference to the
host and the column name; every attribute write then assigns the whole
record back to that column so the host sees itself as modified.
"""

from __future__ import annotations

import logging
import weakref
from typing import Any, ClassVar, Dict, Optional

from ..config.settings import DISPLAY_TIME_FORMAT, PREDICATE_SUFFIX
from .casting import TIME
from .errors import AttributeUndefined, OperationNotSupported
from .schema import MISSING, AttributeDefinition, AttributeSchema

logger = logging.getLogger(__name__)

_registry: Dict[str, type] = {}


def register_model(model: type) -> None:
    if model.__name__ in _registry and _registry[model.__name__] is not model:
        logger.debug("Replacing registered tableless model %s", model.__name__)
    _registry[model.__name__] = model


def lookup_model(name: str) -> type:
    """Return the tableless model class registered as ``name``."""
    try:
        return _registry[name]
    except KeyError:
        raise LookupError(f"No tableless model named {name!r} has been defined") from None


def model_name_for(column: str) -> str:
    """``"model_options"`` -> ``"ModelOptions"``."""
    return "".join(part[:1].upper() + part[1:] for part in column.split("_") if part)


class Attribute:
    """Class-body declaration of one attribute; see :func:`attribute`."""

    def __init__(self, type: Any = None, default: Any = MISSING) -> None:
        self.type = type
        self.default = default
        self.name: Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Optional["TablelessModel"], owner: type) -> Any:
        if instance is None:
            return self
        return instance.get(self.name)

    def __set__(self, instance: "TablelessModel", value: Any) -> None:
        instance.set(self.name, value)


def attribute(type: Any = None, default: Any = MISSING) -> Attribute:
    """
    Declare an attribute in the body of a :class:`TablelessModel` subclass.

    Parameters
    ----------
    type : str | type, optional
        One of ``string`` (the default), ``integer``, ``float``,
        ``decimal``, ``time``, ``date``, ``datetime``, ``boolean``, or the
        matching Python type.
    default : object | callable, optional
        A literal, or a zero-argument callable evaluated each time a new
        record is constructed.
    """
    return Attribute(type, default)


class TablelessModel(dict):
    """A schema-restricted, typed ``dict`` stored inside a host column."""

    __slots__ = ("_owner_ref", "_column")

    schema: ClassVar[AttributeSchema] = AttributeSchema("TablelessModel")

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        declared = [(name, value) for name, value in vars(cls).items() if isinstance(value, Attribute)]
        for name, _ in declared:
            cls._check_name(name)

        cls.schema = cls.schema.copy(cls.__name__)
        for name, descriptor in declared:
            cls._declare(name, descriptor)
        register_model(cls)

    @classmethod
    def _check_name(cls, name: str) -> None:
        if name in _RESERVED_NAMES:
            raise ValueError(f"{cls.__name__}.{name} would shadow a TablelessModel member")

    @classmethod
    def _declare(cls, name: str, descriptor: Attribute) -> None:
        cls._check_name(name)
        cls.schema.declare(name, descriptor.type, descriptor.default)

    @classmethod
    def declare(cls, name: str, type: Any = None, default: Any = MISSING) -> AttributeDefinition:
        """Add (or redeclare) an attribute after the class has been defined."""
        if cls is TablelessModel:
            raise TypeError("Attributes must be declared on a TablelessModel subclass")
        descriptor = Attribute(type, default)
        cls._declare(name, descriptor)
        setattr(cls, name, descriptor)
        descriptor.__set_name__(cls, name)
        return cls.schema.definition(name)

    def __init__(self, initial: Any = None, /, **values: Any) -> None:
        super().__init__()
        super().__setattr__("_owner_ref", None)
        super().__setattr__("_column", None)

        provided = dict(initial or {})
        provided.update(values)
        for name in provided:
            self.schema.definition(name)

        # Provided values win; defaults (deferred ones included) only fill the rest
        for definition in self.schema.definitions():
            if definition.name in provided:
                self.set(definition.name, provided[definition.name])
            else:
                dict.__setitem__(self, definition.name, definition.initial_value())

    # ------------------------------------------------------------------ #
    # Attribute access
    # ------------------------------------------------------------------ #

    def get(self, name: str) -> Any:
        definition = self.schema.definition(name)
        return definition.cast(dict.get(self, name))

    def set(self, name: str, value: Any) -> Any:
        definition = self.schema.definition(name)
        value = definition.cast(value)
        dict.__setitem__(self, name, value)
        self._propagate()
        return value

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails: predicates and unknown names
        if name.startswith("_"):
            raise AttributeError(name)
        if name.endswith(PREDICATE_SUFFIX):
            base = name[: -len(PREDICATE_SUFFIX)]
            if base in self.schema:
                return bool(self.get(base))
        raise AttributeUndefined(type(self).__name__, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in TablelessModel.__slots__ or name in self.schema:
            super().__setattr__(name, value)
        else:
            raise AttributeUndefined(type(self).__name__, name)

    @classmethod
    def declares(cls, name: str) -> bool:
        """True if ``name`` is a declared attribute or its predicate form."""
        if name in cls.schema:
            return True
        return name.endswith(PREDICATE_SUFFIX) and name[: -len(PREDICATE_SUFFIX)] in cls.schema

    def responds_to(self, name: str) -> bool:
        if self.declares(name):
            return True
        return not name.startswith("_") and hasattr(type(self), name)

    def to_dict(self) -> Dict[str, Any]:
        return {name: self.get(name) for name in self.schema}

    # ------------------------------------------------------------------ #
    # Owner binding
    # ------------------------------------------------------------------ #

    def bind(self, owner: Any, column: str) -> "TablelessModel":
        """Attach to ``owner``'s ``column`` so attribute writes mark it modified."""
        super().__setattr__("_owner_ref", weakref.ref(owner))
        super().__setattr__("_column", column)
        return self

    def detach(self) -> None:
        super().__setattr__("_owner_ref", None)
        super().__setattr__("_column", None)

    @property
    def owner(self) -> Any:
        return self._owner_ref() if self._owner_ref is not None else None

    @property
    def column(self) -> Optional[str]:
        return self._column

    def _propagate(self) -> None:
        owner = self.owner
        if owner is None:
            return
        logger.debug("Marking %s.%s as changed", type(owner).__name__, self._column)
        setattr(owner, self._column, self)

    # ------------------------------------------------------------------ #
    # Bulk operations bypass the schema and are refused
    # ------------------------------------------------------------------ #

    def merge(self, *args: Any, **kwargs: Any) -> None:
        raise OperationNotSupported(
            f"{type(self).__name__} cannot be merged; assign attributes one at a time"
        )

    update = merge
    setdefault = merge
    __ior__ = merge
    __or__ = merge
    __ror__ = merge

    def _refuse_removal(self, *args: Any, **kwargs: Any) -> None:
        raise OperationNotSupported(f"Attributes of {type(self).__name__} cannot be removed")

    __delitem__ = _refuse_removal
    __delattr__ = _refuse_removal
    pop = _refuse_removal
    popitem = _refuse_removal
    clear = _refuse_removal

    def copy(self) -> "TablelessModel":
        """Return an unbound record with the same values."""
        return type(self)(dict(self))

    def __reduce__(self) -> Any:
        return type(self), (dict(self),)

    def __repr__(self) -> str:
        parts = []
        for name in sorted(self.schema):
            value = self.get(name)
            if self.schema.definition(name).type == TIME and value is not None:
                shown = value.strftime(DISPLAY_TIME_FORMAT)
            else:
                shown = repr(value)
            parts.append(f" {name}={shown}")
        return f"<#{type(self).__name__}{''.join(parts)}>"

    __str__ = __repr__


_RESERVED_NAMES = frozenset(dir(TablelessModel))
