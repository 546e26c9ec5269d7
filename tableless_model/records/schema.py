"""
records.schema
~~~~~~~~~~~~~~

Attribute declarations for tableless models.

Each concrete model class owns exactly one :class:`AttributeSchema`,
built while the class is being defined and shared by all of its
instances.  A definition pairs a semantic type with a default which is
either a literal or a zero-argument callable evaluated once per freshly
constructed record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Union

from ..config.settings import DEFAULT_ATTRIBUTE_TYPE, PREDICATE_SUFFIX
from .casting import cast, normalize_type
from .errors import AttributeUndefined

logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


#: Marks a declaration without a default.
MISSING: Any = _Missing()


@dataclass(frozen=True)
class LiteralDefault:
    value: Any = None

    def evaluate(self) -> Any:
        return self.value


@dataclass(frozen=True)
class DeferredDefault:
    """A default computed by calling ``factory`` at construction time."""
    factory: Callable[[], Any]

    def evaluate(self) -> Any:
        return self.factory()


Default = Union[LiteralDefault, DeferredDefault]


def make_default(default: Any = MISSING) -> Default:
    if default is MISSING:
        return LiteralDefault()
    if isinstance(default, (LiteralDefault, DeferredDefault)):
        return default
    if callable(default):
        return DeferredDefault(default)
    return LiteralDefault(default)


@dataclass(frozen=True)
class AttributeDefinition:
    """Name, semantic type and default of one declared attribute."""
    name: str
    type: str = DEFAULT_ATTRIBUTE_TYPE
    default: Default = field(default_factory=LiteralDefault)

    def cast(self, value: Any) -> Any:
        return cast(self.type, value)

    def initial_value(self) -> Any:
        return self.cast(self.default.evaluate())


class AttributeSchema:
    """
    Ordered mapping of attribute name to :class:`AttributeDefinition`.

    Parameters
    ----------
    model_name : str
        Name of the model class owning the schema, used in error messages.
    definitions : iterable of AttributeDefinition, optional
        Definitions to start from, in declaration order.
    """

    def __init__(self, model_name: str, definitions: Iterable[AttributeDefinition] = ()) -> None:
        self.model_name = model_name
        self._definitions: Dict[str, AttributeDefinition] = {}
        for definition in definitions:
            self._definitions[definition.name] = definition

    def declare(self, name: str, type: Any = None, default: Any = MISSING) -> AttributeDefinition:
        """Register ``name``; declaring an existing name replaces it in place."""
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"Invalid attribute name {name!r} for {self.model_name}")
        if name.startswith("_") or name.endswith(PREDICATE_SUFFIX):
            raise ValueError(f"Attribute name {name!r} is reserved")

        definition = AttributeDefinition(name, normalize_type(type), make_default(default))
        if name in self._definitions:
            logger.warning("Redeclaring attribute %s.%s", self.model_name, name)
        else:
            logger.debug("Declared attribute %s.%s (%s)", self.model_name, name, definition.type)
        self._definitions[name] = definition
        return definition

    def definition(self, name: str) -> AttributeDefinition:
        try:
            return self._definitions[name]
        except (KeyError, TypeError):
            raise AttributeUndefined(self.model_name, name) from None

    def names(self) -> List[str]:
        return list(self._definitions)

    def definitions(self) -> List[AttributeDefinition]:
        return list(self._definitions.values())

    def copy(self, model_name: str) -> "AttributeSchema":
        return AttributeSchema(model_name, self._definitions.values())

    def _replace_definition(self, definition: AttributeDefinition) -> None:
        # Test-only: see tableless_model.testing.override_attribute_type
        self.definition(definition.name)
        self._definitions[definition.name] = definition

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"<AttributeSchema {self.model_name} {self.names()}>"
