"""
Helpers for test suites of applications using tableless models.

Nothing here is meant for production code paths: the helpers mutate
schemas that are otherwise shared, read-only state.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Iterator

from .records.casting import normalize_type


@contextmanager
def override_attribute_type(model: type, name: str, type_: Any) -> Iterator[None]:
    """
    Temporarily change the declared type of ``model.name``.

    Affects every instance of ``model`` while active and is not safe to
    use from more than one thread.
    """
    original = model.schema.definition(name)
    model.schema._replace_definition(replace(original, type=normalize_type(type_)))
    try:
        yield
    finally:
        model.schema._replace_definition(original)
