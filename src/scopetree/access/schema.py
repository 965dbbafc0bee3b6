"""Schema entry classification.

Each child of a schema mapping is classified once, when it is compiled, into
one of four entry kinds:

- ``LeafEntry`` — a description string; its scope is generated from the path
- ``OverrideEntry`` — ``{"scope": ..., "description": ...}`` (or an
  ``AccessNode``); its scope is used verbatim
- ``PassThroughEntry`` — a sequence or callable, kept as-is and never traversed
- ``NestedEntry`` — anything else, compiled as a nested schema
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union

from .tree import AccessNode

# Key of an override mapping holding the literal scope
SCOPE_KEY = "scope"
DESCRIPTION_KEY = "description"


@dataclass(frozen=True)
class LeafEntry:
    description: str


@dataclass(frozen=True)
class OverrideEntry:
    scope: str
    description: str = ""


@dataclass(frozen=True)
class PassThroughEntry:
    value: Any


@dataclass(frozen=True)
class NestedEntry:
    """Nested schema. ``model`` is empty when the value was not a mapping."""

    model: Mapping[str, Any]


SchemaEntry = Union[LeafEntry, OverrideEntry, PassThroughEntry, NestedEntry]


def is_override(value: Any) -> bool:
    """Check if a schema value supplies its own literal scope."""
    if isinstance(value, AccessNode):
        return True
    return isinstance(value, Mapping) and isinstance(value.get(SCOPE_KEY), str)


def classify(value: Any) -> SchemaEntry:
    """Classify one schema child.

    Malformed values (numbers, None, ...) fall through to ``NestedEntry`` with
    an empty model and compile to an empty branch.
    """
    if isinstance(value, str):
        return LeafEntry(value)

    if is_override(value):
        if isinstance(value, AccessNode):
            return OverrideEntry(value.scope, value.description)
        description = value.get(DESCRIPTION_KEY)
        return OverrideEntry(value[SCOPE_KEY], description if isinstance(description, str) else "")

    if (isinstance(value, Sequence) and not isinstance(value, str)) or callable(value):
        return PassThroughEntry(value)

    if isinstance(value, Mapping):
        return NestedEntry(value)
    return NestedEntry({})


__all__ = [
    "LeafEntry",
    "NestedEntry",
    "OverrideEntry",
    "PassThroughEntry",
    "SchemaEntry",
    "classify",
    "is_override",
]
