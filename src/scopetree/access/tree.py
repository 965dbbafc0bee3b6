"""Tree primitives shared by the access tree and the permit tree.

Both trees have the same shape: internal ``Branch`` nodes keyed by schema
key, leaf nodes carrying a scope. They differ only in the leaf payload:

- ``AccessNode`` — ``(scope, description)``
- ``PermitNode`` — ``AccessNode`` plus the actor's ``ok`` / ``no`` flags

Children are reachable as attributes (``branch.todo.view``) when the key is a
valid identifier that does not shadow a branch method, and always by item
(``branch["scopes"]``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Generic, Iterator, Mapping, TypeVar


@dataclass(frozen=True)
class AccessNode:
    """One permission point of the access tree.

    Attributes:
        scope: Stable identifier used in grant lists and checks
            (e.g. ``"todo.action.create"``).
        description: Human-readable label, informational only.
    """

    scope: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"scope": self.scope, "description": self.description}


@dataclass(frozen=True)
class PermitNode(AccessNode):
    """Access node evaluated for one actor."""

    ok: bool = False

    @property
    def no(self) -> bool:
        """Counterpart of ``ok``: True when the scope is denied or unknown."""
        return not self.ok

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "ok": self.ok, "no": self.no}


N = TypeVar("N", bound=AccessNode)


class Branch(Generic[N]):
    """Internal tree node holding one child per schema key.

    A child is either a leaf of ``node_type``, a nested ``Branch``, or a
    pass-through value (sequence or callable) that traversal skips.
    """

    __slots__ = ("_children", "_scopes")

    node_type: ClassVar[type[AccessNode]] = AccessNode

    def __init__(self, children: Mapping[str, Any]) -> None:
        self._children: dict[str, Any] = dict(children)
        # Fixed at construction; canonical order for every aggregate
        flat: list[N] = []
        self.each(flat.append)
        self._scopes: tuple[N, ...] = tuple(flat)

    def each(self, visit: Callable[[N], Any]) -> None:
        """Call ``visit`` on every leaf under this branch, depth-first pre-order."""
        for child in self._children.values():
            if isinstance(child, self.node_type):
                visit(child)
            elif isinstance(child, Branch):
                child.each(visit)

    @property
    def scopes(self) -> list[N]:
        """All leaves under this branch, in traversal order."""
        return list(self._scopes)

    def keys(self) -> list[str]:
        return list(self._children)

    def items(self) -> list[tuple[str, Any]]:
        return list(self._children.items())

    # ── Child access ────────────────────────────────────

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails, so methods shadow children
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._children[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__} has no child {name!r}") from None

    def __getitem__(self, key: str) -> Any:
        return self._children[key]

    def __contains__(self, key: object) -> bool:
        return key in self._children

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | {k for k in self._children if k.isidentifier()})

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={self.keys()!r}, scopes={len(self._scopes)})"


__all__ = [
    "AccessNode",
    "Branch",
    "PermitNode",
]
