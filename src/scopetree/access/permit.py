"""Permit evaluator: access tree + granted scopes → per-actor authorization view.

A ``Permit`` owns a scope cache (scope → bool) and the current
``PermitBranch`` snapshot. The cache is seeded for every scope the tree
declares on construction and on ``reset()``; ``grant()`` / ``deny()`` only
flip entries that already exist. Every mutation regenerates the snapshot, and
a snapshot keeps the values it was generated with.

Example::

    permit = create_permit(schema, granted=["todo.action.create"])
    permit.is_.todo.some               # True
    permit.is_.todo.action.all         # False
    permit.grant("todo.action.update", "todo.action.delete")
    permit.check("todo.action.delete") # True
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from ..config import PermitOptions, resolve_options
from ..exceptions import UnknownScopeError
from ..logging import get_permit_logger, safe_preview
from .compiler import AccessBranch, compile_schema
from .tree import AccessNode, Branch, PermitNode


class PermitBranch(Branch[PermitNode]):
    """Read-only snapshot of a permit, isomorphic to an AccessBranch.

    Aggregates are evaluated over this branch's flattened scopes, in order.
    """

    __slots__ = ()

    node_type = PermitNode

    @property
    def some(self) -> bool:
        """True if any scope under this branch is granted."""
        return any(node.ok for node in self._scopes)

    @property
    def none(self) -> bool:
        """True if no scope under this branch is granted (also for an empty branch)."""
        return not self.some

    @property
    def all(self) -> bool:
        """True if every scope under this branch is granted; False for an empty branch."""
        if not self._scopes:
            return False
        return all(node.ok for node in self._scopes)

    def to_dict(self) -> dict[str, Any]:
        """Aggregates and children as plain data, without the flattened scopes."""
        data: dict[str, Any] = {"some": self.some, "none": self.none, "all": self.all}
        for key, child in self._children.items():
            if isinstance(child, (PermitNode, PermitBranch)):
                data[key] = child.to_dict()
        return data


def generate(branch: AccessBranch, values: Mapping[str, bool]) -> PermitBranch:
    """Build a PermitBranch mirroring ``branch`` with leaf values read from ``values``."""
    children: dict[str, Any] = {}
    for key, child in branch.items():
        if isinstance(child, AccessNode):
            children[key] = PermitNode(child.scope, child.description, values.get(child.scope, False))
        elif isinstance(child, AccessBranch):
            children[key] = generate(child, values)
        else:
            children[key] = child
    return PermitBranch(children)


class Permit:
    """Mutable, single-actor authorization view over an access tree.

    Args:
        access: Access tree to evaluate.
        granted: Scopes the actor holds. Scopes the tree does not declare are
            kept out of the cache.
        strict: Raise UnknownScopeError from grant/deny/check for undeclared
            scopes instead of ignoring them.
        actor: Optional label used in log records.
    """

    def __init__(
        self,
        access: AccessBranch,
        granted: Iterable[str] = (),
        *,
        strict: bool = False,
        actor: Optional[str] = None,
    ) -> None:
        self._access = access
        self._granted: frozenset[str] = frozenset(granted)
        self._cache: dict[str, bool] = {}
        self._snapshot: PermitBranch
        self.strict = strict
        self.actor = actor
        self._log = get_permit_logger(__name__, actor=actor)
        self.reset()

    # ── Views ───────────────────────────────────────────

    @property
    def granted(self) -> list[AccessNode]:
        """Access nodes currently granted, in tree order."""
        return [node for node in self._access.scopes if self._cache.get(node.scope) is True]

    @property
    def denied(self) -> list[AccessNode]:
        """Access nodes currently denied, in tree order."""
        return [node for node in self._access.scopes if self._cache.get(node.scope) is False]

    @property
    def scopes(self) -> list[AccessNode]:
        return self._access.scopes

    @property
    def is_(self) -> PermitBranch:
        """Current snapshot. ``is`` is reserved in Python."""
        return self._snapshot

    # ── Operations ──────────────────────────────────────

    def reset(self) -> None:
        """Reseed every declared scope from the granted list and regenerate the snapshot."""
        self._cache.clear()
        self._access.each(self._seed)

        unknown = self._granted.difference(self._cache)
        if unknown:
            self._log.debug("Granted scopes not declared by the access tree: %s", safe_preview(unknown))
        self._log.debug(
            "Permit reset: %d scopes, %d granted",
            len(self._cache),
            sum(self._cache.values()),
        )
        self._regenerate()

    def grant(self, *scopes: str) -> None:
        """Mark declared scopes as granted; one snapshot regeneration per call."""
        self._set_scope_value(True, scopes)

    def deny(self, *scopes: str) -> None:
        """Mark declared scopes as denied; one snapshot regeneration per call."""
        self._set_scope_value(False, scopes)

    def check(self, scope: str) -> bool:
        """Return the cached value for ``scope`` (False when unknown)."""
        if self.strict and scope not in self._cache:
            raise UnknownScopeError(f"Unknown scope: {scope}", scopes=[scope])
        return self._cache.get(scope, False)

    # ── Internals ───────────────────────────────────────

    def _seed(self, node: AccessNode) -> None:
        self._cache[node.scope] = node.scope in self._granted

    def _set_scope_value(self, value: bool, scopes: tuple[str, ...]) -> None:
        unknown = [scope for scope in scopes if scope not in self._cache]
        if unknown and self.strict:
            raise UnknownScopeError(f"Unknown scope(s): {', '.join(unknown)}", scopes=unknown)

        for scope in scopes:
            if scope in self._cache:
                self._cache[scope] = value

        if unknown:
            self._log.debug("Ignoring unknown scope(s): %s", safe_preview(unknown))
        self._log.debug("%s: %s", "Granted" if value else "Denied", safe_preview([s for s in scopes if s in self._cache]))
        self._regenerate()

    def _regenerate(self) -> None:
        self._snapshot = generate(self._access, MappingProxyType(dict(self._cache)))

    def __repr__(self) -> str:
        return f"Permit(actor={self.actor!r}, granted={len(self.granted)}, scopes={len(self._cache)})"


def create_permit(
    schema: Mapping[str, Any],
    options: PermitOptions | Mapping[str, Any] | None = None,
    *,
    prefix: Optional[str] = None,
    spacer: Optional[str] = None,
    granted: Optional[Iterable[str]] = None,
    strict: Optional[bool] = None,
    actor: Optional[str] = None,
) -> Permit:
    """Compile ``schema`` and create a permit for it in one step.

    Args:
        schema: Schema mapping (see :func:`compile_schema`).
        options: PermitOptions (e.g. ``ScopeTreeConfig.permit_options()``) or a
            mapping with ``prefix``, ``spacer``, ``granted``, ``strict``.
        prefix: Override ``options.prefix``.
        spacer: Override ``options.spacer``.
        granted: Override ``options.granted``.
        strict: Override ``options.strict`` (see :class:`Permit`).
        actor: See :class:`Permit`.
    """
    opts = resolve_options(
        PermitOptions,
        options,
        prefix=prefix,
        spacer=spacer,
        granted=list(granted) if granted is not None else None,
        strict=strict,
    )
    access = compile_schema(schema, prefix=opts.prefix, spacer=opts.spacer)
    return access.permit(opts.granted, strict=opts.strict, actor=actor)


__all__ = [
    "Permit",
    "PermitBranch",
    "create_permit",
    "generate",
]
