"""Schema compiler: declarative schema → access tree.

Example::

    schema = {
        "todo": {
            "view": "Access todo view page",
            "action": {
                "create": "Create new todo",
                "update": "Update todo",
                "delete": "Delete todo",
            },
        },
    }

    access = compile_schema(schema, prefix="app")
    access.todo.action.create.scope   # "app.todo.action.create"

    permit = access.permit(["app.todo.action.create"])
    permit.is_.todo.action.create.ok  # True
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from ..config import SchemaOptions, resolve_options
from ..exceptions import SchemaError
from .schema import LeafEntry, NestedEntry, OverrideEntry, PassThroughEntry, classify
from .tree import AccessNode, Branch

if TYPE_CHECKING:
    from .permit import Permit

logger = logging.getLogger(__name__)


class AccessBranch(Branch[AccessNode]):
    """Compiled, immutable branch of an access tree.

    Shared read-only by every permit created from it.
    """

    __slots__ = ("_model",)

    node_type = AccessNode

    def __init__(self, children: Mapping[str, Any], model: Mapping[str, Any]) -> None:
        super().__init__(children)
        self._model: dict[str, Any] = copy_model(model)

    @property
    def model(self) -> dict[str, Any]:
        """Copy of the schema subtree this branch was compiled from."""
        return copy_model(self._model)

    def permit(
        self,
        granted: Iterable[str] = (),
        *,
        strict: bool = False,
        actor: Optional[str] = None,
    ) -> "Permit":
        """Create a permit for an actor holding ``granted`` scopes."""
        from .permit import Permit

        return Permit(self, granted, strict=strict, actor=actor)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready model: callables and other non-data values are omitted."""
        return plain_model(self._model)


def generate_scope(spacer: str, *paths: str) -> str:
    """Join non-blank path segments with ``spacer``."""
    return spacer.join(p for p in paths if p and p.strip())


def copy_model(value: Any) -> Any:
    """Copy the container structure of a schema value.

    Mappings, lists and tuples are rebuilt; everything else (callables,
    overrides, malformed leaves) is kept by reference.
    """
    if isinstance(value, Mapping):
        return {key: copy_model(child) for key, child in value.items()}
    if isinstance(value, list):
        return [copy_model(child) for child in value]
    if isinstance(value, tuple):
        return tuple(copy_model(child) for child in value)
    return value


def plain_model(value: Any) -> Any:
    """Reduce a schema value to JSON types; returns ``_OMIT`` for anything else."""
    if isinstance(value, AccessNode):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {key: plain for key, child in value.items() if (plain := plain_model(child)) is not _OMIT}
    if isinstance(value, (list, tuple)):
        return [plain for child in value if (plain := plain_model(child)) is not _OMIT]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return _OMIT


# Marker for values with no JSON form
_OMIT = object()


def compile_branch(root_id: str, node: Mapping[str, Any], options: SchemaOptions, path: str = "") -> AccessBranch:
    """Compile one schema mapping; ``root_id`` is its key under ``path``."""
    scope = generate_scope(options.spacer, path, root_id)

    children: dict[str, Any] = {}
    for key, value in node.items():
        entry = classify(value)
        if isinstance(entry, LeafEntry):
            children[key] = AccessNode(generate_scope(options.spacer, scope, key), entry.description)
        elif isinstance(entry, OverrideEntry):
            children[key] = AccessNode(entry.scope, entry.description)
        elif isinstance(entry, PassThroughEntry):
            children[key] = entry.value
        elif isinstance(entry, NestedEntry):
            children[key] = compile_branch(key, entry.model, options, scope)

    return AccessBranch(children, node)


def compile_schema(
    schema: Mapping[str, Any],
    options: SchemaOptions | Mapping[str, Any] | None = None,
    *,
    prefix: Optional[str] = None,
    spacer: Optional[str] = None,
) -> AccessBranch:
    """Create an access tree from a schema.

    Args:
        schema: Mapping of key → description string, scope override, or nested schema.
        options: SchemaOptions or a mapping with ``prefix`` / ``spacer``.
        prefix: Override ``options.prefix``.
        spacer: Override ``options.spacer``.

    Returns:
        Root AccessBranch.

    Raises:
        SchemaError: If ``schema`` is not a mapping.
        pydantic.ValidationError: If the options are invalid.
    """
    if not isinstance(schema, Mapping):
        raise SchemaError(f"Schema must be a mapping, got {type(schema).__name__}")

    opts = resolve_options(SchemaOptions, options, prefix=prefix, spacer=spacer)
    access = compile_branch(opts.prefix, schema, opts)
    logger.debug(
        "Compiled access tree (prefix=%r, spacer=%r): %d scopes",
        opts.prefix,
        opts.spacer,
        len(access.scopes),
    )
    return access


__all__ = [
    "AccessBranch",
    "compile_branch",
    "compile_schema",
    "copy_model",
    "generate_scope",
    "plain_model",
]
