"""Exception hierarchy for scopetree.

The core is deliberately quiet: unknown scopes are ignored and ambiguous
schema children are absorbed. Errors are raised only where a caller can act
on them:
- ``SchemaError`` for a root schema that is not a mapping
- ``UnknownScopeError`` from a permit running in strict mode
- ``ConfigurationError`` for unusable configuration

Usage:
    from scopetree.exceptions import ScopeTreeError, UnknownScopeError

    try:
        permit.grant("todo.archive")
    except UnknownScopeError as e:
        log.warning("rejected %s", e.details["scopes"])
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "ScopeTreeError",
    "ConfigurationError",
    "SchemaError",
    "UnknownScopeError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class ScopeTreeError(Exception):
    """Base exception for scopetree.

    Attributes:
        code: Stable error code string (e.g. "UNKNOWN_SCOPE").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(ScopeTreeError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"
    message: str = "Invalid configuration"


class SchemaError(ScopeTreeError):
    """Schema cannot be compiled into an access tree."""

    code: str = "SCHEMA_ERROR"
    message: str = "Invalid schema"


class UnknownScopeError(ScopeTreeError):
    """Scope is not declared by the access tree (strict permits only)."""

    code: str = "UNKNOWN_SCOPE"
    message: str = "Unknown scope"


# ---- Error Registry ---------------------------------------------------------

_E = TypeVar("_E", bound=type[ScopeTreeError])


class ErrorRegistry:
    """Registry mapping stable error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[ScopeTreeError]] = {}

    def register(self, code: str, error_cls: type[ScopeTreeError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[ScopeTreeError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[ScopeTreeError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("ROLE_ERROR")
        class RoleError(ScopeTreeError):
            code = "ROLE_ERROR"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", ScopeTreeError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("SCHEMA_ERROR", SchemaError)
error_registry.register("UNKNOWN_SCOPE", UnknownScopeError)
