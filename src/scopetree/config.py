"""Configuration models for scopetree.

This module provides Pydantic-validated models for:
- ``SchemaOptions``: how scope strings are generated (prefix, spacer)
- ``PermitOptions``: schema options plus the actor's granted scopes and strict mode
- ``ScopeTreeConfig``: process-wide settings (logging, defaults, strict mode)

Options passed to ``compile_schema()`` / ``create_permit()`` may be a model
instance, a plain mapping, or keyword overrides; all of them are validated
through these models.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

_M = TypeVar("_M", bound=BaseModel)


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SchemaOptions(BaseModel):
    """Options for compiling a schema into an access tree.

    Example::

        SchemaOptions(prefix="@", spacer="-")
        # todo → view compiles to scope "@-todo-view"
    """

    model_config = {"extra": "forbid", "frozen": True}

    prefix: str = Field(
        default="",
        description="Root path segment prepended to every generated scope",
    )
    spacer: str = Field(
        default=".",
        description="Separator joining path segments into a scope string",
    )


class PermitOptions(SchemaOptions):
    """Schema options plus the granted scopes and strict mode used to build a permit."""

    granted: list[str] = Field(
        default_factory=list,
        description="Scopes held by the actor, already resolved by the caller",
    )
    strict: bool = Field(
        default=False,
        description="Raise UnknownScopeError instead of ignoring undeclared scopes",
    )


def resolve_options(model: type[_M], options: Any = None, **overrides: Any) -> _M:
    """Validate ``options`` (model, mapping or None) plus keyword overrides into ``model``.

    Overrides whose value is None are ignored, so callers can forward
    optional keyword arguments untouched.
    """
    if isinstance(options, BaseModel):
        data = options.model_dump(include=set(model.model_fields))
    elif isinstance(options, Mapping):
        data = dict(options)
    elif options is None:
        data = {}
    else:
        raise TypeError(f"options must be a mapping or {model.__name__}, got {type(options).__name__}")

    data.update({k: v for k, v in overrides.items() if v is not None})
    return model.model_validate(data)


class ScopeTreeConfig(BaseModel):
    """Process-wide scopetree settings.

    Settings come from code or from :func:`load_config_from_env`; no other
    module reads the environment.
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Scope generation defaults
    prefix: str = Field(
        default="",
        description="Default scope prefix",
    )
    spacer: str = Field(
        default=".",
        description="Default scope spacer",
    )

    # Permit behavior
    strict_scopes: bool = Field(
        default=False,
        description="Raise UnknownScopeError instead of ignoring undeclared scopes",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    def schema_options(self) -> SchemaOptions:
        """Build the default SchemaOptions for this configuration."""
        return SchemaOptions(prefix=self.prefix, spacer=self.spacer)

    def permit_options(self, granted: Optional[list[str]] = None) -> PermitOptions:
        """Build PermitOptions carrying this configuration's scope defaults and strict mode."""
        return PermitOptions(
            prefix=self.prefix,
            spacer=self.spacer,
            granted=list(granted or []),
            strict=self.strict_scopes,
        )

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> ScopeTreeConfig:
    """Load configuration from environment variables.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SCOPE_PREFIX: Default scope prefix
    - SCOPE_SPACER: Default scope spacer (default: ".")
    - SCOPE_STRICT: Strict permits (true/false, default: false)

    Args:
        environ: Mapping to read instead of ``os.environ`` (tests).

    Raises:
        ConfigurationError: If a variable holds an invalid value.
    """
    if environ is None:
        import os

        environ = os.environ

    truthy = ("true", "1", "yes", "on")
    try:
        return ScopeTreeConfig(
            log_level=environ.get("LOG_LEVEL", "INFO"),
            log_json=environ.get("LOG_JSON", "false").lower() in truthy,
            prefix=environ.get("SCOPE_PREFIX", ""),
            spacer=environ.get("SCOPE_SPACER", "."),
            strict_scopes=environ.get("SCOPE_STRICT", "false").lower() in truthy,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e.errors()[0]['msg']}", errors=e.errors()) from e


__all__ = [
    "LogLevel",
    "PermitOptions",
    "SchemaOptions",
    "ScopeTreeConfig",
    "load_config_from_env",
    "resolve_options",
]
