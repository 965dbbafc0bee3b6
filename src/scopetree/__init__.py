from .access import (
    AccessBranch,
    AccessNode,
    Permit,
    PermitBranch,
    PermitNode,
    compile_schema,
    create_permit,
)
from .config import (
    LogLevel,
    PermitOptions,
    SchemaOptions,
    ScopeTreeConfig,
    load_config_from_env,
)
from .exceptions import (
    ConfigurationError,
    SchemaError,
    ScopeTreeError,
    UnknownScopeError,
)
from .logging import (
    PermitLoggerAdapter,
    ScopeTreeFormatter,
    get_permit_logger,
    safe_preview,
    setup_logging,
)

__all__ = [
    'AccessBranch',
    'AccessNode',
    'Permit',
    'PermitBranch',
    'PermitNode',
    'compile_schema',
    'create_permit',
    'LogLevel',
    'PermitOptions',
    'SchemaOptions',
    'ScopeTreeConfig',
    'load_config_from_env',
    'ConfigurationError',
    'SchemaError',
    'ScopeTreeError',
    'UnknownScopeError',
    'PermitLoggerAdapter',
    'ScopeTreeFormatter',
    'get_permit_logger',
    'safe_preview',
    'setup_logging',
]
