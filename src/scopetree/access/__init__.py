"""Access trees and permits.

Defines:
- compile_schema(): declarative schema → AccessBranch tree of AccessNode leaves
- Permit: per-actor evaluator with a PermitBranch snapshot (ok/no, some/none/all)
- create_permit(): compile + permit in one call
"""

from .compiler import AccessBranch, compile_schema
from .permit import Permit, PermitBranch, create_permit
from .schema import (
    LeafEntry,
    NestedEntry,
    OverrideEntry,
    PassThroughEntry,
    SchemaEntry,
    classify,
)
from .tree import AccessNode, Branch, PermitNode

__all__ = [
    "AccessBranch",
    "AccessNode",
    "Branch",
    "LeafEntry",
    "NestedEntry",
    "OverrideEntry",
    "PassThroughEntry",
    "Permit",
    "PermitBranch",
    "PermitNode",
    "SchemaEntry",
    "classify",
    "compile_schema",
    "create_permit",
]
