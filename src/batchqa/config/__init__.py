# src/batchqa/config/__init__.py

"""Configuration for batch checking.

Resolve-once, freeze-then-flow: the CLI resolves configuration into an
immutable ``FrozenConfig`` that components receive at construction. The
pipeline runner passes it through without looking inside.
"""

# ruff: noqa: I001

from .core import (
    FrozenConfig,
    Origin,
    FieldOrigin,
    Settings,
    SourceMap,
    audit_lines,
    resolve_config,
    to_dict,
)

from .loaders import list_profiles
from .utils import field_spec_hint

__all__ = [  # noqa: RUF022
    "resolve_config",
    "FrozenConfig",
    "Settings",
    "Origin",
    "FieldOrigin",
    "SourceMap",
    "audit_lines",
    "to_dict",
    "list_profiles",
    "field_spec_hint",
]
