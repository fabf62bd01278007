"""Layered configuration resolution and typed settings binding.

``resolve`` merges ordered sources (files, environment variables, a secret
store) into one immutable :class:`UnifiedConfigSpace`; ``bind`` materialises
dataclass settings from a section of that space. ``read_settings`` is the
conventional startup routine wiring both with the default source chain.
"""

from __future__ import annotations

from .application.binding import bind
from .application.reload import ConfigReference
from .core import (
    DEFAULT_ENVIRONMENT,
    ENVIRONMENT_VARIABLE,
    default_sources,
    read_settings,
    resolve,
    select_environment,
)
from .domain.errors import (
    BindingTypeMismatch,
    ConfigError,
    InvalidFormat,
    NotFound,
    SourceMalformed,
    SourceUnavailable,
)
from .domain.sources import ConfigSource, SourceKind, environment_variables, file_source, secret_store
from .domain.space import EMPTY_SPACE, SourceInfo, UnifiedConfigSpace

__all__ = [
    "BindingTypeMismatch",
    "ConfigError",
    "ConfigReference",
    "ConfigSource",
    "DEFAULT_ENVIRONMENT",
    "EMPTY_SPACE",
    "ENVIRONMENT_VARIABLE",
    "InvalidFormat",
    "NotFound",
    "SourceInfo",
    "SourceKind",
    "SourceMalformed",
    "SourceUnavailable",
    "UnifiedConfigSpace",
    "bind",
    "default_sources",
    "environment_variables",
    "file_source",
    "read_settings",
    "resolve",
    "secret_store",
    "select_environment",
]
