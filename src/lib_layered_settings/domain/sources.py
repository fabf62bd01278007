"""Declarations of configuration sources.

Purpose
-------
Describe *what* the resolver should load without performing any I/O. A
:class:`ConfigSource` is an immutable declaration; adapters turn it into data at
resolve time.

Contents
--------
* :class:`SourceKind` – the three supported origins.
* :class:`ConfigSource` – frozen declaration consumed by
  :func:`lib_layered_settings.core.resolve`.
* :func:`file_source` / :func:`environment_variables` / :func:`secret_store` –
  convenience constructors used by startup code.
* :data:`ENVIRONMENT_PLACEHOLDER` – token expanded inside file path templates.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Final

ENVIRONMENT_PLACEHOLDER: Final[str] = "{environment}"
"""Token replaced by the active environment name inside file path templates."""

FILE_SUFFIXES: Final[tuple[str, ...]] = (".json", ".toml", ".yaml", ".yml")


class SourceKind(str, Enum):
    """Origin of a configuration source."""

    FILE = "file"
    ENVIRONMENT = "environment"
    SECRETS = "secrets"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """Immutable declaration of one configuration source.

    Attributes
    ----------
    name:
        Human-readable identifier used in provenance and error messages.
    kind:
        :class:`SourceKind` of the source.
    optional:
        When ``True`` an absent source is skipped; when ``False`` absence fails
        resolution with :class:`~lib_layered_settings.domain.errors.SourceUnavailable`.
    path:
        File path template (``kind == FILE``). May embed ``{environment}``.
        Relative paths are anchored at the resolver's base directory.
    prefix:
        Environment variable prefix (``kind == ENVIRONMENT``); stripped from
        names before they become keys.
    app_id:
        Opaque application identifier selecting the secret store location
        (``kind == SECRETS``).

    Examples
    --------
    >>> src = ConfigSource("overlay", SourceKind.FILE, path="appsettings.{environment}.json")
    >>> src.expand_path("Staging")
    'appsettings.Staging.json'
    >>> ConfigSource("bad", SourceKind.FILE, path="settings.ini")
    Traceback (most recent call last):
    ...
    ValueError: Unsupported configuration file suffix for source 'bad': '.ini'
    """

    name: str
    kind: SourceKind
    optional: bool = True
    path: str | None = None
    prefix: str = ""
    app_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind is SourceKind.FILE:
            if not self.path:
                raise ValueError(f"File source {self.name!r} requires a path")
            suffix = PurePath(self.path).suffix.lower()
            if suffix not in FILE_SUFFIXES:
                raise ValueError(f"Unsupported configuration file suffix for source {self.name!r}: {suffix!r}")
        if self.kind is SourceKind.SECRETS and not self.app_id:
            raise ValueError(f"Secret source {self.name!r} requires an app_id")

    @property
    def suffix(self) -> str:
        """Return the lower-case file suffix (``""`` for non-file sources)."""

        return PurePath(self.path).suffix.lower() if self.path else ""

    def expand_path(self, environment_name: str) -> str:
        """Return the path template with ``{environment}`` substituted."""

        if self.path is None:
            raise ValueError(f"Source {self.name!r} has no path")
        return self.path.replace(ENVIRONMENT_PLACEHOLDER, environment_name)


def file_source(path: str, *, optional: bool = True, name: str | None = None) -> ConfigSource:
    """Declare a structured file source (JSON/TOML/YAML chosen by suffix).

    >>> file_source("appsettings.json").name
    'appsettings.json'
    """

    return ConfigSource(name or path, SourceKind.FILE, optional=optional, path=path)


def environment_variables(prefix: str = "", *, name: str = "environment") -> ConfigSource:
    """Declare the process environment as a source, filtered by *prefix*."""

    return ConfigSource(name, SourceKind.ENVIRONMENT, optional=True, prefix=prefix)


def secret_store(app_id: str, *, optional: bool = True, name: str = "secrets") -> ConfigSource:
    """Declare the per-application secret store identified by *app_id*."""

    return ConfigSource(name, SourceKind.SECRETS, optional=optional, app_id=app_id)
