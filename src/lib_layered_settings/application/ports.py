"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts adapters satisfy so the composition root can
load sources without depending on concrete implementations.

Contents
--------
* :class:`FileLoader` – parses a structured configuration file.
* :class:`EnvLoader` – materialises process environment variables as flat keys.
* :class:`SecretStore` – loads the per-application secret document.
* :class:`DotEnvLoader` – reads developer-only ``.env`` override files.

System Role
-----------
Adapters raise :class:`~lib_layered_settings.domain.errors.NotFound` for absence
and :class:`~lib_layered_settings.domain.errors.InvalidFormat` for parse
failures; the composition root decides what is fatal.
"""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class FileLoader(Protocol):
    """Parse a structured configuration file into a mapping."""

    def load(self, path: str) -> Mapping[str, object]:
        """Read *path*; raise ``NotFound`` when absent, ``InvalidFormat`` when unparsable."""


@runtime_checkable
class EnvLoader(Protocol):
    """Translate environment variables into flat delimited keys."""

    def load(self, prefix: str, delimiter: str = ":") -> Mapping[str, object]:
        """Return variables matching *prefix* with ``__`` mapped to *delimiter*."""


@runtime_checkable
class SecretStore(Protocol):
    """Load the secret document belonging to one application identifier."""

    @property
    def path(self) -> str:
        """Location of the secret document (never its contents)."""

    def load(self) -> Mapping[str, object]:
        """Return the stored secrets or raise ``NotFound`` when the location is absent."""


@runtime_checkable
class DotEnvLoader(Protocol):
    """Read a ``.env`` file found by upward search."""

    def load(self, start_dir: str | None = None) -> Mapping[str, str]:
        """Return the first parsed file discovered, or an empty mapping."""
