"""Per-application secret store adapter.

Purpose
-------
Locate, read and maintain the secret document belonging to one application
identifier. The document lives outside the versioned project tree, in the
user's configuration directory, so credentials never land in source control.

Locations
---------
* Linux/other POSIX: ``$XDG_CONFIG_HOME/lib_layered_settings/secrets/<app_id>/secrets.json``
  (``~/.config`` when ``XDG_CONFIG_HOME`` is unset).
* macOS: ``~/Library/Application Support/lib_layered_settings/secrets/<app_id>/secrets.json``.
* Windows: ``%APPDATA%\\lib_layered_settings\\secrets\\<app_id>\\secrets.json``.
* ``LIB_LAYERED_SETTINGS_SECRETS`` overrides the root on every platform.

The document uses the same nested-or-flat JSON structure as ``appsettings``
files. Writes flatten the document and store flat keys
(``{"Db:Password": "..."}``), readable by the owner only. Values are never
logged.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Mapping

from ...application.merge import flatten
from ...domain.errors import NotFound
from ...domain.space import fold_key
from ...observability import log_debug
from ..file_loaders.structured import JSONFileLoader

SECRETS_ROOT_ENV = "LIB_LAYERED_SETTINGS_SECRETS"
SECRETS_FILENAME = "secrets.json"
_PACKAGE_DIR = "lib_layered_settings"
_DIR_MODE = 0o700
_FILE_MODE = 0o600


class DefaultSecretStore:
    """Secret document for a single application identifier.

    Why
    ----
    Credentials stay out of the versioned ``appsettings`` files but resolve
    through the same flatten-and-merge pipeline, overriding every other source.

    Examples
    --------
    >>> store = DefaultSecretStore("pathos", environ={SECRETS_ROOT_ENV: "/srv/secrets"}, platform="linux")
    >>> Path(store.path).as_posix()
    '/srv/secrets/pathos/secrets.json'
    """

    def __init__(
        self,
        app_id: str,
        *,
        environ: Mapping[str, str] | None = None,
        platform: str | None = None,
    ) -> None:
        if not app_id or any(sep in app_id for sep in ("/", "\\")) or app_id in {".", ".."}:
            raise ValueError(f"Invalid secret store application id: {app_id!r}")
        self.app_id = app_id
        self._environ = os.environ if environ is None else environ
        self._platform = platform or sys.platform
        self._loader = JSONFileLoader()

    @property
    def path(self) -> str:
        """Absolute location of the secret document."""

        return str(self._root() / self.app_id / SECRETS_FILENAME)

    def load(self) -> Mapping[str, object]:
        """Return the stored secrets; raise :class:`NotFound` when absent."""

        data = self._loader.load(self.path)
        log_debug("secrets_loaded", source="secrets", kind="secrets", path=self.path, keys=len(data))
        return data

    def keys(self) -> list[str]:
        """Return the delimited secret key names (never values).

        Nested documents are reported by their flattened paths, so
        ``{"Db": {"Password": "..."}}`` lists ``Db:Password``.
        """

        return list(self._load_for_update())

    def set(self, key: str, value: object) -> None:
        """Store *value* under the delimited *key*.

        The existing document is flattened first, so an entry at the same key
        path is replaced whether it was stored flat, nested, or spelled with a
        different case. The document is written back flat.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> store = DefaultSecretStore("pathos", environ={SECRETS_ROOT_ENV: tmp.name})
        >>> store._write({"Db": {"Password": "old"}})
        >>> store.set("db:password", "new")
        >>> dict(store.load())
        {'db:password': 'new'}
        >>> tmp.cleanup()
        """

        data = self._load_for_update()
        for existing in _matching(data, key):
            del data[existing]
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> bool:
        """Delete the entry at *key* (case-insensitive, flat or nested).

        Returns ``True`` when something was removed.
        """

        data = self._load_for_update()
        matches = _matching(data, key)
        for existing in matches:
            del data[existing]
        if matches:
            self._write(data)
        return bool(matches)

    def clear(self) -> None:
        """Remove every secret while keeping the document in place."""

        self._write({})

    def _load_for_update(self) -> dict[str, object]:
        try:
            return flatten(self.load())
        except NotFound:
            return {}

    def _write(self, data: Mapping[str, object]) -> None:
        """Atomically replace the document; only the owner may read it.

        The application directory is created ``0o700`` and the document is
        written ``0o600`` before it is moved into place.
        """

        target = Path(self.path)
        target.parent.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
        tmp = target.with_suffix(".json.tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(json.dumps(dict(data), indent=2, ensure_ascii=False) + "\n")
        os.chmod(tmp, _FILE_MODE)
        os.replace(tmp, target)
        log_debug("secrets_written", source="secrets", kind="secrets", path=str(target), keys=len(data))

    def _root(self) -> Path:
        override = self._environ.get(SECRETS_ROOT_ENV)
        if override:
            return Path(override)
        if self._platform.startswith("win"):
            appdata = self._environ.get("APPDATA")
            base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
        elif self._platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            xdg = self._environ.get("XDG_CONFIG_HOME")
            base = Path(xdg) if xdg else Path.home() / ".config"
        return base / _PACKAGE_DIR / "secrets"


def _matching(data: Mapping[str, object], key: str) -> list[str]:
    folded = fold_key(key)
    return [existing for existing in data if fold_key(existing) == folded]


__all__ = ["DefaultSecretStore", "SECRETS_ROOT_ENV"]
