"""Structured configuration file loaders.

Purpose
-------
Convert on-disk JSON, TOML and YAML documents into mappings the flattener
understands. Each loader distinguishes absence (:class:`NotFound`) from
corruption (:class:`InvalidFormat`, carrying the parse position when the
parser reports one) so the resolver can apply the optional/required policy.

Contents
--------
* :class:`BaseFileLoader` – shared read and mapping validation helpers.
* :class:`JSONFileLoader` – canonical ``appsettings.json`` format.
* :class:`TOMLFileLoader` – ``tomllib`` based loader.
* :class:`YAMLFileLoader` – ``yaml.safe_load`` based loader.
* :data:`FILE_LOADERS` – suffix -> loader registry used by the resolver.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Final, Mapping

import yaml

from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error


class BaseFileLoader:
    """Common utilities shared by the structured file loaders.

    Why
    ----
    The resolver applies one optional/required policy to every format, so all
    loaders must report absence and corruption through the same two errors.
    """

    format_name = "file"

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when the file is missing."""

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Configuration file not found: {path}")
        payload = file_path.read_bytes()
        log_debug("config_file_read", path=path, format=self.format_name, size=len(payload))
        return payload

    def _invalid(self, path: str, exc: Exception, *, line: int | None = None, column: int | None = None) -> InvalidFormat:
        log_error("config_file_invalid", path=path, format=self.format_name, line=line, column=column)
        return InvalidFormat(f"Invalid {self.format_name.upper()} in {path}: {exc}", line=line, column=column)

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, object]:
        """Ensure *data* behaves like a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader._ensure_mapping([1, 2], path="demo")
        Traceback (most recent call last):
        ...
        lib_layered_settings.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        return data


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    format_name = "json"

    def load(self, path: str) -> Mapping[str, object]:
        """Return mapping extracted from JSON file at *path*.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> target = Path(tmp.name) / "appsettings.json"
        >>> _ = target.write_text('{"Db": {"Name": "app"}}', encoding="utf-8")
        >>> JSONFileLoader().load(str(target))["Db"]["Name"]
        'app'
        >>> tmp.cleanup()
        """

        raw = self._read(path)
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise self._invalid(path, exc, line=exc.lineno, column=exc.colno) from exc
        except UnicodeDecodeError as exc:
            raise self._invalid(path, exc) from exc
        result = self._ensure_mapping(data, path=path)
        log_debug("config_file_loaded", path=path, format=self.format_name)
        return result


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser."""

    format_name = "toml"

    def load(self, path: str) -> Mapping[str, object]:
        """Return mapping extracted from TOML file at *path*."""

        raw = self._read(path)
        try:
            data = tomllib.loads(raw.decode("utf-8"))
        except tomllib.TOMLDecodeError as exc:
            raise self._invalid(path, exc, line=getattr(exc, "lineno", None), column=getattr(exc, "colno", None)) from exc
        except UnicodeDecodeError as exc:
            raise self._invalid(path, exc) from exc
        result = self._ensure_mapping(data, path=path)
        log_debug("config_file_loaded", path=path, format=self.format_name)
        return result


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents; an empty document yields an empty mapping."""

    format_name = "yaml"

    def load(self, path: str) -> Mapping[str, object]:
        """Return mapping extracted from YAML file at *path*."""

        raw = self._read(path)
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            line = mark.line + 1 if mark is not None else None
            column = mark.column + 1 if mark is not None else None
            raise self._invalid(path, exc, line=line, column=column) from exc
        if data is None:
            data = {}
        result = self._ensure_mapping(data, path=path)
        log_debug("config_file_loaded", path=path, format=self.format_name)
        return result


FILE_LOADERS: Final[dict[str, BaseFileLoader]] = {
    ".json": JSONFileLoader(),
    ".toml": TOMLFileLoader(),
    ".yaml": YAMLFileLoader(),
    ".yml": YAMLFileLoader(),
}
"""Structured loaders keyed by lower-case file suffix."""
