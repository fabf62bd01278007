"""The unified configuration space.

Purpose
-------
Hold the merged, flat, case-insensitive key space produced by the resolver.
The value object performs no I/O and is immutable after construction, so it
can be shared across request-handling workers without locks.

Contents
--------
* :class:`SourceInfo` – provenance for one effective key.
* :class:`UnifiedConfigSpace` – read-only ``Mapping`` from delimited keys to
  values with section, provenance and redacted export helpers.
* :func:`fold_key` – case folding used for every lookup.
* :data:`EMPTY_SPACE` – shared empty instance.

System Role
-----------
:func:`lib_layered_settings.core.resolve` builds exactly one instance at
startup; :func:`lib_layered_settings.application.binding.bind` reads from it.
"""

from __future__ import annotations

import json
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from datetime import date, datetime, time
from types import MappingProxyType
from typing import Any, Final, Iterator, Mapping, TypedDict

DEFAULT_DELIMITER: Final[str] = ":"
REDACTED: Final[str] = "***"
"""Placeholder emitted instead of secret-store values on every export path."""


class SourceInfo(TypedDict):
    """Describe which source supplied an effective key.

    Attributes
    ----------
    source:
        Declared name of the winning source.
    kind:
        ``"file"``, ``"environment"`` or ``"secrets"``.
    path:
        Concrete file path for file/secret sources, ``None`` for the environment.
    key:
        The key as spelled by the winning source.
    """

    source: str
    kind: str
    path: str | None
    key: str


def fold_key(key: str) -> str:
    """Return the case-insensitive lookup form of *key*.

    >>> fold_key("Db:ConnectionString")
    'db:connectionstring'
    """

    return key.casefold()


@dataclass(frozen=True, slots=True, repr=False)
class UnifiedConfigSpace(MappingABC[str, Any]):
    """Immutable flat mapping of configuration keys to effective values.

    Keys are compared case-insensitively; iteration yields the spelling used by
    the winning source. Values from the secret store are readable through
    ``[]``/``get`` but every serialising helper redacts them.

    Parameters
    ----------
    _values:
        Folded key -> value.
    _meta:
        Folded key -> :class:`SourceInfo`.
    delimiter:
        Separator between key segments.

    Examples
    --------
    >>> space = UnifiedConfigSpace(
    ...     {"db:name": "app", "db:port": 5432},
    ...     {
    ...         "db:name": {"source": "base", "kind": "file", "path": "appsettings.json", "key": "Db:Name"},
    ...         "db:port": {"source": "base", "kind": "file", "path": "appsettings.json", "key": "Db:Port"},
    ...     },
    ... )
    >>> space["DB:NAME"]
    'app'
    >>> list(space)
    ['Db:Name', 'Db:Port']
    >>> space.section("db").get("port")
    5432
    >>> space.children()
    ('Db',)
    """

    _values: Mapping[str, Any]
    _meta: Mapping[str, SourceInfo]
    delimiter: str = DEFAULT_DELIMITER

    def __post_init__(self) -> None:
        object.__setattr__(self, "_values", MappingProxyType(dict(self._values)))
        object.__setattr__(self, "_meta", MappingProxyType(dict(self._meta)))

    def __getitem__(self, key: str) -> Any:
        return self._values[fold_key(key)]

    def __iter__(self) -> Iterator[str]:
        return (self._display(folded) for folded in self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and fold_key(key) in self._values

    def __repr__(self) -> str:
        return f"UnifiedConfigSpace(keys={len(self._values)}, delimiter={self.delimiter!r})"

    def get(self, key: str, default: Any = None) -> Any:  # type: ignore[override]
        """Return the effective value for *key* or *default* when undefined."""

        return self._values.get(fold_key(key), default)

    def origin(self, key: str) -> SourceInfo | None:
        """Return provenance for *key* or ``None`` when no source defined it."""

        info = self._meta.get(fold_key(key))
        return dict(info) if info is not None else None  # type: ignore[return-value]

    def is_secret(self, key: str) -> bool:
        """Return ``True`` when *key* was supplied by a secret store."""

        info = self._meta.get(fold_key(key))
        return info is not None and info["kind"] == "secrets"

    def join(self, *segments: str) -> str:
        """Join non-empty *segments* with this space's delimiter.

        >>> EMPTY_SPACE.join("", "Db", "Name")
        'Db:Name'
        """

        return self.delimiter.join(segment for segment in segments if segment)

    def section(self, prefix: str | None) -> UnifiedConfigSpace:
        """Return a new space re-rooted at *prefix*.

        Keys below *prefix* keep their relative spelling; keys outside are
        dropped. An empty prefix returns ``self``.
        """

        if not prefix:
            return self
        folded_prefix = fold_key(prefix) + self.delimiter
        depth = len(prefix.split(self.delimiter))
        values: dict[str, Any] = {}
        meta: dict[str, SourceInfo] = {}
        for folded, value in self._values.items():
            if not folded.startswith(folded_prefix):
                continue
            relative_folded = folded[len(folded_prefix) :]
            relative_display = self.delimiter.join(self._display(folded).split(self.delimiter)[depth:])
            values[relative_folded] = value
            info = dict(self._meta.get(folded) or _anonymous_info(relative_display))
            info["key"] = relative_display
            meta[relative_folded] = info  # type: ignore[assignment]
        return UnifiedConfigSpace(values, meta, self.delimiter)

    def children(self, prefix: str | None = None) -> tuple[str, ...]:
        """Return the distinct immediate child segments below *prefix*.

        >>> space = UnifiedConfigSpace({"hosts:0": "a", "hosts:1": "b", "name": "x"}, {})
        >>> space.children("Hosts")
        ('0', '1')
        """

        view = self.section(prefix)
        seen: dict[str, str] = {}
        for display in view:
            head = display.split(view.delimiter, 1)[0]
            seen.setdefault(fold_key(head), head)
        return tuple(seen.values())

    def contains_section(self, prefix: str) -> bool:
        """Return ``True`` when *prefix* is a key or has keys below it."""

        folded = fold_key(prefix)
        below = folded + self.delimiter
        return any(key == folded or key.startswith(below) for key in self._values)

    def provenance(self) -> dict[str, SourceInfo]:
        """Return a copy of the provenance table keyed by display key."""

        return {self._display(folded): dict(info) for folded, info in self._meta.items()}  # type: ignore[misc]

    def as_dict(self, *, reveal_secrets: bool = False) -> dict[str, Any]:
        """Return a mutable flat copy; secret values are redacted unless asked.

        >>> space = UnifiedConfigSpace(
        ...     {"pw": "hunter2"},
        ...     {"pw": {"source": "secrets", "kind": "secrets", "path": None, "key": "Pw"}},
        ... )
        >>> space.as_dict()
        {'Pw': '***'}
        """

        return {
            self._display(folded): (REDACTED if self._is_secret_folded(folded) and not reveal_secrets else value)
            for folded, value in self._values.items()
        }

    def to_tree(self, *, reveal_secrets: bool = False) -> dict[str, Any]:
        """Return a nested view of the space, redacted unless asked otherwise.

        A key that is both a leaf and a parent keeps its leaf value under ``""``.

        >>> UnifiedConfigSpace({"a:b": 1, "a:c": 2}, {}).to_tree()
        {'a': {'b': 1, 'c': 2}}
        """

        tree: dict[str, Any] = {}
        for display, value in self.as_dict(reveal_secrets=reveal_secrets).items():
            *parents, leaf = display.split(self.delimiter)
            cursor = tree
            for part in parents:
                child = cursor.get(part)
                if not isinstance(child, dict):
                    child = {} if child is None else {"": child}
                    cursor[part] = child
                cursor = child
            if isinstance(cursor.get(leaf), dict):
                cursor[leaf][""] = value
            else:
                cursor[leaf] = value
        return tree

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise the redacted flat space to JSON.

        Dates and times parsed from YAML or TOML are written in ISO 8601.

        >>> UnifiedConfigSpace({"db:port": 5432}, {}).to_json()
        '{"db:port":5432}'
        >>> UnifiedConfigSpace({"release": date(2024, 1, 1)}, {}).to_json()
        '{"release":"2024-01-01"}'
        """

        return json.dumps(self.as_dict(), indent=indent, separators=(",", ":"), ensure_ascii=False, default=json_default)

    def _display(self, folded: str) -> str:
        info = self._meta.get(folded)
        return info["key"] if info is not None else folded

    def _is_secret_folded(self, folded: str) -> bool:
        info = self._meta.get(folded)
        return info is not None and info["kind"] == "secrets"


def _anonymous_info(key: str) -> SourceInfo:
    return {"source": "", "kind": "", "path": None, "key": key}


def json_default(value: object) -> str:
    """``json.dumps`` hook rendering dates and times as ISO 8601 strings.

    >>> json_default(time(8, 30))
    '08:30:00'
    """

    if isinstance(value, (date, datetime, time)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


EMPTY_SPACE: Final[UnifiedConfigSpace] = UnifiedConfigSpace({}, {})
"""Shared empty space; safe to reuse because the type is immutable."""
