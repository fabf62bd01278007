"""Application-layer flatten and merge policy.

Purpose
-------
Turn native source payloads into flat delimited keys and fold a sequence of
flattened layers into one effective key space with provenance. The module is
free of I/O so alternative composition roots can reuse it.

Contents
    - ``flatten``: nested mapping/array payload -> ``{key: value}``.
    - ``merge_layers``: public entry point applying precedence per key.
    - ``Layer``: tuple alias describing one flattened source.

System Role
-----------
:mod:`lib_layered_settings.core` flattens each source completely before calling
:func:`merge_layers`, so a source is either applied in full or not at all.
Later layers override earlier ones key by key; siblings from earlier layers
survive.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Iterable, Optional, Tuple

from ..domain.errors import InvalidFormat
from ..domain.space import DEFAULT_DELIMITER, SourceInfo, fold_key

Layer = Tuple[str, str, Mapping[str, object], Optional[str]]
"""``(source_name, kind, flat_payload, path)`` ordered lowest precedence first."""


def flatten(payload: Mapping[str, object], delimiter: str = DEFAULT_DELIMITER) -> dict[str, object]:
    """Flatten *payload* into delimited keys.

    Nested mappings concatenate their path segments; sequences contribute a
    numeric index segment per element. Empty containers produce no keys.

    Raises
    ------
    InvalidFormat
        When two entries of the same payload resolve to one key path, either
        because they differ only by case or because a flat ``"Db:Name"`` key
        repeats a nested ``{"Db": {"Name": ...}}`` entry.

    Examples
    --------
    >>> flatten({"Db": {"Name": "app", "Hosts": ["a", "b"]}})
    {'Db:Name': 'app', 'Db:Hosts:0': 'a', 'Db:Hosts:1': 'b'}
    >>> flatten({"a": {"b": 1}, "A": {"B": 2}})
    Traceback (most recent call last):
    ...
    lib_layered_settings.domain.errors.InvalidFormat: Key path 'A:B' collides with 'a:b'
    """

    flat: dict[str, object] = {}
    seen: dict[str, str] = {}
    for key, value in _walk(payload, (), delimiter):
        folded = fold_key(key)
        if folded in seen:
            raise InvalidFormat(f"Key path {key!r} collides with {seen[folded]!r}")
        seen[folded] = key
        flat[key] = value
    return flat


def _walk(node: object, segments: tuple[str, ...], delimiter: str) -> Iterable[tuple[str, object]]:
    if isinstance(node, Mapping):
        for key, value in node.items():
            yield from _walk(value, (*segments, str(key)), delimiter)
    elif isinstance(node, (list, tuple)):
        for index, value in enumerate(node):
            yield from _walk(value, (*segments, str(index)), delimiter)
    elif segments:
        yield delimiter.join(segments), node


def merge_layers(layers: Iterable[Layer]) -> tuple[dict[str, object], dict[str, SourceInfo]]:
    """Merge flattened *layers* honouring precedence and recording provenance.

    Parameters
    ----------
    layers:
        Iterable of ``(source_name, kind, flat_payload, path)`` ordered from
        lowest to highest precedence.

    Returns
    -------
    tuple[dict[str, object], dict[str, SourceInfo]]
        ``(values, provenance)`` keyed by folded key.

    Examples
    --------
    >>> values, meta = merge_layers([
    ...     ("base", "file", {"Feature:A": True, "Feature:B": False}, "appsettings.json"),
    ...     ("overlay", "file", {"feature:a": False}, "appsettings.Test.json"),
    ... ])
    >>> values
    {'feature:a': False, 'feature:b': False}
    >>> meta["feature:a"]["source"], meta["feature:b"]["source"]
    ('overlay', 'base')
    """

    values: dict[str, object] = {}
    meta: dict[str, SourceInfo] = {}
    for name, kind, payload, path in layers:
        for key, value in payload.items():
            folded = fold_key(key)
            values[folded] = value
            meta[folded] = {"source": name, "kind": kind, "path": path, "key": key}
    return values, meta
