"""Typed binder materialising dataclass settings from a configuration space.

Purpose
-------
Populate a strongly typed settings object (a dataclass "shape") from a
subsection of a :class:`~lib_layered_settings.domain.space.UnifiedConfigSpace`.
Binding is a pure read: the result is a fresh snapshot with no link back to
the space.

Contents
    - ``bind``: public entry point.
    - ``_Binder``: walks the shape's fields, converting raw values.
    - ``_coerce_scalar``: scalar conversion rules shared by all field kinds.

Rules
-----
* Field lookups are case-insensitive: ``port`` matches ``Port``.
* ``field_map`` renames fields explicitly (``{"sample_password": "SamplePassword"}``);
  dotted attribute paths (``"auth.client_id"``) reach nested shapes.
* Missing keys keep the field's default, or the zero value of its type when
  no default is declared.
* Keys the shape does not declare are ignored.
* A value that cannot be converted raises :class:`BindingTypeMismatch`, the
  only failure mode.
"""

from __future__ import annotations

import re
import types
from collections.abc import Mapping as MappingABC
from collections.abc import Sequence as SequenceABC
from dataclasses import MISSING, fields, is_dataclass
from datetime import date, datetime, time
from enum import Enum
from pathlib import PurePath
from typing import Any, Mapping, TypeVar, Union, get_args, get_origin, get_type_hints

from ..domain.errors import BindingTypeMismatch
from ..domain.space import UnifiedConfigSpace
from ..observability import log_debug

T = TypeVar("T")

_INTEGER = re.compile(r"[+-]?\d+")
_SEQUENCE_TYPES = (list, set, frozenset, SequenceABC)
_MAPPING_TYPES = (dict, MappingABC)
_ABSENT: tuple[bool, Any] = (False, None)


def bind(
    space: UnifiedConfigSpace,
    shape: type[T],
    section: str | None = None,
    *,
    field_map: Mapping[str, str] | None = None,
) -> T:
    """Return a new *shape* instance bound from *section* of *space*.

    Parameters
    ----------
    space:
        Resolved configuration space (never modified).
    shape:
        Dataclass type describing the settings.
    section:
        Key prefix to bind from. ``None`` or ``""`` binds from the root.
    field_map:
        Explicit ``attribute path -> key segment`` renames.

    Raises
    ------
    BindingTypeMismatch
        When a present value cannot convert to its field's declared type.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Db:
    ...     name: str = "default"
    ...     port: int = 5432
    >>> space = UnifiedConfigSpace({"db:name": "app", "db:port": "6543"}, {})
    >>> bind(space, Db, "Db")
    Db(name='app', port=6543)
    >>> bind(space, Db, "Missing")
    Db(name='default', port=5432)
    """

    if not (isinstance(shape, type) and is_dataclass(shape)):
        raise TypeError(f"Settings shape must be a dataclass type, got {shape!r}")
    binder = _Binder(space, section or "", dict(field_map or {}))
    try:
        result = binder.bind_shape(shape, "", "")
    except BindingTypeMismatch as exc:
        log_debug("binding_type_mismatch", shape=shape.__name__, section=section, key=exc.key, expected=exc.expected)
        raise
    log_debug("settings_bound", shape=shape.__name__, section=section, keys=len(binder.view))
    return result


class _Binder:
    """Stateful walker over one bind call; holds the sectioned view."""

    def __init__(self, space: UnifiedConfigSpace, section: str, field_map: dict[str, str]) -> None:
        self.space = space
        self.section = section
        self.view = space.section(section)
        self.field_map = field_map

    def bind_shape(self, shape: type[Any], prefix: str, attr_path: str) -> Any:
        hints = get_type_hints(shape)
        kwargs: dict[str, Any] = {}
        for field in fields(shape):
            if not field.init:
                continue
            attr = f"{attr_path}.{field.name}" if attr_path else field.name
            key = self.view.join(prefix, self.field_map.get(attr, field.name))
            annotation = hints.get(field.name, Any)
            present, value = self.convert(annotation, key, attr)
            if present:
                kwargs[field.name] = value
            elif field.default is MISSING and field.default_factory is MISSING:
                kwargs[field.name] = self.zero(annotation, key, attr)
        return shape(**kwargs)

    def convert(self, annotation: Any, key: str, attr: str) -> tuple[bool, Any]:
        """Return ``(present, value)`` for *key* converted to *annotation*."""

        origin = get_origin(annotation)
        args = get_args(annotation)

        if origin is Union or origin is types.UnionType:
            return self._convert_union(args, key, attr)
        if isinstance(annotation, type) and is_dataclass(annotation):
            if not self.view.contains_section(key):
                return _ABSENT
            return True, self.bind_shape(annotation, key, attr)
        if annotation in _SEQUENCE_TYPES or origin in _SEQUENCE_TYPES:
            element = args[0] if args else Any
            container = origin or annotation
            return self._convert_sequence(list if container is SequenceABC else container, element, key, attr)
        if annotation is tuple or origin is tuple:
            return self._convert_tuple(args, key, attr)
        if annotation in _MAPPING_TYPES or origin in _MAPPING_TYPES:
            value_type = args[1] if len(args) == 2 else Any
            return self._convert_mapping(value_type, key, attr)
        if annotation is Any or annotation is object:
            return self._convert_any(key)

        raw = self.view.get(key)
        if raw is None:
            return _ABSENT
        return True, _coerce_scalar(annotation, raw, self._full_key(key))

    def zero(self, annotation: Any, key: str, attr: str) -> Any:
        """Return the zero value used when a field without default is absent."""

        origin = get_origin(annotation)
        args = get_args(annotation)
        if origin is Union or origin is types.UnionType:
            if type(None) in args:
                return None
            return self.zero(args[0], key, attr)
        if isinstance(annotation, type) and is_dataclass(annotation):
            return self.bind_shape(annotation, key, attr)
        if origin is tuple and args and args[-1] is not Ellipsis:
            return tuple(self.zero(arg, self.view.join(key, str(i)), attr) for i, arg in enumerate(args))
        container = origin or annotation
        if container is MappingABC or container is SequenceABC:
            return {} if container is MappingABC else []
        if container in (*_SEQUENCE_TYPES, tuple, dict):
            return container()
        if isinstance(annotation, type) and issubclass(annotation, Enum):
            return next(iter(annotation))
        if annotation in (bool, int, float, str):
            return annotation()
        return None

    def _convert_union(self, args: tuple[Any, ...], key: str, attr: str) -> tuple[bool, Any]:
        candidates = [arg for arg in args if arg is not type(None)]
        if len(candidates) == 1:
            return self.convert(candidates[0], key, attr)
        failure: BindingTypeMismatch | None = None
        for candidate in candidates:
            try:
                return self.convert(candidate, key, attr)
            except BindingTypeMismatch as exc:
                failure = exc
        if failure is not None:
            raise BindingTypeMismatch(failure.key, " | ".join(_type_name(arg) for arg in candidates))
        return _ABSENT

    def _convert_sequence(self, container: type, element: Any, key: str, attr: str) -> tuple[bool, Any]:
        indices = self._indices(key)
        if not indices:
            if self.view.get(key) is not None:
                raise BindingTypeMismatch(self._full_key(key), _type_name(container))
            return _ABSENT
        items = []
        for index in indices:
            present, value = self.convert(element, self.view.join(key, index), f"{attr}[{index}]")
            if present:
                items.append(value)
        try:
            return True, container(items)
        except TypeError as exc:
            raise BindingTypeMismatch(self._full_key(key), _type_name(container)) from exc

    def _convert_tuple(self, args: tuple[Any, ...], key: str, attr: str) -> tuple[bool, Any]:
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            present, value = self._convert_sequence(list, args[0] if args else Any, key, attr)
            return (True, tuple(value)) if present else _ABSENT
        if not self.view.contains_section(key):
            return _ABSENT
        items = []
        for index, element in enumerate(args):
            child = self.view.join(key, str(index))
            present, value = self.convert(element, child, f"{attr}[{index}]")
            items.append(value if present else self.zero(element, child, attr))
        return True, tuple(items)

    def _convert_mapping(self, value_type: Any, key: str, attr: str) -> tuple[bool, Any]:
        names = self.view.children(key)
        if not names:
            return _ABSENT
        result: dict[str, Any] = {}
        for name in names:
            present, value = self.convert(value_type, self.view.join(key, name), f"{attr}[{name}]")
            if present:
                result[name] = value
        return True, result

    def _convert_any(self, key: str) -> tuple[bool, Any]:
        raw = self.view.get(key)
        if raw is not None:
            return True, raw
        if self.view.contains_section(key):
            return True, self.view.section(key).to_tree(reveal_secrets=True)
        return _ABSENT

    def _indices(self, key: str) -> list[str]:
        return sorted((name for name in self.view.children(key) if name.isdigit()), key=int)

    def _full_key(self, key: str) -> str:
        info = self.view.origin(key)
        relative = info["key"] if info is not None else key
        return self.space.join(self.section, relative)


def _coerce_scalar(target: Any, raw: Any, key: str) -> Any:
    """Convert *raw* to *target* or raise :class:`BindingTypeMismatch` naming *key*.

    >>> _coerce_scalar(bool, "TRUE", "Feature:A")
    True
    >>> _coerce_scalar(str, date(2024, 1, 1), "Release")
    '2024-01-01'
    >>> _coerce_scalar(int, "not-a-number", "Port")
    Traceback (most recent call last):
    ...
    lib_layered_settings.domain.errors.BindingTypeMismatch: Cannot bind configuration key 'Port' to type int
    """

    if not isinstance(target, type):
        raise TypeError(f"Unsupported settings field type for key {key!r}: {target!r}")
    if target is bool:
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str) and raw.strip().lower() in {"true", "false"}:
            return raw.strip().lower() == "true"
    elif target is int:
        if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        if isinstance(raw, str) and _INTEGER.fullmatch(raw.strip()):
            return int(raw.strip())
    elif target is float:
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return float(raw)
        if isinstance(raw, str):
            try:
                return float(raw.strip())
            except ValueError:
                pass
    elif target is str:
        if isinstance(raw, str):
            return raw
        if isinstance(raw, bool):
            return "true" if raw else "false"
        if isinstance(raw, (int, float)):
            return str(raw)
        if isinstance(raw, (date, datetime, time)):
            return raw.isoformat()
    elif issubclass(target, Enum):
        member = _enum_member(target, raw)
        if member is not None:
            return member
    elif issubclass(target, PurePath):
        if isinstance(raw, str):
            return target(raw)
    elif target in (datetime, date, time):
        if isinstance(raw, target):
            return raw
        if isinstance(raw, str):
            try:
                return target.fromisoformat(raw.strip())
            except ValueError:
                pass
    elif isinstance(raw, target):
        return raw
    else:
        try:
            return target(raw)
        except (TypeError, ValueError, ArithmeticError):
            pass
    raise BindingTypeMismatch(key, _type_name(target))


def _enum_member(target: type[Enum], raw: Any) -> Enum | None:
    if isinstance(raw, str):
        folded = raw.strip().casefold()
        for member in target:
            if member.name.casefold() == folded:
                return member
        for member in target:
            if isinstance(member.value, str) and member.value.casefold() == folded:
                return member
            if isinstance(member.value, int) and _INTEGER.fullmatch(raw.strip()) and member.value == int(raw):
                return member
        return None
    try:
        return target(raw)
    except ValueError:
        return None


def _type_name(annotation: Any) -> str:
    return getattr(annotation, "__name__", None) or repr(annotation)
