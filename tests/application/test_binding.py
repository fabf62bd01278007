"""Typed binder behaviour: conversion, defaults, renames and isolation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_layered_settings.application.binding import bind
from lib_layered_settings.application.merge import flatten, merge_layers
from lib_layered_settings.domain.errors import BindingTypeMismatch
from lib_layered_settings.domain.space import EMPTY_SPACE, UnifiedConfigSpace


def space_of(payload: dict[str, object], *, kind: str = "file") -> UnifiedConfigSpace:
    values, meta = merge_layers([("test", kind, flatten(payload), None)])
    return UnifiedConfigSpace(values, meta)


class LogLevel(Enum):
    DEBUG = 10
    INFO = 20


@dataclass
class Server:
    host: str = "localhost"
    port: int = 80
    secure: bool = False


@dataclass
class Database:
    name: str
    port: int
    timeout: float
    enabled: bool
    tags: list[str]
    level: LogLevel
    replica: Optional[str]


@dataclass
class Service:
    name: str = "svc"
    server: Server = field(default_factory=Server)
    hosts: list[str] = field(default_factory=list)
    weights: dict[str, int] = field(default_factory=dict)
    servers: list[Server] = field(default_factory=list)
    pair: tuple[int, int] = (0, 0)
    extra: Any = None
    data_dir: Path = Path(".")
    level: LogLevel = LogLevel.INFO
    ratio: float | None = None


@dataclass
class Secrets:
    sample_password: str = ""


@dataclass
class Outer:
    auth: Secrets = field(default_factory=Secrets)


@dataclass
class Port:
    Port: int = 0


def test_binds_section_with_case_insensitive_fields() -> None:
    space = space_of({"Service": {"Name": "api", "Server": {"Host": "0.0.0.0", "PORT": "8080", "Secure": "true"}}})
    service = bind(space, Service, "service")
    assert service.name == "api"
    assert service.server == Server(host="0.0.0.0", port=8080, secure=True)


def test_missing_fields_keep_declared_defaults() -> None:
    service = bind(space_of({"Service": {"Name": "api"}}), Service, "Service")
    assert service.server == Server()
    assert service.hosts == []
    assert service.level is LogLevel.INFO
    assert service.ratio is None


def test_fields_without_default_get_zero_values() -> None:
    database = bind(EMPTY_SPACE, Database)
    assert database == Database(
        name="", port=0, timeout=0.0, enabled=False, tags=[], level=LogLevel.DEBUG, replica=None
    )


def test_collections_from_indexed_and_named_children() -> None:
    space = space_of(
        {
            "Hosts": ["a", "b"],
            "Weights": {"a": "3", "b": 4},
            "Servers": [{"Host": "x", "Port": 1}, {"Host": "y"}],
            "Pair": [7, "8"],
        }
    )
    service = bind(space, Service)
    assert service.hosts == ["a", "b"]
    assert service.weights == {"a": 3, "b": 4}
    assert service.servers == [Server(host="x", port=1), Server(host="y")]
    assert service.pair == (7, 8)


def test_list_indices_sort_numerically() -> None:
    space = space_of({"Hosts": {str(i): f"h{i}" for i in range(12)}})
    assert bind(space, Service).hosts == [f"h{i}" for i in range(12)]


def test_any_enum_path_and_optional_float() -> None:
    space = space_of(
        {"Extra": {"Nested": [1, 2]}, "DataDir": "/var/lib/pathos", "Level": "debug", "Ratio": "0.25"}
    )
    service = bind(space, Service, field_map={"data_dir": "DataDir"})
    assert service.extra == {"Nested": {"0": 1, "1": 2}}
    assert service.data_dir == Path("/var/lib/pathos")
    assert service.level is LogLevel.DEBUG
    assert service.ratio == 0.25


def test_enum_by_value() -> None:
    assert bind(space_of({"Level": "20"}), Service).level is LogLevel.INFO


def test_field_map_renames_top_level_and_nested_fields() -> None:
    space = space_of({"SamplePassword": "pw", "Auth": {"ClientSecret": "s3"}})
    assert bind(space, Secrets, field_map={"sample_password": "SamplePassword"}).sample_password == "pw"
    outer = bind(space, Outer, field_map={"auth.sample_password": "ClientSecret"})
    assert outer.auth.sample_password == "s3"


def test_unmapped_snake_case_field_is_not_guessed() -> None:
    assert bind(space_of({"SamplePassword": "pw"}), Secrets).sample_password == ""


def test_type_mismatch_names_key_and_type() -> None:
    with pytest.raises(BindingTypeMismatch) as excinfo:
        bind(space_of({"Port": "not-a-number"}), Port)
    assert excinfo.value.key == "Port"
    assert excinfo.value.expected == "int"


def test_type_mismatch_reports_full_sectioned_key() -> None:
    space = space_of({"Service": {"Servers": [{"Port": "x"}]}})
    with pytest.raises(BindingTypeMismatch) as excinfo:
        bind(space, Service, "Service")
    assert excinfo.value.key == "Service:Servers:0:Port"


@pytest.mark.parametrize(
    ("payload", "shape"),
    [
        ({"Port": True}, Port),
        ({"Port": 1.5}, Port),
        ({"Secure": "yes-please"}, Server),
        ({"Hosts": "a,b"}, Service),
        ({"Level": "TRACE"}, Service),
        ({"Ratio": "a quarter"}, Service),
    ],
)
def test_unconvertible_values_raise(payload: dict[str, object], shape: type) -> None:
    with pytest.raises(BindingTypeMismatch):
        bind(space_of(payload), shape)


def test_mismatch_message_never_contains_secret_value() -> None:
    space = space_of({"Port": "hunter2"}, kind="secrets")
    with pytest.raises(BindingTypeMismatch) as excinfo:
        bind(space, Port)
    assert "hunter2" not in str(excinfo.value)


def test_scalars_convert_to_strings() -> None:
    server = bind(space_of({"Host": 42}), Server)
    assert server.host == "42"


def test_null_counts_as_absent() -> None:
    assert bind(space_of({"Port": None}), Server).port == 80


def test_bound_value_is_independent_snapshot() -> None:
    space = space_of({"Hosts": ["a"]})
    first = bind(space, Service)
    first.hosts.append("mutated")
    second = bind(space, Service)
    assert second.hosts == ["a"]
    assert space["Hosts:0"] == "a"


def test_rejects_non_dataclass_shapes() -> None:
    with pytest.raises(TypeError):
        bind(EMPTY_SPACE, dict)  # type: ignore[arg-type]


UNRELATED = st.dictionaries(
    st.text(alphabet="xyz", min_size=1, max_size=4).map(lambda name: f"Unrelated{name}"),
    st.one_of(st.integers(), st.text(max_size=4), st.booleans()),
    max_size=5,
)


@given(UNRELATED)
def test_unknown_keys_are_ignored(extra) -> None:
    base = {"Service": {"Name": "api", "Server": {"Port": 9000}}}
    with_extra = {**base, **extra, "Service": {**base["Service"], **extra}}
    assert bind(space_of(with_extra), Service, "Service") == bind(space_of(base), Service, "Service")


@given(UNRELATED)
def test_space_without_shape_fields_binds_defaults(extra) -> None:
    assert bind(space_of(extra), Server) == Server()


def test_dates_bind_to_string_fields_as_iso() -> None:
    space = space_of({"Host": date(2024, 1, 1)})
    assert bind(space, Server).host == "2024-01-01"
