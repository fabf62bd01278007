"""Behaviour of the immutable unified configuration space."""

from __future__ import annotations

import json
from datetime import date, datetime, time

import pytest

from lib_layered_settings.application.merge import flatten, merge_layers
from lib_layered_settings.domain.space import EMPTY_SPACE, REDACTED, UnifiedConfigSpace


def _space(*layers: tuple[str, str, dict[str, object]], delimiter: str = ":") -> UnifiedConfigSpace:
    values, meta = merge_layers(
        (name, kind, flatten(payload, delimiter), f"{name}.json" if kind != "environment" else None)
        for name, kind, payload in layers
    )
    return UnifiedConfigSpace(values, meta, delimiter)


def test_lookup_is_case_insensitive() -> None:
    space = _space(("base", "file", {"Db": {"ConnectionString": "DataSource=app.db"}}))
    assert space["db:connectionstring"] == "DataSource=app.db"
    assert space.get("DB:CONNECTIONSTRING") == "DataSource=app.db"
    assert "Db:connectionString" in space
    assert space.get("Db:Missing", "fallback") == "fallback"


def test_iteration_uses_winning_spelling() -> None:
    space = _space(
        ("base", "file", {"Db": {"Name": "app"}}),
        ("environment", "environment", {"DB": {"NAME": "env"}}),
    )
    assert list(space) == ["DB:NAME"]
    assert len(space) == 1


def test_space_is_read_only() -> None:
    space = _space(("base", "file", {"a": 1}))
    with pytest.raises(TypeError):
        space._values["a"] = 2  # type: ignore[index]
    with pytest.raises(AttributeError):
        space.delimiter = "."  # type: ignore[misc]


def test_section_rebases_keys_and_keeps_provenance() -> None:
    space = _space(("base", "file", {"Logging": {"LogLevel": {"Default": "Info", "Pathos.Web": "Debug"}}}))
    section = space.section("logging:loglevel")
    assert dict(section.as_dict()) == {"Default": "Info", "Pathos.Web": "Debug"}
    assert section.origin("default") == {"source": "base", "kind": "file", "path": "base.json", "key": "Default"}
    assert space.section("") is space
    assert len(space.section("Nope")) == 0


def test_section_does_not_match_partial_segment() -> None:
    space = _space(("base", "file", {"Db": {"Name": "a"}, "DbExtra": {"Name": "b"}}))
    assert dict(space.section("Db")) == {"Name": "a"}


def test_children_and_contains_section() -> None:
    space = _space(("base", "file", {"Hosts": ["a", "b", "c"], "Name": "x"}))
    assert space.children() == ("Hosts", "Name")
    assert space.children("hosts") == ("0", "1", "2")
    assert space.contains_section("HOSTS")
    assert space.contains_section("Name")
    assert not space.contains_section("Host")


def test_secret_values_are_redacted_on_export() -> None:
    space = _space(
        ("base", "file", {"Db": {"User": "app"}}),
        ("secrets", "secrets", {"Db": {"Password": "hunter2"}}),
    )
    assert space["Db:Password"] == "hunter2"
    assert space.is_secret("db:password")
    assert not space.is_secret("Db:User")
    assert space.as_dict() == {"Db:User": "app", "Db:Password": REDACTED}
    assert space.as_dict(reveal_secrets=True)["Db:Password"] == "hunter2"
    assert "hunter2" not in space.to_json()
    assert "hunter2" not in json.dumps(space.to_tree())
    assert "hunter2" not in repr(space)


def test_to_tree_rebuilds_nesting() -> None:
    space = _space(("base", "file", {"Feature": {"A": True, "B": False}, "Hosts": ["x"]}))
    assert space.to_tree() == {"Feature": {"A": True, "B": False}, "Hosts": {"0": "x"}}


def test_to_tree_keeps_leaf_that_is_also_parent() -> None:
    space = _space(("environment", "environment", {"A": "1", "A:B": "2"}))
    assert space.to_tree() == {"A": {"": "1", "B": "2"}}


def test_alternative_delimiter() -> None:
    space = _space(("base", "file", {"Db": {"Name": "app"}}), delimiter=".")
    assert space["db.name"] == "app"
    assert space.join("Db", "Name") == "Db.Name"
    assert dict(space.section("Db")) == {"Name": "app"}


def test_equal_inputs_give_equal_spaces() -> None:
    layers = (("base", "file", {"a": {"b": [1, 2]}}), ("secrets", "secrets", {"c": "d"}))
    assert _space(*layers) == _space(*layers)


def test_empty_space() -> None:
    assert len(EMPTY_SPACE) == 0
    assert EMPTY_SPACE.children() == ()
    assert EMPTY_SPACE.to_json() == "{}"


def test_to_json_renders_dates_and_times_iso() -> None:
    space = UnifiedConfigSpace({"at": datetime(2024, 1, 1, 8, 30), "day": date(2024, 1, 1), "daily": time(7, 15)}, {})
    assert json.loads(space.to_json()) == {"at": "2024-01-01T08:30:00", "day": "2024-01-01", "daily": "07:15:00"}
