from __future__ import annotations

import pytest

from lib_layered_settings.domain.sources import (
    ConfigSource,
    SourceKind,
    environment_variables,
    file_source,
    secret_store,
)


def test_file_source_expands_environment_placeholder() -> None:
    source = file_source("config/appsettings.{environment}.yaml", optional=False)
    assert source.kind is SourceKind.FILE
    assert source.optional is False
    assert source.suffix == ".yaml"
    assert source.expand_path("Production") == "config/appsettings.Production.yaml"


def test_environment_names_are_opaque_strings() -> None:
    source = file_source("appsettings.{environment}.json")
    assert source.expand_path("qa-eu-2") == "appsettings.qa-eu-2.json"


def test_file_source_rejects_unknown_suffix() -> None:
    with pytest.raises(ValueError):
        file_source("settings.ini")


def test_file_source_requires_path() -> None:
    with pytest.raises(ValueError):
        ConfigSource("base", SourceKind.FILE)


def test_secret_store_requires_app_id() -> None:
    with pytest.raises(ValueError):
        ConfigSource("secrets", SourceKind.SECRETS)


def test_factories_set_kinds() -> None:
    assert environment_variables("PATHOS_").prefix == "PATHOS_"
    assert environment_variables().kind is SourceKind.ENVIRONMENT
    store = secret_store("pathos", optional=False)
    assert (store.kind, store.app_id, store.optional) == (SourceKind.SECRETS, "pathos", False)


def test_sources_are_immutable() -> None:
    source = file_source("appsettings.json")
    with pytest.raises(AttributeError):
        source.optional = False  # type: ignore[misc]
