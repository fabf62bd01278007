"""End-to-end resolution over real files, environment mappings and the secret store."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from pathlib import Path

import pytest

from lib_layered_settings import (
    SourceMalformed,
    SourceUnavailable,
    bind,
    default_sources,
    environment_variables,
    file_source,
    read_settings,
    resolve,
    secret_store,
    select_environment,
)
from lib_layered_settings.adapters.secrets.default import SECRETS_ROOT_ENV, DefaultSecretStore


@dataclass
class Feature:
    A: bool = True
    B: bool = True


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    _write(tmp_path / "appsettings.json", {"Db": {"Name": "app", "Port": 5432}, "Feature": {"A": True, "B": False}})
    _write(tmp_path / "appsettings.Test.json", {"Db": {"Name": "app_test"}, "Feature": {"A": False}})
    return tmp_path


def test_overlay_overrides_single_key_and_keeps_siblings(project: Path) -> None:
    space = resolve(
        [file_source("appsettings.json"), file_source("appsettings.{environment}.json")],
        "Test",
        base_dir=project,
        environ={},
    )
    assert space["Db:Name"] == "app_test"
    assert space["Db:Port"] == 5432
    assert bind(space, Feature, "Feature") == Feature(A=False, B=False)


def test_missing_optional_overlay_is_skipped(project: Path) -> None:
    space = resolve(
        [file_source("appsettings.json"), file_source("appsettings.{environment}.json")],
        "Production",
        base_dir=project,
    )
    assert space["Db:Name"] == "app"


def test_environment_overrides_files(project: Path) -> None:
    space = resolve(
        [file_source("appsettings.json"), environment_variables("PATHOS_")],
        "Test",
        base_dir=project,
        environ={"PATHOS_Db__Port": "6543"},
    )
    assert space["db:port"] == "6543"
    assert space.origin("Db:Port")["kind"] == "environment"


def test_required_missing_secret_store_names_source(tmp_path: Path) -> None:
    with pytest.raises(SourceUnavailable) as excinfo:
        resolve(
            [secret_store("pathos", optional=False)],
            "Production",
            base_dir=tmp_path,
            environ={SECRETS_ROOT_ENV: str(tmp_path / "secrets")},
        )
    assert excinfo.value.source == "secrets"


def test_required_missing_file_is_unavailable(tmp_path: Path) -> None:
    with pytest.raises(SourceUnavailable):
        resolve([file_source("appsettings.json", optional=False)], "Production", base_dir=tmp_path)


def test_malformed_optional_file_is_not_skipped(project: Path) -> None:
    (project / "appsettings.Test.json").write_text('{\n  "Db": \n', encoding="utf-8")
    with pytest.raises(SourceMalformed) as excinfo:
        resolve(
            [file_source("appsettings.json"), file_source("appsettings.{environment}.json")],
            "Test",
            base_dir=project,
        )
    assert excinfo.value.source == "appsettings.{environment}.json"
    assert excinfo.value.line is not None


def test_secrets_are_redacted_on_export(project: Path, tmp_path: Path) -> None:
    environ = {SECRETS_ROOT_ENV: str(tmp_path / "secrets")}
    DefaultSecretStore("pathos", environ=environ).set("SamplePassword", "hunter2")
    space = resolve([file_source("appsettings.json"), secret_store("pathos")], "Test", base_dir=project, environ=environ)
    assert space["SamplePassword"] == "hunter2"
    assert "hunter2" not in space.to_json()
    assert "hunter2" not in repr(space)


def test_resolution_is_deterministic(project: Path) -> None:
    sources = default_sources()
    first = resolve(sources, "Test", base_dir=project, environ={"Db__Name": "env"})
    second = resolve(sources, "Test", base_dir=project, environ={"Db__Name": "env"})
    assert first.as_dict() == second.as_dict()
    assert first.provenance() == second.provenance()


def test_custom_delimiter(project: Path) -> None:
    space = resolve([file_source("appsettings.json")], "Test", base_dir=project, delimiter=".")
    assert space["Db.Name"] == "app"


def test_empty_delimiter_rejected(project: Path) -> None:
    with pytest.raises(ValueError):
        resolve([file_source("appsettings.json")], "Test", base_dir=project, delimiter="")


def test_select_environment_prefers_variable(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("APP_ENVIRONMENT=Development\n", encoding="utf-8")
    assert select_environment(tmp_path, environ={"APP_ENVIRONMENT": "Staging"}) == "Staging"


def test_select_environment_reads_dotenv(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("APP_ENVIRONMENT=Development\n", encoding="utf-8")
    assert select_environment(tmp_path, environ={}) == "Development"


def test_select_environment_rejects_malformed_dotenv(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("garbage\n", encoding="utf-8")
    with pytest.raises(SourceMalformed) as excinfo:
        select_environment(tmp_path, environ={})
    assert excinfo.value.line == 1


def test_read_settings_runs_default_chain(project: Path, tmp_path: Path) -> None:
    environ = {"APP_ENVIRONMENT": "Test", SECRETS_ROOT_ENV: str(tmp_path / "secrets")}
    DefaultSecretStore("pathos", environ=environ).set("Db:Name", "from_secrets")
    space = read_settings(base_dir=project, app_id="pathos", environ=environ)
    assert space["Db:Name"] == "from_secrets"
    assert space.origin("Db:Name")["source"] == "secrets"
    assert space["Feature:A"] is False


@dataclass
class Build:
    release: str = ""
    released_on: date = date.min


def test_yaml_dates_export_and_bind(tmp_path: Path) -> None:
    (tmp_path / "settings.yaml").write_text("Release: 2024-01-01\nReleasedOn: 2024-02-03\n", encoding="utf-8")
    space = resolve([file_source("settings.yaml")], "Production", base_dir=tmp_path)
    assert json.loads(space.to_json()) == {"Release": "2024-01-01", "ReleasedOn": "2024-02-03"}
    build = bind(space, Build, field_map={"released_on": "ReleasedOn"})
    assert build == Build(release="2024-01-01", released_on=date(2024, 2, 3))


def test_toml_datetimes_export(tmp_path: Path) -> None:
    (tmp_path / "settings.toml").write_text("[Build]\nAt = 2024-01-01T08:30:00\nDaily = 07:15:00\n", encoding="utf-8")
    space = resolve([file_source("settings.toml")], "Production", base_dir=tmp_path)
    assert json.loads(space.to_json()) == {"Build:At": "2024-01-01T08:30:00", "Build:Daily": "07:15:00"}
