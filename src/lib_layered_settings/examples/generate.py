"""Example configuration asset generation helpers.

Purpose
-------
Produce a reproducible ``appsettings`` layout referenced in onboarding
material: a base file, one overlay per environment, and a ``.env.example``
pinning the developer environment. Secrets are intentionally absent; they
belong in the secret store.

Contents
    - ``DEFAULT_ENVIRONMENTS``: overlays written when none are requested.
    - ``ExampleSpec``: dataclass capturing a relative path and text content.
    - ``generate_examples``: public orchestration.
    - ``_build_specs`` / ``_write_examples``: template and filesystem helpers.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

DEFAULT_ENVIRONMENTS: tuple[str, ...] = ("Development", "Staging", "Production")


@dataclass(slots=True)
class ExampleSpec:
    """Describe a single example file to be written to disk."""

    relative_path: Path
    content: str


def generate_examples(
    destination: str | Path,
    *,
    environments: Sequence[str] | None = None,
    force: bool = False,
) -> list[Path]:
    """Write the example files under *destination* and return the paths written.

    Existing files are skipped unless *force* is set.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> generated = generate_examples(tmp.name, environments=['Development'])
    >>> sorted(path.name for path in generated)
    ['.env.example', 'appsettings.Development.json', 'appsettings.json']
    >>> generate_examples(tmp.name, environments=['Development'])
    []
    >>> tmp.cleanup()
    """

    dest = Path(destination)
    specs = _build_specs(tuple(environments) if environments else DEFAULT_ENVIRONMENTS)
    return _write_examples(dest, specs, force)


def _write_examples(destination: Path, specs: Iterator[ExampleSpec], force: bool) -> list[Path]:
    written: list[Path] = []
    for spec in specs:
        path = destination / spec.relative_path
        if path.exists() and not force:
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(spec.content, encoding="utf-8")
        written.append(path)
    return written


def _build_specs(environments: Sequence[str]) -> Iterator[ExampleSpec]:
    """Yield the base file, one overlay per environment, and ``.env.example``.

    >>> [spec.relative_path.name for spec in _build_specs(['Staging'])]
    ['appsettings.json', 'appsettings.Staging.json', '.env.example']
    """

    base = {
        "AppSettings": {"Environment": "Base"},
        "Auth0": {"Domain": "example.eu.auth0.com", "Identifier": "https://api.example.com"},
        "PathosConnectionString": "DataSource=Pathos.db",
        "Feature": {"A": True, "B": False},
    }
    yield ExampleSpec(Path("appsettings.json"), _dump(base))
    for name in environments:
        overlay = {"AppSettings": {"Environment": name}}
        if name.casefold() == "development":
            overlay["Feature"] = {"A": False}
        yield ExampleSpec(Path(f"appsettings.{name}.json"), _dump(overlay))
    yield ExampleSpec(
        Path(".env.example"),
        "# Copy to .env to select the environment for local runs\nAPP_ENVIRONMENT=Development\n",
    )


def _dump(payload: dict[str, object]) -> str:
    return json.dumps(payload, indent=2) + "\n"
