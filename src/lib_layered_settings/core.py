"""Composition root for ``lib_layered_settings``.

Purpose
-------
Provide the entry points that orchestrate environment selection, source
loading, flattening and merge precedence. This is the canonical place to adjust
the default source chain or to wire new adapters.

Contents
--------
* :func:`resolve` – source chain resolver returning a :class:`UnifiedConfigSpace`.
* :func:`select_environment` – pick the active environment name at startup.
* :func:`default_sources` – the conventional base/overlay/env/secrets chain.
* :func:`read_settings` – startup routine combining the three above.

System Role
-----------
Adapters report absence (:class:`NotFound`) and corruption
(:class:`InvalidFormat`); this module applies the optional/required policy and
translates them into :class:`SourceUnavailable` / :class:`SourceMalformed`
naming the offending source. Each source is loaded and flattened completely
before it is merged, so no source is ever partially applied.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Mapping, Sequence

from .adapters.dotenv.default import DefaultDotEnvLoader
from .adapters.env.default import DefaultEnvLoader
from .adapters.file_loaders.structured import FILE_LOADERS
from .adapters.secrets.default import DefaultSecretStore
from .application.merge import Layer, flatten, merge_layers
from .domain.errors import InvalidFormat, NotFound, SourceMalformed, SourceUnavailable
from .domain.sources import ConfigSource, SourceKind, environment_variables, file_source, secret_store
from .domain.space import DEFAULT_DELIMITER, UnifiedConfigSpace
from .observability import bind_trace_id, log_debug, log_error, log_info, make_event

ENVIRONMENT_VARIABLE = "APP_ENVIRONMENT"
"""Process variable naming the active environment (``Development``, ``Staging``...)."""

DEFAULT_ENVIRONMENT = "Production"
"""Environment assumed when neither the variable nor a ``.env`` override names one."""


def resolve(
    sources: Sequence[ConfigSource],
    environment_name: str,
    *,
    base_dir: str | Path | None = None,
    delimiter: str = DEFAULT_DELIMITER,
    environ: Mapping[str, str] | None = None,
) -> UnifiedConfigSpace:
    """Load *sources* in order and merge them into one configuration space.

    Parameters
    ----------
    sources:
        Declarations ordered from lowest to highest precedence.
    environment_name:
        Opaque environment label substituted into ``{environment}`` path
        templates.
    base_dir:
        Directory anchoring relative file paths (defaults to the working
        directory).
    delimiter:
        Key segment separator for the resulting space.
    environ:
        Environment mapping for the environment and secret sources (defaults to
        :data:`os.environ`).

    Raises
    ------
    SourceUnavailable
        A required source is absent.
    SourceMalformed
        A present source cannot be parsed (optional or not).

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> _ = (root / 'appsettings.json').write_text('{"Db": {"Name": "app", "Port": 5432}}', encoding='utf-8')
    >>> _ = (root / 'appsettings.Test.json').write_text('{"Db": {"Name": "app_test"}}', encoding='utf-8')
    >>> space = resolve(
    ...     [file_source('appsettings.json'), file_source('appsettings.{environment}.json')],
    ...     'Test',
    ...     base_dir=root,
    ... )
    >>> space['Db:Name'], space['Db:Port']
    ('app_test', 5432)
    >>> space.origin('Db:Name')['source']
    'appsettings.{environment}.json'
    >>> tmp.cleanup()
    """

    if not delimiter:
        raise ValueError("Key delimiter must be a non-empty string")
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    layers: list[Layer] = []
    for source in sources:
        layer = _load_source(source, environment_name, base, delimiter, environ)
        if layer is not None:
            layers.append(layer)
    values, meta = merge_layers(layers)
    log_info("configuration_resolved", environment=environment_name, sources=len(layers), keys=len(values))
    return UnifiedConfigSpace(values, meta, delimiter)


def _load_source(
    source: ConfigSource,
    environment_name: str,
    base: Path,
    delimiter: str,
    environ: Mapping[str, str] | None,
) -> Layer | None:
    """Load one *source* atomically, returning ``None`` when it is skipped.

    Why
        A source is either merged completely or not at all; a parse error half
        way through a file must never leave some of its keys applied.
    What
        Reads and flattens the whole payload before returning a
        :data:`~lib_layered_settings.application.merge.Layer`, translating
        adapter errors into the public resolution errors.
    """

    kind = source.kind.value
    if source.kind is SourceKind.ENVIRONMENT:
        payload = DefaultEnvLoader(environ=environ).load(source.prefix, delimiter)
        log_debug("source_loaded", **make_event(source.name, kind, None, {"keys": len(payload)}))
        return (source.name, kind, payload, None)

    path, reader = _reader_for(source, environment_name, base, environ)
    try:
        payload = flatten(reader(), delimiter)
    except NotFound as exc:
        if source.optional:
            log_debug("source_skipped", **make_event(source.name, kind, path))
            return None
        log_error("source_unavailable", **make_event(source.name, kind, path))
        raise SourceUnavailable(source.name, str(exc)) from exc
    except InvalidFormat as exc:
        log_error("source_malformed", **make_event(source.name, kind, path, {"line": exc.line, "column": exc.column}))
        raise SourceMalformed(source.name, str(exc), line=exc.line, column=exc.column) from exc
    log_debug("source_loaded", **make_event(source.name, kind, path, {"keys": len(payload)}))
    return (source.name, kind, payload, path)


def _reader_for(
    source: ConfigSource,
    environment_name: str,
    base: Path,
    environ: Mapping[str, str] | None,
) -> tuple[str, Callable[[], Mapping[str, object]]]:
    if source.kind is SourceKind.SECRETS:
        store = DefaultSecretStore(source.app_id or "", environ=environ)
        return store.path, store.load
    candidate = Path(source.expand_path(environment_name))
    path = str(candidate if candidate.is_absolute() else base / candidate)
    loader = FILE_LOADERS[source.suffix]
    return path, lambda: loader.load(path)


def select_environment(
    base_dir: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    variable: str = ENVIRONMENT_VARIABLE,
    default: str = DEFAULT_ENVIRONMENT,
) -> str:
    """Return the active environment name.

    The process variable wins; otherwise the nearest ``.env`` file above
    *base_dir* may name it; otherwise *default* applies. Names are opaque
    strings, so new environments need no code change.

    Examples
    --------
    >>> select_environment(environ={'APP_ENVIRONMENT': 'Staging'})
    'Staging'
    """

    env = os.environ if environ is None else environ
    chosen = (env.get(variable) or "").strip()
    origin = "environment"
    if not chosen:
        loader = DefaultDotEnvLoader()
        try:
            overrides = loader.load(str(base_dir) if base_dir is not None else None)
        except InvalidFormat as exc:
            raise SourceMalformed(loader.last_loaded_path or ".env", str(exc), line=exc.line) from exc
        chosen = (overrides.get(variable) or "").strip()
        origin = "dotenv"
    if not chosen:
        chosen = default
        origin = "default"
    log_info("environment_selected", environment=chosen, origin=origin)
    return chosen


def default_sources(
    *,
    app_id: str | None = None,
    env_prefix: str = "",
    require_secrets: bool = False,
    base_name: str = "appsettings",
    suffix: str = ".json",
) -> tuple[ConfigSource, ...]:
    """Return the conventional source chain.

    Order (lowest to highest precedence): ``appsettings.json``,
    ``appsettings.{environment}.json``, environment variables, then the secret
    store when *app_id* is given.

    Examples
    --------
    >>> [source.name for source in default_sources(app_id='pathos')]
    ['appsettings.json', 'appsettings.{environment}.json', 'environment', 'secrets']
    """

    sources = [
        file_source(f"{base_name}{suffix}"),
        file_source(f"{base_name}.{{environment}}{suffix}"),
        environment_variables(env_prefix),
    ]
    if app_id:
        sources.append(secret_store(app_id, optional=not require_secrets))
    return tuple(sources)


def read_settings(
    *,
    base_dir: str | Path | None = None,
    app_id: str | None = None,
    environment: str | None = None,
    env_prefix: str = "",
    require_secrets: bool = False,
    delimiter: str = DEFAULT_DELIMITER,
    environ: Mapping[str, str] | None = None,
) -> UnifiedConfigSpace:
    """Startup routine: select the environment and resolve the default chain.

    The result is meant to be built once and handed explicitly to the factory
    functions that bind each consumer's settings.
    """

    bind_trace_id(None)
    name = environment or select_environment(base_dir, environ=environ)
    sources = default_sources(app_id=app_id, env_prefix=env_prefix, require_secrets=require_secrets)
    return resolve(sources, name, base_dir=base_dir, delimiter=delimiter, environ=environ)


__all__ = [
    "DEFAULT_ENVIRONMENT",
    "ENVIRONMENT_VARIABLE",
    "default_sources",
    "read_settings",
    "resolve",
    "select_environment",
]
