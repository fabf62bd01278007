"""CLI adapter for ``lib_layered_settings`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect how the source chain resolves, maintain the per-app
secret store, and scaffold example ``appsettings`` files without writing
Python code.

Contents
--------
* :func:`cli` – root command wiring traceback handling into ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_environment` – prints the environment name startup would select.
* :func:`cli_resolve` – resolves the default chain and prints redacted JSON.
* :func:`cli_secrets` – ``set`` / ``remove`` / ``list`` / ``clear`` / ``path``.
* :func:`cli_generate_examples` – writes example configuration files.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
Outermost layer: calls the composition root and adapters, never the other way
round. Secret values are accepted on input but never echoed.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.secrets.default import DefaultSecretStore
from .core import ENVIRONMENT_VARIABLE, read_settings, select_environment
from .domain.space import json_default
from .examples import generate_examples as _generate_examples

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_DIST_NAME: Final[str] = "lib_layered_settings"


def _resolve_version() -> str:
    """Return the installed package version or ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Layered settings resolver and typed binder",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=_DIST_NAME,
    message="lib_layered_settings version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference for all subcommands."""

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata(_DIST_NAME)
    except metadata.PackageNotFoundError:
        click.echo(f"{_DIST_NAME} (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', _DIST_NAME)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.11')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


_BASE_DIR_OPTION = click.option(
    "--base-dir",
    type=click.Path(path_type=Path, exists=True, file_okay=False, dir_okay=True, readable=True),
    default=None,
    help="Directory holding appsettings files (defaults to CWD)",
)


@cli.command("environment", context_settings=CLICK_CONTEXT_SETTINGS)
@_BASE_DIR_OPTION
@click.option("--variable", default=ENVIRONMENT_VARIABLE, show_default=True, help="Variable naming the environment")
def cli_environment(base_dir: Optional[Path], variable: str) -> None:
    """Print the environment name startup would select."""

    click.echo(select_environment(base_dir, variable=variable))


@cli.command("resolve", context_settings=CLICK_CONTEXT_SETTINGS)
@_BASE_DIR_OPTION
@click.option("--environment", default=None, help="Environment name (defaults to the selected one)")
@click.option("--app-id", default=None, help="Application id selecting the secret store")
@click.option("--env-prefix", default="", help="Only environment variables with this prefix are read")
@click.option(
    "--require-secrets/--optional-secrets",
    default=False,
    help="Fail when the secret store is absent",
)
@click.option("--section", default=None, help="Only print keys below this section")
@click.option("--indent", type=int, default=None, help="Pretty-print JSON with the given indent")
@click.option(
    "--provenance/--no-provenance",
    default=False,
    help="Include the winning source for each key",
)
def cli_resolve(
    base_dir: Optional[Path],
    environment: Optional[str],
    app_id: Optional[str],
    env_prefix: str,
    require_secrets: bool,
    section: Optional[str],
    indent: Optional[int],
    provenance: bool,
) -> None:
    """Resolve the default source chain and print it as JSON (secrets redacted)."""

    space = read_settings(
        base_dir=base_dir,
        app_id=app_id,
        environment=environment,
        env_prefix=env_prefix,
        require_secrets=require_secrets,
    ).section(section)
    if provenance:
        payload = {"config": space.as_dict(), "provenance": space.provenance()}
        click.echo(json.dumps(payload, indent=indent, separators=(",", ":"), ensure_ascii=False, default=json_default))
        return
    click.echo(space.to_json(indent=indent))


@cli.group("secrets", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--app-id", required=True, help="Application id selecting the secret store")
@click.pass_context
def cli_secrets(ctx: click.Context, app_id: str) -> None:
    """Manage the per-application secret store."""

    ctx.ensure_object(dict)
    ctx.obj["store"] = DefaultSecretStore(app_id)


@cli_secrets.command("set", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("key")
@click.argument("value")
@click.pass_context
def cli_secrets_set(ctx: click.Context, key: str, value: str) -> None:
    """Store VALUE under KEY (e.g. ``Db:Password``)."""

    ctx.obj["store"].set(key, value)
    click.echo(f"Stored secret {key}")


@cli_secrets.command("remove", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("key")
@click.pass_context
def cli_secrets_remove(ctx: click.Context, key: str) -> None:
    """Delete KEY from the secret store."""

    if not ctx.obj["store"].remove(key):
        raise click.ClickException(f"No secret named {key}")
    click.echo(f"Removed secret {key}")


@cli_secrets.command("list", context_settings=CLICK_CONTEXT_SETTINGS)
@click.pass_context
def cli_secrets_list(ctx: click.Context) -> None:
    """List stored secret names (values are never printed)."""

    for key in ctx.obj["store"].keys():
        click.echo(key)


@cli_secrets.command("clear", context_settings=CLICK_CONTEXT_SETTINGS)
@click.pass_context
def cli_secrets_clear(ctx: click.Context) -> None:
    """Remove every secret for the application."""

    ctx.obj["store"].clear()


@cli_secrets.command("path", context_settings=CLICK_CONTEXT_SETTINGS)
@click.pass_context
def cli_secrets_path(ctx: click.Context) -> None:
    """Print the location of the secret document."""

    click.echo(ctx.obj["store"].path)


@cli.command("generate-examples", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--destination",
    type=click.Path(path_type=Path, file_okay=False, dir_okay=True, resolve_path=True),
    required=True,
    help="Directory that will receive the example files",
)
@click.option("--environment", "environments", multiple=True, help="Overlay to generate (repeatable)")
@click.option(
    "--force/--no-force",
    default=False,
    help="Overwrite existing example files if set",
    show_default=True,
)
def cli_generate_examples(destination: Path, environments: Sequence[str], force: bool) -> None:
    """Write example appsettings files under DESTINATION and list them as JSON."""

    created = _generate_examples(destination, environments=environments or None, force=force)
    click.echo(json.dumps([str(path) for path in created], indent=2))


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=_DIST_NAME,
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
