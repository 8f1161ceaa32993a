"""CLI adapter for ``lib_config_data`` built on ``lib_cli_exit_tools``.

Purpose
-------
Expose the aggregation engine on the command line so operators can inspect
the merged document (and which source won each key) without writing Python.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_env_prefix` – exposes :func:`lib_config_data.core.default_env_prefix`.
* :func:`cli_read` – builds configuration from ``--source`` options and prints
  JSON.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It only talks to
:class:`lib_config_data.core.ConfigDataSpec`; ``lib_cli_exit_tools`` centralises
the exit code strategy.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import ConfigDataSpec
from .core import default_env_prefix as _default_env_prefix

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

SOURCE_KINDS: Final[tuple[str, ...]] = ("env", "sysprops", "props", "json", "yaml", "toml")


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when not installed."""

    try:
        return metadata.version("lib_config_data")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Layered configuration aggregation and binding",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_config_data",
    message="lib_config_data version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_config_data")
    except metadata.PackageNotFoundError:
        click.echo("lib_config_data (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_config_data')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.11')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("env-prefix", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("slug")
def cli_env_prefix(slug: str) -> None:
    """Compute the canonical environment prefix for *slug*.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["env-prefix", "config-kit"])
    >>> result.output.strip()
    'CONFIG_KIT_'
    """

    click.echo(_default_env_prefix(slug))


@cli.command("read", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--source",
    "sources",
    multiple=True,
    required=True,
    metavar="KIND[:LOCATION]",
    help=(
        "Configuration source, repeatable, lowest precedence first. KIND is one of "
        "env, sysprops, props, json, yaml, toml. LOCATION is a path or URL, or the "
        "prefix for env/sysprops."
    ),
)
@click.option("--pointer", default=None, help="JSON pointer selecting the sub-tree to print")
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
@click.option(
    "--provenance/--no-provenance",
    default=False,
    help="Include the winning source for each key in the output",
)
def cli_read(sources: Sequence[str], pointer: Optional[str], indent: Optional[int], provenance: bool) -> None:
    """Build configuration from ``--source`` options and print it as JSON."""

    spec = ConfigDataSpec()
    for option in sources:
        _register(spec, option)
    data = spec.build()
    node = data.node(pointer)
    if provenance:
        payload = {"config": node, "provenance": data.provenance()}
        click.echo(json.dumps(payload, indent=indent, separators=(",", ":"), ensure_ascii=False))
        return
    click.echo(json.dumps(node, indent=indent, separators=(",", ":"), ensure_ascii=False))


def _register(spec: ConfigDataSpec, option: str) -> None:
    """Translate one ``KIND[:LOCATION]`` option into a builder call."""

    kind, _, location = option.partition(":")
    kind = kind.strip().lower()
    if kind not in SOURCE_KINDS:
        raise click.BadParameter(
            f"Unknown source kind {kind!r}; expected one of {', '.join(SOURCE_KINDS)}",
            param_hint="--source",
        )
    if kind == "env":
        if location:
            spec.env(location)
        else:
            spec.env()
        return
    if kind == "sysprops":
        if location:
            spec.sys_props(location)
        else:
            spec.sys_props()
        return
    if not location:
        raise click.BadParameter(f"Source kind {kind!r} requires a path or URL", param_hint="--source")
    if kind == "props":
        spec.props(location)
    else:
        spec.structured(kind, location)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_config_data",
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
