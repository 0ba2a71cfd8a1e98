"""Root CLI group for closuredeps with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from closuredeps import __version__
from closuredeps.commands import register_commands
from closuredeps.commands._context import AppContext
from closuredeps.config.settings import DepsSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="closuredeps")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output (one file per line).")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("--strict", is_flag=True, help="Fail when any require is unknown or cyclic.")
@click.option(
    "-r",
    "--root",
    "project_root",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Project root (default: config file directory or CWD).",
)
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    strict: bool,
    project_root: Path | None,
    config_path: str | None,
) -> None:
    """closuredeps: order goog.provide/goog.require sources for compilation."""
    ctx.ensure_object(dict)
    settings = DepsSettings.from_cli(
        config_path=config_path,
        project_root=project_root,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        strict=strict,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
