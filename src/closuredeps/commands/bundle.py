"""Command: concatenate resolved sources in dependency order."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from closuredeps.commands._base import DepsCommand

if TYPE_CHECKING:
    from closuredeps.commands._context import AppContext


@click.command(
    cls=DepsCommand,
    examples=(
        "bundle app.main > app.js",
        "bundle app.main -o build/app.js",
        "--json bundle app.main -o build/app.js",
    ),
)
@click.argument("entries", nargs=-1, required=True)
@click.option("-o", "--output", default=None, help="Write the bundle to this file.")
@click.pass_obj
def bundle(app: AppContext, entries: tuple[str, ...], output: str | None) -> None:
    """Concatenate the files needed by ENTRIES into one bundle."""
    from closuredeps.services.resolve import ResolveService

    result = ResolveService(app.workspace).bundle(list(entries), output=output)
    if result.ok and output is None and not app.settings.json_output:
        # Raw source on stdout; rich rendering would rewrap long lines.
        click.echo(result.data["content"], nl=False)
        for warning in result.warnings:
            click.echo(f"WARNING: {warning}", err=True)
        return
    app.emit(result)
