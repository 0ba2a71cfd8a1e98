"""Command: dependency-first file list for one or more entry packages."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from closuredeps.commands._base import DepsCommand

if TYPE_CHECKING:
    from closuredeps.commands._context import AppContext


@click.command(
    cls=DepsCommand,
    examples=(
        "resolve app.main",
        "resolve app.main app.admin",
        "resolve --file src/main.js",
        "-q resolve app.main | xargs cat > app.js",
        "--json resolve app.main",
    ),
)
@click.argument("entries", nargs=-1)
@click.option(
    "-f",
    "--file",
    "source_file",
    default=None,
    help="Use the packages this file provides as entries.",
)
@click.pass_obj
def resolve(app: AppContext, entries: tuple[str, ...], source_file: str | None) -> None:
    """Print the files needed by ENTRIES, dependencies first."""
    from closuredeps.services.resolve import ResolveService

    if source_file is not None and entries:
        raise click.UsageError("Pass entry packages or --file, not both.")
    if source_file is None and not entries:
        raise click.UsageError("Missing entry package (or --file).")

    svc = ResolveService(app.workspace)
    if source_file is not None:
        app.emit(svc.resolve_file(source_file))
    else:
        app.emit(svc.resolve(list(entries)))
