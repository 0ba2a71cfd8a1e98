"""Command group: inspect the package dependency graph."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from closuredeps.commands._base import DepsGroup
from closuredeps.services.resolve import ResolveService

if TYPE_CHECKING:
    from closuredeps.commands._context import AppContext


@click.group(cls=DepsGroup)
@click.pass_obj
def graph(app: AppContext) -> None:
    """Inspect packages and their dependencies."""


@graph.command(examples=("graph deps app.main", "-q graph deps app.util"))
@click.argument("package")
@click.pass_obj
def deps(app: AppContext, package: str) -> None:
    """Show the dependency-first closure of PACKAGE."""
    app.emit(ResolveService(app.workspace).dependencies(package))


@graph.command(examples=("graph packages", "--json graph packages"))
@click.pass_obj
def packages(app: AppContext) -> None:
    """List every package with its file and direct requirements."""
    app.emit(ResolveService(app.workspace).packages())


@graph.command(examples=("graph check", "--json graph check"))
@click.pass_obj
def check(app: AppContext) -> None:
    """Rescan sources and fail on unreadable files, unknown requires or cycles."""
    app.emit(ResolveService(app.workspace).check())
