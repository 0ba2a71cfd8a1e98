"""Subcommand modules for closuredeps.

Provides register_commands() which uses deferred imports to keep
``closuredeps --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``graph`` group and the standalone commands."""
    from closuredeps.commands.bundle import bundle
    from closuredeps.commands.graph import graph
    from closuredeps.commands.resolve import resolve

    cli.add_command(graph)
    cli.add_command(resolve)
    cli.add_command(bundle)
