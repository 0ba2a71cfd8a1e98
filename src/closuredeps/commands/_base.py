"""Click base classes that carry example invocations.

Commands declare examples as argument strings without the program name, e.g.
``("resolve app.main", "-q resolve app.main")``. ``--examples`` prints them
as shell lines and exits. A group without examples of its own prints the
examples of its subcommands, so ``closuredeps graph --examples`` covers
``deps``, ``packages`` and ``check`` in one listing.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click

PROG_NAME = "closuredeps"


def _collect_examples(ctx: click.Context, cmd: click.Command) -> list[str]:
    examples = list(getattr(cmd, "examples", ()))
    if examples or not isinstance(cmd, click.Group):
        return examples
    for name in cmd.list_commands(ctx):
        sub = cmd.get_command(ctx, name)
        if sub is not None:
            examples.extend(getattr(sub, "examples", ()))
    return examples


def _show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    examples = _collect_examples(ctx, ctx.command)
    if not examples:
        click.echo(f"No examples for '{ctx.command_path}'.")
    for line in examples:
        click.echo(f"  $ {PROG_NAME} {line}")
    ctx.exit(0)


def _examples_option() -> click.Option:
    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=_show_examples,
        help="Show example invocations and exit.",
    )


class DepsCommand(click.Command):
    """Command with an ``examples`` keyword and an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: Sequence[str] = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples)
        self.params.append(_examples_option())


class DepsGroup(click.Group):
    """Group whose subcommands default to :class:`DepsCommand`."""

    command_class = DepsCommand

    def __init__(self, *args: Any, examples: Sequence[str] = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples)
        self.params.append(_examples_option())
