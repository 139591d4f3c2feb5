"""Click base classes that carry usage examples.

Every flowctl command is built with ``examples=``: a block of sample
invocations printed by an eager ``--examples`` flag. The flag exits before
arguments are validated, stdin is read or credentials are looked up, so
``flowctl get --examples`` works with no config at all.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click


def _examples_callback(examples: str) -> Callable[[click.Context, click.Parameter, bool], None]:
    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    return show


def _attach_examples(cmd: click.Command, examples: str | None) -> None:
    cmd.examples = examples  # type: ignore[attr-defined]
    if not examples:
        return
    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=_examples_callback(examples),
            help="Show usage examples and exit.",
        )
    )


class FlowCommand(click.Command):
    """A leaf command with an optional ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        _attach_examples(self, examples)


class FlowGroup(click.Group):
    """The root group: ``--examples`` for the whole tool, plus a help footer
    pointing at the per-command examples."""

    command_class = FlowCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        _attach_examples(self, examples)

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        super().format_epilog(ctx, formatter)
        formatter.write_paragraph()
        formatter.write_text(f"Run '{ctx.command_path} COMMAND --examples' for sample invocations.")
