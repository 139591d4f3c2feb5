"""Subcommand modules for flowctl.

Provides register_commands() which uses deferred imports to keep
``flowctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all commands on the root CLI group.

    Offline codec commands first, then the remote resource commands.
    """
    from flowctl.commands.codec import convert, inspect_cmd

    cli.add_command(convert)
    cli.add_command(inspect_cmd)

    from flowctl.commands.resources import delete, find, get, save

    cli.add_command(get)
    cli.add_command(find)
    cli.add_command(save)
    cli.add_command(delete)
