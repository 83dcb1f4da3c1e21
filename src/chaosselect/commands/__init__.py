"""Subcommand modules for chaosselect.

Provides register_commands() which uses deferred imports to keep
``chaosselect --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from chaosselect.commands.check import check
    from chaosselect.commands.parse import parse
    from chaosselect.commands.select import select

    cli.add_command(select)
    cli.add_command(check)
    cli.add_command(parse)
