"""parse — show how a requirement expression is parsed."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from chaosselect.commands._base import ChaosCommand

if TYPE_CHECKING:
    from chaosselect.commands._context import AppContext


@click.command(
    "parse",
    cls=ChaosCommand,
    examples="""\
  chaosselect parse "default,!kube-system"
  chaosselect --json parse "app in (web,api)"
  chaosselect parse Running,Pending""",
)
@click.argument("expression")
@click.pass_obj
def parse(app: AppContext, expression: str) -> None:
    """Parse a comma-joined requirement EXPRESSION."""
    from chaosselect.infrastructure.provider import InMemoryProvider

    app.emit(app.service(InMemoryProvider()).parse_expression(expression))
