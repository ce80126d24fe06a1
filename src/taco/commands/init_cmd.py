"""Command: initialize a taco repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taco.commands._base import TacoCommand

if TYPE_CHECKING:
    from taco.commands._context import AppContext


@click.command(
    "init",
    cls=TacoCommand,
    examples=(
        "taco init",
        "taco -C ~/src/project init",
    ),
)
@click.pass_obj
def init_cmd(app: AppContext) -> None:
    """Create .taco/ with an empty index and a starter config file."""
    app.emit(app.issue_service().init())
