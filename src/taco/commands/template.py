"""Command: print the issue template."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taco.commands._base import TacoCommand

if TYPE_CHECKING:
    from taco.commands._context import AppContext


@click.command(
    cls=TacoCommand,
    examples=(
        "taco template > issue.txt",
        "taco template --defaults",
    ),
)
@click.option("--defaults", is_flag=True, help="Fill in attribute defaults.")
@click.pass_obj
def template(app: AppContext, defaults: bool) -> None:
    """Print the editable issue template, for use with `taco new FILE`."""
    app.emit(app.issue_service().template(defaults=defaults))
