"""Command: edit an existing issue."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taco.commands._base import TacoCommand

if TYPE_CHECKING:
    from taco.commands._context import AppContext


@click.command(
    cls=TacoCommand,
    examples=(
        "taco edit 0f3c91a2",
        "taco edit 0f3c91a2 --retry",
    ),
)
@click.argument("issue_id")
@click.option("--retry", is_flag=True, help="Resume the last failed edit session.")
@click.pass_obj
def edit(app: AppContext, issue_id: str, retry: bool) -> None:
    """Edit ISSUE_ID (or a unique prefix of it) in your editor."""
    app.emit(app.edit_service().edit_issue(issue_id, retry=retry))
