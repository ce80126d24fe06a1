"""Command: rebuild the filter index."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taco.commands._base import TacoCommand

if TYPE_CHECKING:
    from taco.commands._context import AppContext


@click.command(cls=TacoCommand, examples=("taco reindex",))
@click.pass_obj
def reindex(app: AppContext) -> None:
    """Rebuild the filter index from the issue files."""
    app.emit(app.issue_service().reindex())
