"""Command: list issues."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taco.commands._base import TacoCommand

if TYPE_CHECKING:
    from taco.commands._context import AppContext


@click.command(
    "list",
    cls=TacoCommand,
    examples=(
        "taco list",
        "taco list kind:defect",
        "taco list kind:defect owner:mike",
        "taco list --sort priority,created_at",
    ),
)
@click.argument("filters", nargs=-1, metavar="[ATTR:VALUE]...")
@click.option("--sort", default=None, help="Comma-separated attributes to sort by.")
@click.pass_obj
def list_cmd(app: AppContext, filters: tuple[str, ...], sort: str | None) -> None:
    """List issues, optionally filtered by attribute values.

    Every filter must match. Attribute names may be unique prefixes and
    values are compared case-insensitively.
    """
    sort_keys = [key.strip() for key in sort.split(",") if key.strip()] if sort else None
    app.emit(app.issue_service().list_issues(filters, sort=sort_keys))
