"""Command: display issues."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taco.commands._base import TacoCommand

if TYPE_CHECKING:
    from taco.commands._context import AppContext


@click.command(
    cls=TacoCommand,
    examples=(
        "taco show 0f3c91a2",
        "taco show 0f3c91a2 7be04d1c --changelog",
        "taco show --all",
        "taco show --all kind:defect status:open",
    ),
)
@click.argument("args", nargs=-1, metavar="ID... | --all [ATTR:VALUE]...")
@click.option("--all", "all_issues", is_flag=True, help="Show every issue matching the filters.")
@click.option("--changelog", is_flag=True, help="Include each issue's changelog.")
@click.pass_obj
def show(app: AppContext, args: tuple[str, ...], all_issues: bool, changelog: bool) -> None:
    """Show issues by ID or unique ID prefix."""
    if all_issues:
        stray = [arg for arg in args if ":" not in arg]
        if stray:
            raise click.UsageError(f"--all takes ATTR:VALUE filters, not IDs: {' '.join(stray)}")
        result = app.issue_service().show(all_issues=True, filters=args, changelog=changelog)
    else:
        if not args:
            raise click.UsageError("Give at least one issue ID, or --all.")
        result = app.issue_service().show(args, changelog=changelog)
    app.emit(result)
