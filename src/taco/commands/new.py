"""Command: create a new issue."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taco.commands._base import TacoCommand

if TYPE_CHECKING:
    from taco.commands._context import AppContext


def split_new_args(args: tuple[str, ...]) -> tuple[dict[str, str], str | None]:
    """Separate ``attr:value`` defaults from an optional template FILE."""
    defaults: dict[str, str] = {}
    filename: str | None = None
    for arg in args:
        if ":" in arg:
            key, value = arg.split(":", 1)
            defaults[key] = value
        elif filename is not None:
            raise click.UsageError("Multiple filenames given.")
        else:
            filename = arg
    if filename is not None and defaults:
        raise click.UsageError("Cannot set defaults when creating Issue from file.")
    return defaults, filename


@click.command(
    cls=TacoCommand,
    examples=(
        "taco new",
        "taco new kind:Task priority:2",
        "taco new issue.txt",
        "taco new --retry",
    ),
)
@click.argument("args", nargs=-1, metavar="[ATTR:VALUE]... [FILE]")
@click.option("--retry", is_flag=True, help="Resume the last failed edit session.")
@click.pass_obj
def new(app: AppContext, args: tuple[str, ...], retry: bool) -> None:
    """Create an issue in your editor, or from a filled-in template FILE.

    ATTR:VALUE pairs pre-fill the editor template. FILE may be - for stdin.
    """
    if retry and args:
        raise click.UsageError("--retry takes no other arguments.")
    defaults, filename = split_new_args(args)

    text: str | None = None
    if filename is not None:
        try:
            with click.open_file(filename, encoding="utf-8") as handle:
                text = handle.read()
        except OSError as exc:
            raise click.FileError(filename, hint=str(exc)) from exc

    app.emit(app.edit_service().new_issue(defaults=defaults, text=text, retry=retry))
