"""Rich console used by the human renderers.

Everything is rendered into a StringIO so formatters can return plain
strings. Rich leaves out colour codes when stdout is not a terminal,
which covers pipes and CliRunner.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DEFAULT_WIDTH = 120

TACO_THEME = Theme(
    {
        # results
        "taco.ok": "bold green",
        "taco.error": "bold red",
        "taco.key": "dim",
        "taco.path": "dim",
        # issues
        "taco.id": "bold blue",
        "taco.header": "bold cyan",
        "taco.label": "cyan",
        "taco.comment": "dim italic",
        "taco.marker": "magenta",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    return Console(
        file=StringIO(),
        theme=TACO_THEME,
        no_color=no_color,
        highlight=False,
        width=width or DEFAULT_WIDTH,
    )


def get_output(console: Console) -> str:
    """Text rendered so far on a console from :func:`create_console`."""
    buffer = console.file
    if not isinstance(buffer, StringIO):
        msg = "console does not render into a buffer; use create_console()"
        raise TypeError(msg)
    return buffer.getvalue()
