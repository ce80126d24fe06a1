"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from taco.domain.template import DESCRIPTION_MARKER, field_label
from taco.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from taco.services.result import ServiceResult

Renderer = Callable[["ServiceResult", "Console"], None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal, which is
    the case inside Click's CliRunner and piped output.
    """
    console = create_console()
    if result.ok:
        _OP_RENDERERS.get(result.op, _render_generic)(result, console)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: one affected issue ID per line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {msg}"
    return "\n".join(result.issue_ids)


def style_issue_text(text: str) -> Text:
    """Style field labels, comment lines and description markers.

    Lines between a pair of markers are description and stay unstyled.
    """
    styled = Text()
    in_description = False
    for number, line in enumerate(text.split("\n")):
        if number:
            styled.append("\n")
        if line.strip() == DESCRIPTION_MARKER:
            in_description = not in_description
            styled.append(line, style="taco.marker")
        elif in_description:
            styled.append(line)
        elif line.startswith("#"):
            styled.append(line, style="taco.comment")
        else:
            label, sep, rest = line.partition(":")
            if sep and label.strip():
                styled.append(label + sep, style="taco.label")
                styled.append(rest)
            else:
                styled.append(line)
    return styled


# ── Helpers ───────────────────────────────────────────────────────────


def _line(console: Console, *parts: Text | str) -> None:
    console.print(*parts, sep="", soft_wrap=True)


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    _line(console, Text("ERROR: ", style="taco.error"), Text(msg))

    if verbose and err and err.detail:
        _line(console, Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            _line(console, Text(f"    {k}: {v}"))


def _render_generic(result: ServiceResult, console: Console) -> None:
    _line(console, Text("OK", style="taco.ok"), Text(f"  {result.op}"))
    for key, value in result.data.items():
        _line(console, Text(f"  {key}: ", style="taco.key"), Text(str(value)))


# ── Operation renderers ───────────────────────────────────────────────


def _render_init(result: ServiceResult, console: Console) -> None:
    d = result.data
    _line(console, Text("Initialized taco repository in "), Text(d["path"], style="taco.path"))
    _line(console)
    _line(console, "Please edit the config file at:")
    _line(console, Text(f" {d['config']}", style="taco.path"))


def _mutation(verb: str) -> Renderer:
    def render(result: ServiceResult, console: Console) -> None:
        if result.aborted:
            _line(console, "Aborted.")
            return
        _line(console, Text(f"{verb} Issue "), Text(str(result.data["id"]), style="taco.id"))

    return render


def _render_show(result: ServiceResult, console: Console) -> None:
    texts = [issue["text"] for issue in result.data.get("issues", [])]
    if texts:
        _line(console, style_issue_text("\n\n".join(texts)))


def _render_list(result: ServiceResult, console: Console) -> None:
    items: list[dict[str, Any]] = result.data.get("items", [])
    if not items:
        _line(console, "Found no issues.")
        return

    columns: list[str] = result.data["columns"]
    table = Table(
        show_header=True,
        header_style="taco.header",
        show_lines=False,
        pad_edge=False,
        expand=False,
    )
    for column in columns:
        if column in ("id", "short_id"):
            table.add_column(field_label(column), style="taco.id", no_wrap=True)
        else:
            table.add_column(field_label(column))
    for item in items:
        table.add_row(*(Text(str(item.get(column, ""))) for column in columns))
    console.print(table)


def _render_template(result: ServiceResult, console: Console) -> None:
    _line(console, style_issue_text(result.data["template"]))


def _render_reindex(result: ServiceResult, console: Console) -> None:
    _line(console, f"Indexed {result.data['count']} issues.")


_OP_RENDERERS: dict[str, Renderer] = {
    "init": _render_init,
    "new_issue": _mutation("Created"),
    "edit_issue": _mutation("Updated"),
    "show": _render_show,
    "list_issues": _render_list,
    "template": _render_template,
    "reindex": _render_reindex,
}
