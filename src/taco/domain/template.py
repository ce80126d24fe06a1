"""Line-oriented text templates exchanged with the editor.

Layout::

    # Edit Issue                      <- commented header (read-only fields)
    #
    # ID          : 0f3c...
    #
    # Lines beginning with # will be ignored.
    Summary     : Fix the widget      <- settable fields, "Name : value"
    ...
    # Everything between the --- lines is Issue Description
    ---
    free text, kept verbatim
    ---
    # ChangeLog                       <- commented footer (persisted issues)

Only the settable portion is parsed back; everything else is advisory.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from taco.domain.change import Change, comment_changelog, display_date
from taco.domain.errors import TemplateParseError
from taco.domain.schema import Schema

DESCRIPTION_ATTRIBUTE = "description"
DESCRIPTION_MARKER = "---"
LABEL_WIDTH = 12

IGNORED_LINES_HINT = "# Lines beginning with # will be ignored."
DESCRIPTION_HINT = "# Everything between the --- lines is Issue Description"

_FIELD_PATTERN = re.compile(r"^\s*([A-Za-z][A-Za-z0-9_ ]*?)\s*:\s?(.*)$")
_SPECIAL_LABELS = {"id": "ID", "short_id": "Short ID"}


def field_label(name: str) -> str:
    """``created_at`` -> ``Created At``."""
    return _SPECIAL_LABELS.get(name, name.replace("_", " ").title())


def label_to_name(label: str) -> str:
    """``Created At`` -> ``created_at``."""
    return "_".join(label.strip().lower().split())


def format_value(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _field_line(name: str, value: str) -> str:
    return f"{field_label(name):<{LABEL_WIDTH}}: {value}".rstrip()


def _field_names(schema: Schema, *, settable: bool) -> list[str]:
    return [
        a.name
        for a in schema
        if a.settable == settable and a.name != DESCRIPTION_ATTRIBUTE
    ]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_body(schema: Schema, values: Mapping[str, Any]) -> str:
    """The editable portion: settable fields plus the description block."""
    lines = [IGNORED_LINES_HINT]
    for name in _field_names(schema, settable=True):
        lines.append(_field_line(name, format_value(values.get(name, ""))))
    if DESCRIPTION_ATTRIBUTE in schema:
        lines.extend(
            [
                "",
                DESCRIPTION_HINT,
                DESCRIPTION_MARKER,
                format_value(values.get(DESCRIPTION_ATTRIBUTE, "")),
                DESCRIPTION_MARKER,
            ]
        )
    return "\n".join(lines)


def render_template(
    schema: Schema,
    values: Mapping[str, Any],
    *,
    new: bool,
    changelog: list[Change] | None = None,
) -> str:
    """Render the full editor template for a new or persisted issue."""
    body = render_body(schema, values)
    if new:
        return f"# New Issue\n#\n{body}\n"

    header = ["# Edit Issue", "#"]
    for name in _field_names(schema, settable=False):
        header.append(f"# {_field_line(name, format_value(values.get(name, '')))}")
    header.append("#")

    parts = ["\n".join(header), "", body]
    if changelog:
        parts.extend(["", "# ChangeLog", "#", comment_changelog(changelog)])
    return "\n".join(parts).strip() + "\n"


def render_display(
    schema: Schema,
    values: Mapping[str, Any],
    *,
    changelog: list[Change] | None = None,
) -> str:
    """Human-readable rendition used by ``taco show``."""
    lines = []
    for name in _field_names(schema, settable=False):
        value = values.get(name, "")
        shown = display_date(value) if isinstance(value, datetime) else format_value(value)
        lines.append(_field_line(name, shown))
    lines.append("")
    for name in _field_names(schema, settable=True):
        lines.append(_field_line(name, format_value(values.get(name, ""))))
    if DESCRIPTION_ATTRIBUTE in schema:
        lines.extend(["", DESCRIPTION_MARKER, format_value(values.get(DESCRIPTION_ATTRIBUTE, ""))])
    text = "\n".join(lines)
    if changelog:
        text += f"\n{DESCRIPTION_MARKER}\n\n{comment_changelog(changelog)}"
    return text


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_template(schema: Schema, text: str) -> dict[str, str]:
    """Extract settable ``name -> raw text`` pairs from edited template text.

    Comments and blank lines outside the description block are skipped.
    Lines between the ``---`` markers form the description verbatim
    (comment-looking lines included). Any other line must be
    ``Name : value`` for a known settable attribute.

    Raises:
        TemplateParseError: naming the offending line.
    """
    values: dict[str, str] = {}
    description: list[str] = []
    seen_description = False
    inside = False

    for number, line in enumerate(text.splitlines(), start=1):
        if line.rstrip() == DESCRIPTION_MARKER:
            if inside:
                inside = False
            elif seen_description:
                raise TemplateParseError("Description block appears more than once", line=number)
            else:
                inside = seen_description = True
            continue

        if inside:
            description.append(line)
            continue

        if not line.strip() or line.lstrip().startswith("#"):
            continue

        match = _FIELD_PATTERN.match(line)
        if match is None:
            raise TemplateParseError(f"Cannot parse {line.strip()!r}", line=number)

        name = label_to_name(match.group(1))
        if name not in schema:
            raise TemplateParseError(f"Unknown Issue attribute: {name}", line=number)
        if not schema[name].settable:
            raise TemplateParseError(
                f"Cannot set write-protected Issue attribute: {name}", line=number
            )
        values[name] = match.group(2).strip()

    if inside:
        raise TemplateParseError("Description block is missing its closing ---")

    if seen_description:
        if DESCRIPTION_ATTRIBUTE not in schema:
            raise TemplateParseError(f"Unknown Issue attribute: {DESCRIPTION_ATTRIBUTE}")
        values[DESCRIPTION_ATTRIBUTE] = "\n".join(description)

    return values
