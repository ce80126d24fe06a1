"""Interactive editor launching.

The caller blocks until the editor process exits. There is no timeout.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path

from taco.domain.errors import EditorError

logger = logging.getLogger(__name__)


def resolve_editor(configured: str | None = None) -> str:
    """Editor command in order of precedence.

    1. *configured* (``editor`` setting / ``TACO_EDITOR``)
    2. ``VISUAL`` environment variable
    3. ``EDITOR`` environment variable
    """
    for candidate in (configured, os.environ.get("VISUAL"), os.environ.get("EDITOR")):
        if candidate and candidate.strip():
            return candidate.strip()
    raise EditorError("No editor configured. Set EDITOR or the editor setting in .taco/.taco.toml")


def edit_text(template: str, editor: str) -> str | None:
    """Open *template* in *editor* and return the edited text.

    Returns None when the text comes back unchanged (an aborted edit).

    Raises:
        EditorError: The editor could not be started or exited non-zero.
    """
    command = shlex.split(editor)
    if not command:
        raise EditorError("Editor command is empty")

    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        prefix="taco-",
        suffix=".txt",
        delete=False,
    ) as handle:
        handle.write(template)
        temp_path = Path(handle.name)

    try:
        logger.debug("Launching editor %s on %s", command[0], temp_path)
        try:
            subprocess.run([*command, str(temp_path)], check=True)
        except subprocess.CalledProcessError as exc:
            msg = f"Editor exited with status {exc.returncode}"
            raise EditorError(msg) from exc
        except OSError as exc:
            msg = f"Could not launch editor {command[0]!r}: {exc}"
            raise EditorError(msg) from exc
        edited = temp_path.read_text(encoding="utf-8")
    finally:
        temp_path.unlink(missing_ok=True)

    if edited == template:
        logger.debug("Editor returned unchanged text")
        return None
    return edited
