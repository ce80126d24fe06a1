"""Filesystem operations for the issue repository.

INVARIANT: Files are truth. The filesystem is authoritative.
The index database is derived; ``taco reindex`` must always be able to
reconstruct it from the issue files alone.

Layout of ``{root}/.taco/``:

- ``{id}`` — one JSON document per issue, named by its ID.
- ``.index.db`` — derived SQLite filter index.
- ``.taco_retry.txt`` — recovery copy of a failed edit session.
- ``.taco.toml`` — repository configuration.

Dot-prefixed entries are bookkeeping and never issues.
"""

from __future__ import annotations

import hashlib
import os
import tempfile
from pathlib import Path

HOME_DIR = ".taco"
INDEX_NAME = ".index.db"
RETRY_NAME = ".taco_retry.txt"
CONFIG_NAME = ".taco.toml"


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------


def resolve_issue_path(home: Path, issue_id: str) -> Path:
    """Resolve the file path for *issue_id* inside *home*.

    Guards against path traversal via a crafted id.
    """
    result = home / issue_id
    if result.parent.resolve() != home.resolve() or issue_id.startswith("."):
        msg = f"Issue path escapes repository: {issue_id!r}"
        raise ValueError(msg)
    return result


def find_issue_files(home: Path) -> list[Path]:
    """All issue files in *home*, sorted by name. Missing *home* yields []."""
    if not home.is_dir():
        return []
    return sorted(
        path for path in home.iterdir() if path.is_file() and not path.name.startswith(".")
    )


def storage_signature(home: Path) -> str:
    """Fingerprint of the stored files: ``count:digest`` of name, size and mtime."""
    files = find_issue_files(home)
    digest = hashlib.sha256()
    for path in files:
        stat = path.stat()
        digest.update(f"{path.name}\0{stat.st_size}\0{stat.st_mtime_ns}\n".encode())
    return f"{len(files)}:{digest.hexdigest()[:16]}"


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def write_atomic(path: Path, content: str) -> None:
    """Write *content* to *path* via a temp file and an atomic rename.

    The temp file is dot-prefixed so a crash never leaves a half-written
    file that looks like an issue.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# ---------------------------------------------------------------------------
# Recovery file
# ---------------------------------------------------------------------------


def save_recovery(path: Path, text: str) -> None:
    """Preserve edited text after a failed persist."""
    path.write_text(text, encoding="utf-8")


def load_recovery(path: Path) -> str | None:
    """Return the saved edit text verbatim, or None if there is none."""
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def clear_recovery(path: Path) -> None:
    path.unlink(missing_ok=True)
