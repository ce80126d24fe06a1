"""Issue identifiers and listing-scoped short identifiers.

IDs are 32 lowercase hex characters (a UUID4 without dashes), assigned
once at creation.

INVARIANT: IDs are permanent. Once generated, an ID never changes, and
the file storing an issue is named by its ID.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable

GENERATED_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")

# Short ids never go below this length, even when shorter would be unique.
SHORT_ID_MIN_LENGTH = 8


def generate_issue_id() -> str:
    """Return a fresh random identifier."""
    return uuid.uuid4().hex


def is_storable_id(issue_id: str) -> bool:
    """Whether *issue_id* can be used verbatim as a file name.

    Rejects blank ids, path separators, and dot-prefixed names (those are
    reserved for repository bookkeeping files).
    """
    stripped = issue_id.strip()
    if not stripped or stripped != issue_id:
        return False
    if issue_id.startswith("."):
        return False
    return "/" not in issue_id and "\\" not in issue_id


def short_id(issue_id: str, others: Iterable[str], *, min_length: int = SHORT_ID_MIN_LENGTH) -> str:
    """Shortest prefix of *issue_id* (at least *min_length*) not prefixing any of *others*."""
    rivals = [other for other in others if other != issue_id]
    for length in range(min_length, len(issue_id) + 1):
        candidate = issue_id[:length]
        if not any(other.startswith(candidate) for other in rivals):
            return candidate
    return issue_id


def short_ids(issue_ids: Iterable[str], *, min_length: int = SHORT_ID_MIN_LENGTH) -> dict[str, str]:
    """Map each id to its short id, scoped to exactly this set of ids."""
    ids = list(dict.fromkeys(issue_ids))
    return {issue_id: short_id(issue_id, ids, min_length=min_length) for issue_id in ids}
