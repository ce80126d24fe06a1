"""IssueRepository — one file per issue plus a derived filter index.

The repository owns the ``.taco/`` directory of a working tree:

- **Files** are the source of truth. Each issue is a JSON document named
  by its ID; every read re-checks that the name matches the stored ID.
- **Index** (SQLite via SQLAlchemy Core) answers ``attribute:value``
  filters. It is rebuilt eagerly on every write, and before a filtered
  listing whenever the stored files' signature differs from the one
  recorded at the last rebuild (files arriving from a merge, say).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select

from taco.domain.errors import (
    AmbiguousIdError,
    IntegrityError,
    NotFoundError,
    RepositoryError,
)
from taco.domain.filters import Filter, index_value, parse_filters
from taco.domain.ids import is_storable_id, short_ids
from taco.domain.issue import Issue, default_issue_schema
from taco.domain.schema import utcnow
from taco.infrastructure.database.engine import init_index_database
from taco.infrastructure.database.schema import (
    BUILT_AT_KEY,
    SIGNATURE_KEY,
    index_meta,
    issue_index,
)
from taco.infrastructure.filesystem import (
    CONFIG_NAME,
    HOME_DIR,
    INDEX_NAME,
    RETRY_NAME,
    find_issue_files,
    read_text,
    resolve_issue_path,
    storage_signature,
    write_atomic,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from taco.domain.schema import Schema

logger = logging.getLogger(__name__)


class IssueRepository:
    """Flat-file issue store rooted at ``{root}/.taco``.

    Constructed once per CLI invocation and handed to services. The
    schema is passed in explicitly so configuration overlays stay local
    to this repository.
    """

    def __init__(self, root: Path, *, schema: Schema | None = None) -> None:
        self._root = root
        self._home = root / HOME_DIR
        self._schema = schema if schema is not None else default_issue_schema()
        self._engine: Engine | None = None

    @property
    def root(self) -> Path:
        return self._root

    @property
    def home(self) -> Path:
        """The ``.taco`` directory holding the issue files."""
        return self._home

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def retry_path(self) -> Path:
        return self._home / RETRY_NAME

    @property
    def config_path(self) -> Path:
        return self._home / CONFIG_NAME

    @property
    def engine(self) -> Engine:
        """The index engine (created lazily; requires an initialized repository)."""
        if self._engine is None:
            self.require_home()
            self._engine = init_index_database(self._home / INDEX_NAME)
        return self._engine

    def exists(self) -> bool:
        return self._home.is_dir()

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def require_home(self) -> None:
        if not self.exists():
            msg = f"No taco repository at {self._home} (run `taco init`)"
            raise RepositoryError(msg)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> Path:
        """Create the repository directory and an empty index."""
        if self._home.exists():
            msg = f"Could not create {self._home}: directory already exists"
            raise RepositoryError(msg)
        self._home.mkdir(parents=True)
        self.reindex()
        logger.info("Initialized repository at %s", self._home)
        return self._home

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def write(self, issues: Issue | Iterable[Issue]) -> list[Issue]:
        """Persist one or many issues, then rebuild the index.

        Every issue is serialized (and therefore validated), and every
        other stored issue is loaded for the index, before any file is
        touched. Each file is replaced atomically on its own; there is no
        cross-file atomicity.

        Raises:
            InvalidIssueError: Any issue is invalid (nothing is written).
            IntegrityError: Another stored file is corrupt or misnamed
                (nothing is written).
        """
        batch = [issues] if isinstance(issues, Issue) else list(issues)
        self.require_home()
        documents = {issue.get("id"): issue.to_json() for issue in batch}
        siblings = [
            self._load(path)
            for path in find_issue_files(self._home)
            if path.name not in documents
        ]

        for issue_id, document in documents.items():
            write_atomic(resolve_issue_path(self._home, issue_id), document + "\n")
            logger.debug("Wrote issue %s", issue_id)

        current = {issue.get("id"): issue for issue in [*siblings, *batch]}
        self._rebuild(list(current.values()))
        return batch

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _load(self, path: Path) -> Issue:
        try:
            text = read_text(path)
        except UnicodeDecodeError as exc:
            msg = f"Issue file is not UTF-8 text: {path.name}"
            raise IntegrityError(msg, path=str(path)) from exc

        try:
            issue = Issue.from_json(text, schema=self._schema)
        except IntegrityError as exc:
            msg = f"{exc} in {path.name}"
            raise IntegrityError(msg, path=str(path)) from exc

        if issue.get("id") != path.name:
            msg = f"Issue ID does not match filename: {issue.get('id')} != {path.name}"
            raise IntegrityError(msg, path=str(path))
        return issue

    def read(self, issue_id: str) -> Issue:
        """Read by exact ID, else by unique ID prefix.

        Raises:
            NotFoundError: Nothing matches.
            AmbiguousIdError: Several issues share the prefix; the error
                enumerates ``(id, summary)`` for each.
            IntegrityError: The stored file is corrupt or misnamed.
        """
        self.require_home()
        if not issue_id.strip():
            raise NotFoundError("Issue not found: empty identifier")

        if is_storable_id(issue_id):
            exact = self._home / issue_id
            if exact.is_file():
                return self._load(exact)

        candidates = [p for p in find_issue_files(self._home) if p.name.startswith(issue_id)]
        if not candidates:
            msg = f"Issue not found: {issue_id}"
            raise NotFoundError(msg)
        if len(candidates) > 1:
            matches = [self._load(p) for p in candidates]
            raise AmbiguousIdError(
                issue_id,
                [(m.get("id"), str(m.get("summary"))) for m in sorted(matches)],
            )
        return self._load(candidates[0])

    def list(self, filters: Iterable[str] = ()) -> list[Issue]:
        """Every issue, or those matching all *filters*, in issue order.

        Filters are ``attribute:value`` strings (attribute may be a unique
        prefix, value is case-insensitive). An empty intersection yields
        an empty list.
        """
        parsed = parse_filters(tuple(filters), self._schema)
        if not self.exists():
            return []

        if parsed:
            matching = self._filtered_ids(parsed)
            paths = []
            for issue_id in sorted(matching):
                path = self._home / issue_id
                if path.is_file():
                    paths.append(path)
                else:
                    logger.warning("Index lists %s but no such file exists", issue_id)
        else:
            paths = find_issue_files(self._home)

        # The file decides: an index row may predate an external rewrite.
        issues = [self._load(path) for path in paths]
        return sorted(issue for issue in issues if _matches(issue, parsed))

    def list_with_short_ids(self, filters: Iterable[str] = ()) -> list[tuple[Issue, str]]:
        """Like :meth:`list`, paired with short IDs scoped to this listing."""
        issues = self.list(filters)
        shorts = short_ids(issue.get("id") for issue in issues)
        return [(issue, shorts[issue.get("id")]) for issue in issues]

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    def reindex(self) -> int:
        """Rebuild the filter index from the issue files. Returns the issue count."""
        self.require_home()
        issues = [self._load(path) for path in find_issue_files(self._home)]
        self._rebuild(issues)
        return len(issues)

    def _rebuild(self, issues: list[Issue]) -> None:
        rows = [
            {"attribute": name, "value": index_value(value), "issue_id": issue.get("id")}
            for issue in issues
            for name, value in issue.to_mapping().items()
        ]
        signature = storage_signature(self._home)

        with self.engine.begin() as conn:
            conn.execute(delete(issue_index))
            conn.execute(delete(index_meta))
            if rows:
                conn.execute(insert(issue_index), rows)
            conn.execute(
                insert(index_meta),
                [
                    {"key": SIGNATURE_KEY, "value": signature},
                    {"key": BUILT_AT_KEY, "value": utcnow().isoformat()},
                ],
            )

        logger.debug("Rebuilt filter index: %d issues, %d rows", len(issues), len(rows))

    def index_is_fresh(self) -> bool:
        """Whether the recorded signature matches the files on disk."""
        with self.engine.connect() as conn:
            recorded = conn.execute(
                select(index_meta.c.value).where(index_meta.c.key == SIGNATURE_KEY)
            ).scalar_one_or_none()
        return recorded == storage_signature(self._home)

    def _filtered_ids(self, filters: list[Filter]) -> set[str]:
        if not self.index_is_fresh():
            logger.info("Filter index is stale; rebuilding")
            self.reindex()

        groups: list[set[str]] = []
        with self.engine.connect() as conn:
            for f in filters:
                rows = conn.execute(
                    select(issue_index.c.issue_id).where(
                        issue_index.c.attribute == f.attribute,
                        issue_index.c.value == f.value,
                    )
                ).fetchall()
                groups.append({str(row.issue_id) for row in rows})
        return set.intersection(*groups)


def _matches(issue: Issue, filters: list[Filter]) -> bool:
    return all(index_value(issue.get(f.attribute)) == f.value for f in filters)
