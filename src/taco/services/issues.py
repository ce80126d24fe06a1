"""IssueService — repository setup, reading, listing and templates."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from taco.config.models import DEFAULT_CONFIG_TOML, SHORT_ID_COLUMN, ProfileConfig
from taco.domain.errors import TacoError, UnknownAttributeError
from taco.domain.issue import Issue, IssueDocument
from taco.domain.template import format_value, render_body
from taco.infrastructure.filesystem import write_atomic
from taco.services.base import BaseService
from taco.services.result import ServiceResult

if TYPE_CHECKING:
    from taco.infrastructure.repository import IssueRepository

logger = logging.getLogger(__name__)


def issue_payload(issue: Issue, *, changelog: bool = False) -> dict[str, Any]:
    """JSON-ready form of *issue* plus its display text.

    Built without validating, so issues that no longer satisfy a changed
    configuration can still be shown.
    """
    document = IssueDocument(issue=issue.to_mapping(), changelog=issue.changelog)
    payload = document.model_dump(mode="json")
    payload["text"] = issue.render_text(changelog=changelog)
    return payload


class IssueService(BaseService):
    """Read-side operations plus repository initialization."""

    def __init__(
        self,
        repository: IssueRepository,
        *,
        profile: ProfileConfig | None = None,
    ) -> None:
        super().__init__(repository)
        self._profile = profile or ProfileConfig()

    def init(self) -> ServiceResult:
        """Create ``.taco/`` with an empty index and a starter config file."""
        op = "init"
        try:
            home = self._repository.init()
        except TacoError as exc:
            return self._failure(op, exc)
        write_atomic(self._repository.config_path, DEFAULT_CONFIG_TOML)
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": str(home), "config": str(self._repository.config_path)},
        )

    def show(
        self,
        issue_ids: Sequence[str] = (),
        *,
        all_issues: bool = False,
        filters: Sequence[str] = (),
        changelog: bool = False,
    ) -> ServiceResult:
        """Show issues by ID (or unique prefix), or every issue matching *filters*."""
        op = "show"
        try:
            if all_issues:
                issues = self._repository.list(filters)
            else:
                issues = [self._repository.read(issue_id) for issue_id in issue_ids]
        except TacoError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "issues": [issue_payload(issue, changelog=changelog) for issue in issues],
                "count": len(issues),
            },
        )

    def list_issues(
        self,
        filters: Sequence[str] = (),
        *,
        sort: Sequence[str] | None = None,
    ) -> ServiceResult:
        """List issues with short IDs, ordered and projected per the profile.

        With no *filters* the profile's default filters apply. *sort*
        overrides the profile's sort order; ``short_id`` is a valid key.
        """
        op = "list_issues"
        sort_keys = list(sort) if sort else list(self._profile.sort)
        columns = list(self._profile.columns)
        schema = self._repository.schema
        try:
            for key in sort_keys:
                if key != SHORT_ID_COLUMN and key not in schema:
                    msg = f"Unknown Issue attribute for sort: {key}"
                    raise UnknownAttributeError(msg, name=key)
            pairs = self._repository.list_with_short_ids(
                list(filters) or list(self._profile.filters)
            )
        except TacoError as exc:
            return self._failure(op, exc)

        def sort_key(pair: tuple[Issue, str]) -> tuple[Any, ...]:
            issue, short = pair
            return tuple(short if key == SHORT_ID_COLUMN else issue.get(key) for key in sort_keys)

        # Stable: ties keep the issue ordering from the repository.
        pairs.sort(key=sort_key)

        items = []
        for issue, short in pairs:
            row = {"id": issue.get("id"), SHORT_ID_COLUMN: short}
            for column in columns:
                if column != SHORT_ID_COLUMN:
                    row[column] = format_value(issue.get(column))
            items.append(row)

        return ServiceResult(
            ok=True,
            op=op,
            data={"columns": columns, "items": items, "count": len(items)},
        )

    def template(self, *, defaults: bool = False) -> ServiceResult:
        """The editable template body, blank or filled with attribute defaults."""
        schema = self._repository.schema
        values = Issue(schema=schema).to_mapping() if defaults else {}
        return ServiceResult(ok=True, op="template", data={"template": render_body(schema, values)})

    def reindex(self) -> ServiceResult:
        op = "reindex"
        try:
            count = self._repository.reindex()
        except TacoError as exc:
            return self._failure(op, exc)
        logger.info("Reindexed %d issues", count)
        return ServiceResult(ok=True, op=op, data={"count": count})
