"""EditService — create and update issues through edited template text.

Pipeline: OBTAIN TEXT → PARSE → APPLY → WRITE → RESPOND

Text comes from the editor or a file. With ``--retry`` the editor is
reopened on the recovery file instead of a fresh template.
If any later stage fails, the text is saved to ``.taco/.taco_retry.txt``
so the session can be resumed; the next successful persist deletes it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from taco.domain.errors import RecoveryNotFoundError, TacoError
from taco.domain.issue import Issue
from taco.infrastructure.editor import edit_text, resolve_editor
from taco.infrastructure.filesystem import clear_recovery, load_recovery, save_recovery
from taco.services.base import BaseService
from taco.services.result import ServiceResult

if TYPE_CHECKING:
    from taco.infrastructure.repository import IssueRepository

logger = logging.getLogger(__name__)


class EditService(BaseService):
    """Editor-driven write operations."""

    def __init__(self, repository: IssueRepository, *, editor: str | None = None) -> None:
        super().__init__(repository)
        self._editor = editor

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def new_issue(
        self,
        *,
        defaults: Mapping[str, Any] | None = None,
        text: str | None = None,
        retry: bool = False,
    ) -> ServiceResult:
        """Create an issue.

        Args:
            defaults: Settable values pre-filled into the editor template.
            text: Template text to use instead of launching the editor.
            retry: Reopen the editor on the text saved by a failed attempt.
        """
        op = "new_issue"
        schema = self._repository.schema
        try:
            self._repository.require_home()
            if retry:
                text = edit_text(self._load_recovery(), resolve_editor(self._editor))
            elif text is None:
                # Attribute names may be given as unique prefixes ("prio:2").
                expanded = {
                    schema.expand(k.strip().lower()): v for k, v in (defaults or {}).items()
                }
                template = Issue.new_template(expanded, schema=schema)
                text = edit_text(template, resolve_editor(self._editor))
        except TacoError as exc:
            return self._failure(op, exc)
        if text is None:
            return ServiceResult(ok=True, op=op, data={"aborted": True})

        source = text
        try:
            issue = self._persist(source, lambda: Issue.from_template(source, schema=schema))
        except TacoError as exc:
            return self._recoverable_failure(op, exc, "new")
        return ServiceResult(ok=True, op=op, data={"id": issue.get("id"), "aborted": False})

    def edit_issue(self, issue_id: str, *, retry: bool = False) -> ServiceResult:
        """Edit an existing issue (found by ID or unique prefix)."""
        op = "edit_issue"
        try:
            issue = self._repository.read(issue_id)
            template = self._load_recovery() if retry else issue.to_template()
            text = edit_text(template, resolve_editor(self._editor))
        except TacoError as exc:
            return self._failure(op, exc)
        if text is None:
            return ServiceResult(ok=True, op=op, data={"id": issue.get("id"), "aborted": True})

        source = text
        before = len(issue.changelog)
        try:
            self._persist(source, lambda: issue.update_from_template(source))
        except TacoError as exc:
            return self._recoverable_failure(op, exc, f"edit {issue.get('id')}")
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": issue.get("id"),
                "aborted": False,
                "changes": len(issue.changelog) - before,
            },
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load_recovery(self) -> str:
        text = load_recovery(self._repository.retry_path)
        if text is None:
            raise RecoveryNotFoundError("No previous Issue edit session was found.")
        return text

    def _persist(self, text: str, build: Callable[[], Issue]) -> Issue:
        """Build the issue and write it; save *text* for ``--retry`` on failure."""
        try:
            issue = build()
            self._repository.write(issue)
        except TacoError:
            save_recovery(self._repository.retry_path, text)
            logger.info("Saved edit session to %s", self._repository.retry_path)
            raise
        clear_recovery(self._repository.retry_path)
        return issue

    def _recoverable_failure(self, op: str, exc: TacoError, command: str) -> ServiceResult:
        hint = f"Your edits were saved. Run `taco {command} --retry` to resume."
        return self._failure(
            op,
            exc,
            message=f"{exc}\n{hint}",
            detail={"recovery": str(self._repository.retry_path)},
        )
