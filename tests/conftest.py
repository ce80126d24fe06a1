"""Shared pytest fixtures and test helpers for taco tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from taco.cli import cli
from taco.domain.issue import Issue, build_issue_schema
from taco.domain.schema import Schema
from taco.infrastructure.repository import IssueRepository

# Fixed timestamps well in the past, so "updated_at advanced" is observable
# even within the same wall-clock second.
OLD_CREATED = datetime(2020, 1, 1, 12, 0, 0, tzinfo=UTC)
OLD_UPDATED = datetime(2020, 1, 2, 12, 0, 0, tzinfo=UTC)

ISSUE_TEXT = """\
Summary     : {summary}
Kind        : {kind}
Status      : {status}
Priority    : {priority}
Owner       : {owner}

---
{description}
---
"""


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def schema() -> Schema:
    """A fresh Issue schema, independent of the process default."""
    return build_issue_schema()


@pytest.fixture
def repository(tmp_path: Path, schema: Schema) -> Generator[IssueRepository]:
    """Initialized repository in a temp directory."""
    repo = IssueRepository(tmp_path, schema=schema)
    repo.init()
    try:
        yield repo
    finally:
        repo.close()


@pytest.fixture
def _isolated_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI works on an isolated repository.

    Use via ``@pytest.mark.usefixtures("_isolated_repo")`` on command test
    classes. Environment overrides that would leak in are removed.
    """
    monkeypatch.chdir(tmp_path)
    for var in ("TACO_CONFIG", "TACO_EDITOR", "VISUAL", "EDITOR"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fake_editor(monkeypatch: pytest.MonkeyPatch) -> Callable[[Callable[[str], str | None]], list[str]]:
    """Replace the editor session with a function of the template text.

    Returns an installer; the list it returns collects every template the
    "editor" was shown.
    """

    def install(edit: Callable[[str], str | None]) -> list[str]:
        shown: list[str] = []

        def _edit_text(template: str, editor: str) -> str | None:
            shown.append(template)
            return edit(template)

        monkeypatch.setenv("EDITOR", "fake-editor")
        monkeypatch.setattr("taco.services.edit.edit_text", _edit_text)
        return shown

    return install


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def issue_text(**overrides: Any) -> str:
    """Filled-in template text for a valid issue."""
    values = {
        "summary": "Something broke",
        "kind": "Defect",
        "status": "Open",
        "priority": 3,
        "owner": "mike",
        "description": "It broke.",
    }
    values.update(overrides)
    return ISSUE_TEXT.format(**values)


def make_issue(schema: Schema, **overrides: Any) -> Issue:
    """A valid, persisted-looking issue with fixed old timestamps."""
    attributes: dict[str, Any] = {
        "created_at": OLD_CREATED,
        "updated_at": OLD_UPDATED,
        "summary": "Something broke",
        "kind": "Defect",
        "status": "Open",
        "priority": 3,
        "owner": "mike",
        "description": "It broke.",
    }
    attributes.update(overrides)
    return Issue(attributes, schema=schema)


def init_repo(runner: CliRunner) -> None:
    """Run ``taco init`` in the current directory."""
    result = runner.invoke(cli, ["init"])
    assert result.exit_code == 0, result.output


def create_issue(runner: CliRunner, directory: Path, **overrides: Any) -> str:
    """Create an issue from a template file via the CLI and return its ID."""
    path = directory / "issue.txt"
    path.write_text(issue_text(**overrides), encoding="utf-8")
    result = runner.invoke(cli, ["--json", "new", str(path)])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)["data"]["id"]
