"""Tests for IssueService — init, show, list, template, reindex."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from taco.config.models import DEFAULT_CONFIG_TOML, ProfileConfig
from taco.domain.schema import Schema
from taco.infrastructure.repository import IssueRepository
from taco.services.issues import IssueService, issue_payload
from tests.conftest import make_issue


def created(day: int) -> datetime:
    return datetime(2021, 1, day, tzinfo=UTC)


@pytest.fixture
def populated(repository: IssueRepository, schema: Schema) -> IssueRepository:
    repository.write(
        [
            make_issue(schema, id="abc123xyz", created_at=created(1), summary="one", priority=2),
            make_issue(schema, id="abc123xyt", created_at=created(2), summary="two", priority=1),
            make_issue(
                schema, id="def456uvw", created_at=created(3), summary="three", kind="Task"
            ),
        ]
    )
    return repository


class TestInit:
    def test_creates_repository_and_config(self, tmp_path: Path, schema: Schema) -> None:
        repo = IssueRepository(tmp_path, schema=schema)
        result = IssueService(repo).init()
        repo.close()
        assert result.ok
        assert result.data["path"] == str(tmp_path / ".taco")
        config = tmp_path / ".taco" / ".taco.toml"
        assert result.data["config"] == str(config)
        assert config.read_text() == DEFAULT_CONFIG_TOML

    def test_already_initialized(self, repository: IssueRepository) -> None:
        result = IssueService(repository).init()
        assert not result.ok
        assert result.error.code == "REPOSITORY_ERROR"
        assert not repository.config_path.exists()


class TestShow:
    def test_by_prefix(self, populated: IssueRepository) -> None:
        result = IssueService(populated).show(["def"])
        assert result.ok
        assert result.data["count"] == 1
        shown = result.data["issues"][0]
        assert shown["issue"]["id"] == "def456uvw"
        assert "Summary     : three" in shown["text"]

    def test_several_ids_keep_order(self, populated: IssueRepository) -> None:
        result = IssueService(populated).show(["def", "abc123xyz"])
        assert [i["issue"]["id"] for i in result.data["issues"]] == ["def456uvw", "abc123xyz"]

    def test_not_found(self, populated: IssueRepository) -> None:
        result = IssueService(populated).show(["zzz"])
        assert not result.ok
        assert result.error.code == "NOT_FOUND"

    def test_ambiguous(self, populated: IssueRepository) -> None:
        result = IssueService(populated).show(["abc"])
        assert result.error.code == "AMBIGUOUS_ID"
        assert len(result.error.detail["candidates"]) == 2

    def test_all_with_filters(self, populated: IssueRepository) -> None:
        result = IssueService(populated).show(all_issues=True, filters=["kind:defect"])
        assert [i["issue"]["id"] for i in result.data["issues"]] == ["abc123xyz", "abc123xyt"]

    def test_changelog(self, repository: IssueRepository, schema: Schema) -> None:
        issue = make_issue(schema, id="logged")
        issue.set("owner", "sam")
        repository.write(issue)
        plain = IssueService(repository).show(["logged"]).data["issues"][0]["text"]
        full = IssueService(repository).show(["logged"], changelog=True).data["issues"][0]["text"]
        assert "mike => sam" not in plain
        assert "owner : mike => sam" in full


class TestIssuePayload:
    def test_shape(self, schema: Schema) -> None:
        payload = issue_payload(make_issue(schema, id="abc"))
        assert set(payload) == {"issue", "changelog", "text"}
        assert payload["issue"]["created_at"] == "2020-01-01T12:00:00Z"

    def test_invalid_issue_still_renders(self, schema: Schema) -> None:
        payload = issue_payload(make_issue(schema, id="abc", summary=""))
        assert payload["issue"]["summary"] == ""


class TestListIssues:
    def test_default_profile(self, populated: IssueRepository) -> None:
        result = IssueService(populated).list_issues()
        assert result.ok
        assert result.data["columns"] == ["short_id", "priority", "summary"]
        assert result.data["count"] == 3
        assert result.data["items"][0] == {
            "id": "abc123xyz",
            "short_id": "abc123xyz",
            "priority": "2",
            "summary": "one",
        }
        assert [i["short_id"] for i in result.data["items"]] == [
            "abc123xyz",
            "abc123xyt",
            "def456uv",
        ]

    def test_filters(self, populated: IssueRepository) -> None:
        result = IssueService(populated).list_issues(["kind:task"])
        assert [i["id"] for i in result.data["items"]] == ["def456uvw"]
        assert result.data["items"][0]["short_id"] == "def456uv"

    def test_sort_override(self, populated: IssueRepository) -> None:
        result = IssueService(populated).list_issues(sort=["priority", "id"])
        assert [i["summary"] for i in result.data["items"]] == ["two", "one", "three"]

    def test_sort_by_short_id(self, populated: IssueRepository) -> None:
        result = IssueService(populated).list_issues(sort=["short_id"])
        assert [i["id"] for i in result.data["items"]] == ["abc123xyt", "abc123xyz", "def456uvw"]

    def test_unknown_sort_key(self, populated: IssueRepository) -> None:
        result = IssueService(populated).list_issues(sort=["colour"])
        assert not result.ok
        assert result.error.code == "UNKNOWN_ATTRIBUTE"
        assert "colour" in result.error.message

    def test_profile(self, populated: IssueRepository) -> None:
        profile = ProfileConfig(sort=["summary"], columns=["id", "owner"], filters=["kind:defect"])
        result = IssueService(populated, profile=profile).list_issues()
        assert result.data["columns"] == ["id", "owner"]
        assert [i["summary"] for i in result.data["items"]] == ["one", "two"]
        assert "summary" not in result.data["items"][0]
        assert result.data["items"][0]["owner"] == "mike"

    def test_explicit_filters_replace_profile_filters(self, populated: IssueRepository) -> None:
        profile = ProfileConfig(filters=["kind:defect"])
        result = IssueService(populated, profile=profile).list_issues(["kind:task"])
        assert result.data["count"] == 1

    def test_invalid_filter(self, populated: IssueRepository) -> None:
        result = IssueService(populated).list_issues(["kind"])
        assert result.error.code == "INVALID_FILTER"

    def test_empty(self, repository: IssueRepository) -> None:
        result = IssueService(repository).list_issues()
        assert result.ok
        assert result.data["items"] == []


class TestTemplate:
    def test_blank(self, repository: IssueRepository) -> None:
        template = IssueService(repository).template().data["template"]
        assert template.startswith("# Lines beginning with # will be ignored.")
        assert "Priority    :\n" in template

    def test_defaults(self, repository: IssueRepository, schema: Schema) -> None:
        schema.update("kind", default="Defect")
        template = IssueService(repository).template(defaults=True).data["template"]
        assert "Kind        : Defect" in template
        assert "Priority    : 0" in template


class TestReindex:
    def test_count(self, populated: IssueRepository) -> None:
        result = IssueService(populated).reindex()
        assert result.ok
        assert result.data == {"count": 3}

    def test_missing_repository(self, tmp_path: Path, schema: Schema) -> None:
        result = IssueService(IssueRepository(tmp_path, schema=schema)).reindex()
        assert result.error.code == "REPOSITORY_ERROR"
