"""Tests for the new command."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from taco.cli import cli
from taco.commands.new import split_new_args
from tests.conftest import init_repo, issue_text

Installer = Callable[[Callable[[str], str | None]], list[str]]


class TestSplitNewArgs:
    def test_defaults_and_file(self) -> None:
        assert split_new_args(("kind:Task", "prio:2")) == ({"kind": "Task", "prio": "2"}, None)
        assert split_new_args(("issue.txt",)) == ({}, "issue.txt")

    def test_value_may_contain_colons(self) -> None:
        assert split_new_args(("summary:a:b",)) == ({"summary": "a:b"}, None)


@pytest.mark.usefixtures("_isolated_repo")
class TestNewCommand:
    def test_from_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        init_repo(cli_runner)
        path = tmp_path / "issue.txt"
        path.write_text(issue_text(summary="Filed"))
        result = cli_runner.invoke(cli, ["new", str(path)])
        assert result.exit_code == 0, result.output
        assert result.output.startswith("Created Issue ")
        issue_id = result.output.split()[-1]
        assert (tmp_path / ".taco" / issue_id).is_file()

    def test_from_stdin(self, cli_runner: CliRunner) -> None:
        init_repo(cli_runner)
        result = cli_runner.invoke(cli, ["--json", "new", "-"], input=issue_text())
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["data"]["aborted"] is False

    def test_from_editor(self, cli_runner: CliRunner, fake_editor: Installer) -> None:
        init_repo(cli_runner)
        shown = fake_editor(lambda template: issue_text())
        result = cli_runner.invoke(cli, ["new"])
        assert result.exit_code == 0, result.output
        assert "Created Issue" in result.output
        # Configured defaults fill the fresh template.
        assert "Kind        : Defect" in shown[0]
        assert "Status      : Open" in shown[0]
        assert "Priority    : 3" in shown[0]

    def test_defaults(self, cli_runner: CliRunner, fake_editor: Installer) -> None:
        init_repo(cli_runner)
        shown = fake_editor(lambda template: issue_text())
        result = cli_runner.invoke(cli, ["new", "kind:Task", "prio:1"])
        assert result.exit_code == 0, result.output
        assert "Kind        : Task" in shown[0]
        assert "Priority    : 1" in shown[0]

    def test_aborted(self, cli_runner: CliRunner, fake_editor: Installer) -> None:
        init_repo(cli_runner)
        fake_editor(lambda template: None)
        result = cli_runner.invoke(cli, ["new"])
        assert result.exit_code == 0
        assert result.output.strip() == "Aborted."

    def test_invalid_value_then_retry(
        self, cli_runner: CliRunner, tmp_path: Path, fake_editor: Installer
    ) -> None:
        init_repo(cli_runner)
        path = tmp_path / "issue.txt"
        path.write_text(issue_text(kind="Bogus"))
        result = cli_runner.invoke(cli, ["new", str(path)])
        assert result.exit_code == 1
        assert "ERROR:" in result.output
        assert "taco new --retry" in result.output
        assert (tmp_path / ".taco" / ".taco_retry.txt").is_file()

        fake_editor(lambda t: t.replace("Kind        : Bogus", "Kind        : Task"))
        result = cli_runner.invoke(cli, ["new", "--retry"])
        assert result.exit_code == 0, result.output
        assert "Created Issue" in result.output
        assert not (tmp_path / ".taco" / ".taco_retry.txt").exists()

    def test_retry_without_session(self, cli_runner: CliRunner) -> None:
        init_repo(cli_runner)
        result = cli_runner.invoke(cli, ["new", "--retry"])
        assert result.exit_code == 1
        assert "No previous Issue edit session was found." in result.output

    def test_multiple_files(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["new", "a.txt", "b.txt"])
        assert result.exit_code == 2
        assert "Multiple filenames given." in result.output

    def test_defaults_with_file(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["new", "a.txt", "kind:Task"])
        assert result.exit_code == 2
        assert "Cannot set defaults when creating Issue from file." in result.output

    def test_retry_with_arguments(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["new", "--retry", "kind:Task"])
        assert result.exit_code == 2

    def test_missing_file(self, cli_runner: CliRunner) -> None:
        init_repo(cli_runner)
        result = cli_runner.invoke(cli, ["new", "nope.txt"])
        assert result.exit_code == 1
        assert "nope.txt" in result.output

    def test_without_repository(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "issue.txt"
        path.write_text(issue_text())
        result = cli_runner.invoke(cli, ["new", str(path)])
        assert result.exit_code == 1
        assert "taco init" in result.output
        assert not (tmp_path / ".taco").exists()
