"""Tests for the reindex command."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from taco.cli import cli
from tests.conftest import create_issue, init_repo


@pytest.mark.usefixtures("_isolated_repo")
class TestReindexCommand:
    def test_reindex(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        init_repo(cli_runner)
        create_issue(cli_runner, tmp_path)
        result = cli_runner.invoke(cli, ["reindex"])
        assert result.exit_code == 0
        assert result.output.strip() == "Indexed 1 issues."

    def test_without_repository(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["reindex"])
        assert result.exit_code == 1
        assert "taco init" in result.output
