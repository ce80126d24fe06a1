"""Tests for repository and config discovery."""

from pathlib import Path

import pytest

from taco.config.discovery import CONFIG_ENV_VAR, find_config, find_repository_root


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


def make_repo(root: Path, *, config: str | None = None) -> Path:
    home = root / ".taco"
    home.mkdir()
    if config is not None:
        (home / ".taco.toml").write_text(config)
    return home


class TestFindRepositoryRoot:
    def test_current_dir(self, tmp_path: Path) -> None:
        make_repo(tmp_path)
        assert find_repository_root(tmp_path) == tmp_path.resolve()

    def test_walks_up(self, tmp_path: Path) -> None:
        make_repo(tmp_path)
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert find_repository_root(child) == tmp_path.resolve()

    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        make_repo(tmp_path)
        child = tmp_path / "sub"
        child.mkdir()
        monkeypatch.chdir(child)
        assert find_repository_root() == tmp_path.resolve()

    def test_file_named_taco_is_not_a_repository(self, tmp_path: Path) -> None:
        (tmp_path / ".taco").write_text("")
        assert find_repository_root(tmp_path) is None


class TestFindConfig:
    def test_in_repository(self, tmp_path: Path) -> None:
        home = make_repo(tmp_path, config="")
        child = tmp_path / "src"
        child.mkdir()
        assert find_config(child) == (home / ".taco.toml").resolve()

    def test_repository_without_config(self, tmp_path: Path) -> None:
        make_repo(tmp_path)
        assert find_config(tmp_path) is None

    def test_no_repository(self, tmp_path: Path) -> None:
        assert find_config(tmp_path) is None

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        make_repo(tmp_path, config="")
        custom = tmp_path / "custom.toml"
        custom.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))
        assert find_config(tmp_path) == custom

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.toml"))
        assert find_config(tmp_path) is None
