"""TacoSettings: one frozen object for flags, environment and config file.

Later sources only fill what earlier ones left unset:

    CLI flags  >  TACO_* variables  >  .taco/.taco.toml  >  defaults

The TOML file is the one named by ``-c``/``TACO_CONFIG`` or the first
``.taco/.taco.toml`` found walking up from the working directory.
"""

from __future__ import annotations

import threading
import tomllib
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from taco.config.discovery import find_config, find_repository_root
from taco.config.models import AttributeOverride, ProfileConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Top-level tables of ``.taco.toml`` as settings values."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path for the TacoSettings construction in progress.
_tls = threading.local()


@contextmanager
def _reading_toml(path: Path | None) -> Iterator[None]:
    _tls.toml_path = path
    try:
        yield
    finally:
        _tls.toml_path = None


class TacoSettings(BaseSettings):
    """Unified settings for the taco CLI.

    Stored on the :class:`~taco.commands._context.AppContext` at the CLI
    root level.

    Attributes:
        repo_root: Directory holding ``.taco/`` (found by walking up from
            the working directory, or the working directory itself).
        config_path: The TOML file in effect, or None.
        editor: Editor command; falls back to ``$VISUAL`` / ``$EDITOR``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "TACO_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved paths ---
    repo_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    editor: str | None = None
    attributes: dict[str, AttributeOverride] = Field(default_factory=dict)
    profile: ProfileConfig = Field(default_factory=ProfileConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml = TomlSettingsSource(settings_cls, getattr(_tls, "toml_path", None))
        return (init_settings, env_settings, toml)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        repo_root: Path | None = None,
        **cli_flags: Any,
    ) -> TacoSettings:
        """Construct settings from a CLI invocation.

        An explicit *config_path* must exist. Otherwise the config file
        is discovered from *repo_root* (or the working directory).
        """
        toml_path: Path | None = None
        if config_path:
            toml_path = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(repo_root)

        resolved_root = repo_root
        if resolved_root is None:
            resolved_root = find_repository_root() or Path.cwd()

        try:
            with _reading_toml(toml_path):
                return cls(repo_root=resolved_root, config_path=toml_path, **cli_flags)
        except ValidationError as exc:
            msg = f"Invalid configuration in {toml_path or 'environment'}: {exc}"
            raise click.ClickException(msg) from exc
