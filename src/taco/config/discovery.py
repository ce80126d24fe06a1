"""Repository and config file discovery.

Walk-up finder locates the ``.taco/`` directory, similar to how git finds
``.git/``. The ``TACO_CONFIG`` env var and the ``--config`` CLI flag
override where the configuration file is read from.
"""

from __future__ import annotations

import os
from pathlib import Path

from taco.infrastructure.filesystem import CONFIG_NAME, HOME_DIR

CONFIG_ENV_VAR = "TACO_CONFIG"


def find_repository_root(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) to the directory holding ``.taco/``."""
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / HOME_DIR).is_dir():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def find_config(start: Path | None = None) -> Path | None:
    """Locate the repository configuration file.

    Checks ``TACO_CONFIG`` first, then ``.taco/.taco.toml`` in the
    repository found by walking up from *start*. Returns None if there is
    no such file.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    root = find_repository_root(start)
    if root is None:
        return None
    candidate = root / HOME_DIR / CONFIG_NAME
    return candidate if candidate.is_file() else None
