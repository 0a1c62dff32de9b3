"""Common path utilities for gambit."""

from __future__ import annotations

import os
from pathlib import Path


def get_gambit_home() -> Path:
    """Return the base gambit directory, honoring GAMBIT_HOME if set."""

    env_path = os.environ.get("GAMBIT_HOME")
    return Path(env_path).expanduser() if env_path else Path.home() / ".gambit"


def default_config_path() -> Path:
    return get_gambit_home() / "config.toml"


__all__ = ["get_gambit_home", "default_config_path"]
