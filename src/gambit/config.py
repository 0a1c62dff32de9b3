"""Configuration models and enums for gambit.

Settings resolve in order: CLI overrides, ``GAMBIT_*`` environment variables,
``config.toml``, then defaults.
"""

from __future__ import annotations

import os
import stat
import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, field_validator

from gambit.paths import default_config_path


class FsMode(str, Enum):
    RESTRICTED = "restricted"
    UNRESTRICTED = "unrestricted"


class ApprovalPolicy(str, Enum):
    NEVER = "never"
    ON_REQUEST = "on-request"
    ALWAYS = "always"


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Settings(BaseModel):
    """Resolved gambit settings."""

    model_config = ConfigDict(frozen=True, validate_default=True, extra="forbid")

    fs_mode: FsMode = FsMode.RESTRICTED
    approval_policy: ApprovalPolicy = ApprovalPolicy.ON_REQUEST
    log_level: LogLevel = LogLevel.INFO
    workspace_root: Path | None = None

    @field_validator("workspace_root", mode="before")
    @classmethod
    def _clean_workspace_root(cls, value: Any) -> Any:
        if isinstance(value, str):
            stripped = value.strip()
            return Path(stripped).expanduser() if stripped else None
        return value


EXPECTED_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600

ENV_PREFIX = "GAMBIT_"


def load_settings(
    cli_overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    config_path: Path | str | None = None,
    *,
    create_if_missing: bool = False,
) -> Settings:
    env = os.environ if env is None else env
    cli_overrides = cli_overrides or {}
    path = Path(config_path) if config_path else default_config_path()

    if not path.exists() and create_if_missing:
        write_config(Settings(), path)

    config_data: dict[str, Any] = {}
    if path.exists():
        _ensure_permissions(path)
        config_data = _read_toml(path)

    defaults = Settings()

    fs_mode = _first_value(
        _clean_str(cli_overrides.get("fs_mode")),
        _clean_str(env.get(f"{ENV_PREFIX}FS_MODE")),
        _clean_str(_get_config_value(config_data, "runtime", "fs_mode")),
    )
    approval_policy = _first_value(
        _clean_str(cli_overrides.get("approval_policy")),
        _clean_str(env.get(f"{ENV_PREFIX}APPROVAL_POLICY")),
        _clean_str(_get_config_value(config_data, "runtime", "approval_policy")),
    )
    log_level = _first_value(
        _clean_str(cli_overrides.get("log_level")),
        _clean_str(env.get(f"{ENV_PREFIX}LOG_LEVEL")),
        _clean_str(_get_config_value(config_data, "logging", "log_level")),
    )
    workspace_root = _first_value(
        _clean_str(cli_overrides.get("workspace_root")),
        _clean_str(env.get(f"{ENV_PREFIX}WORKSPACE_ROOT")),
        _clean_str(_get_config_value(config_data, "runtime", "workspace_root")),
    )

    return Settings(
        fs_mode=cast(FsMode, _coerce_enum(fs_mode, FsMode, defaults.fs_mode)),
        approval_policy=cast(ApprovalPolicy, _coerce_enum(approval_policy, ApprovalPolicy, defaults.approval_policy)),
        log_level=cast(LogLevel, _coerce_enum(log_level, LogLevel, defaults.log_level)),
        workspace_root=workspace_root,
    )


def write_config(settings: Settings, config_path: Path | str | None = None) -> Path:
    path = Path(config_path) if config_path else default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    sections: list[str] = []

    runtime_section: dict[str, Any] = {
        "fs_mode": settings.fs_mode,
        "approval_policy": settings.approval_policy,
        "workspace_root": str(settings.workspace_root) if settings.workspace_root else None,
    }
    _append_section(sections, "runtime", runtime_section)
    _append_section(sections, "logging", {"log_level": settings.log_level})

    content = "\n\n".join(sections) + "\n"
    path.write_text(content, encoding="utf-8")
    path.chmod(EXPECTED_FILE_MODE)
    return path


def _ensure_permissions(path: Path) -> None:
    current_mode = stat.S_IMODE(path.stat().st_mode)
    if current_mode != EXPECTED_FILE_MODE:
        path.chmod(EXPECTED_FILE_MODE)


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_config_value(config: Mapping[str, Any], section: str, key: str) -> Any:
    section_data = config.get(section)
    if not isinstance(section_data, dict):
        return None
    return section_data.get(key)


def _clean_str(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    return value


def _first_value(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _coerce_enum(value: Any, enum_cls: type[Enum], default: Enum) -> Enum:
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value)
        except ValueError:
            return default
    return default


def _append_section(parts: list[str], name: str, values: Mapping[str, Any]) -> None:
    filtered = {k: v for k, v in values.items() if v is not None}
    if not filtered:
        return
    lines = [f"[{name}]"]
    for key, val in filtered.items():
        if isinstance(val, Enum):
            lines.append(f'{key} = "{val.value}"')
        elif isinstance(val, str):
            escaped = val.replace("\\", "\\\\").replace('"', '\\"')
            lines.append(f'{key} = "{escaped}"')
        else:
            lines.append(f"{key} = {val}")
    parts.append("\n".join(lines))


__all__ = [
    "Settings",
    "FsMode",
    "ApprovalPolicy",
    "LogLevel",
    "load_settings",
    "write_config",
]
