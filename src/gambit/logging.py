"""Logging setup for patch runs.

Each run writes to ``$GAMBIT_HOME/runs/<run>/log.txt``. The logger is isolated
(no propagation) and avoids duplicate handlers across repeated
initializations.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gambit.config import LogLevel
from gambit.paths import get_gambit_home


def run_log_path(run_id: str, base_dir: Path | None = None) -> Path:
    directory = (base_dir or get_gambit_home() / "runs") / run_id
    return directory / "log.txt"


def configure_run_logger(
    run_id: str,
    *,
    log_level: LogLevel | str = LogLevel.INFO,
    base_dir: Path | None = None,
) -> logging.Logger:
    """Configure and return a file logger scoped to one run.

    Subsequent calls with the same run_id return the same logger without
    duplicating handlers.
    """

    logger = logging.getLogger(f"gambit.run.{run_id}")

    level_value = to_logging_level(log_level)
    logger.setLevel(level_value)
    logger.propagate = False

    if not logger.handlers:
        path = run_log_path(run_id, base_dir)
        path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setLevel(level_value)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)

    return logger


def to_logging_level(value: LogLevel | str) -> int:
    mapping = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
    }
    if isinstance(value, LogLevel):
        return mapping[value]
    if isinstance(value, str):
        try:
            return mapping[LogLevel(value)]
        except ValueError:
            return logging.WARNING
    return logging.WARNING


__all__ = ["configure_run_logger", "run_log_path", "to_logging_level"]
