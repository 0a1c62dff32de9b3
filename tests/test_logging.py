import logging
from pathlib import Path

from gambit.config import LogLevel
from gambit.logging import configure_run_logger, run_log_path, to_logging_level


def test_run_log_path_respects_base(tmp_path: Path) -> None:
    assert run_log_path("abc", tmp_path) == tmp_path / "abc" / "log.txt"


def test_run_log_path_defaults_to_home(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("GAMBIT_HOME", str(tmp_path))
    assert run_log_path("abc") == tmp_path / "runs" / "abc" / "log.txt"


def test_configure_run_logger_creates_file_and_logs(tmp_path: Path) -> None:
    logger = configure_run_logger("run-1", base_dir=tmp_path, log_level=LogLevel.INFO)

    logger.info("hello world")
    for handler in logger.handlers:
        handler.flush()

    content = run_log_path("run-1", tmp_path).read_text(encoding="utf-8")
    assert "hello world" in content
    assert logger.propagate is False


def test_configure_run_logger_is_idempotent(tmp_path: Path) -> None:
    logger1 = configure_run_logger("run-dup", base_dir=tmp_path)
    logger2 = configure_run_logger("run-dup", base_dir=tmp_path)

    assert logger1 is logger2
    assert len(logger1.handlers) == 1


def test_log_level_mapping(tmp_path: Path) -> None:
    logger = configure_run_logger("run-level", base_dir=tmp_path, log_level=LogLevel.DEBUG)
    assert logger.level == logging.DEBUG


def test_unknown_log_level_string_defaults_to_warning(tmp_path: Path) -> None:
    logger = configure_run_logger("run-unknown", base_dir=tmp_path, log_level="verbose")
    assert logger.level == logging.WARNING


def test_to_logging_level_handles_enum_and_string() -> None:
    assert to_logging_level(LogLevel.ERROR) == logging.ERROR
    assert to_logging_level("debug") == logging.DEBUG
    assert to_logging_level(123) == logging.WARNING  # type: ignore[arg-type]
