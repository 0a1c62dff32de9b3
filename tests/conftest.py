import pathlib
import shutil
import sys
from typing import Any

import pytest

from gambit.config import FsMode
from gambit.tools.fs import FsBoundary

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"

# Ensure src/ is importable when running tests without installing the package.
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture(autouse=True)
def _isolate_gambit_home(monkeypatch: pytest.MonkeyPatch):
    """Point GAMBIT_HOME at a repo-local sandbox so we never touch the real home."""

    home = PROJECT_ROOT / ".work"
    if home.exists():
        shutil.rmtree(home, ignore_errors=True)
    home.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("GAMBIT_HOME", str(home))
    for name in ("GAMBIT_FS_MODE", "GAMBIT_APPROVAL_POLICY", "GAMBIT_LOG_LEVEL", "GAMBIT_WORKSPACE_ROOT"):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def restricted_boundary(tmp_path: pathlib.Path) -> FsBoundary:
    """Shared restricted FsBoundary rooted in a temporary sandbox."""

    return FsBoundary(FsMode.RESTRICTED, root=tmp_path)


class FakeLogger:
    """Lightweight in-memory fake logger that records calls."""

    def __init__(self, name: str = "fake") -> None:
        self.name = name
        self.info_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self.debug_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []

    def info(self, *args: Any, **kwargs: Any) -> None:
        self.info_calls.append((args, kwargs))

    def debug(self, *args: Any, **kwargs: Any) -> None:
        self.debug_calls.append((args, kwargs))


@pytest.fixture
def fake_logger() -> type[FakeLogger]:
    """Provide FakeLogger class for router tests."""
    return FakeLogger
