"""Workspace boundary for patch targets."""

from __future__ import annotations

from pathlib import Path

from gambit.config import FsMode


class FsViolationError(Exception):
    """Raised when a patch path escapes the workspace root."""


class FsBoundary:
    """Resolve patch paths against a workspace root and keep them inside it."""

    def __init__(self, fs_mode: FsMode, root: Path | None = None) -> None:
        self.fs_mode = fs_mode
        if fs_mode == FsMode.RESTRICTED:
            self.root: Path | None = (root or Path.cwd()).resolve()
        else:
            self.root = None

    def root_path(self) -> Path | None:
        return self.root

    def sanitize_path(self, raw_path: str | Path) -> Path:
        """Return an absolute, resolved path, rejecting escapes in restricted mode.

        Relative paths are anchored at the root; symlinks are resolved before
        the containment check.
        """

        path = Path(raw_path)
        if not path.is_absolute():
            path = (self.root or Path.cwd()) / path
        resolved = path.resolve(strict=False)
        if not self._is_within(resolved):
            raise FsViolationError(f"path '{raw_path}' escapes restricted root {self.root}")
        return resolved

    def _is_within(self, path: Path) -> bool:
        if self.root is None:
            return True
        try:
            path.relative_to(self.root)
            return True
        except ValueError:
            return False


__all__ = ["FsBoundary", "FsViolationError"]
