"""Unified diff parsing: path normalization, target validation and file splitting."""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

DEV_NULL = "/dev/null"

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_FILE_HEADERS = ("--- ", "+++ ")
_SECTION_HEADERS = ("@@ ", "--- ", "+++ ")


class PatchError(Exception):
    """Base class for every patch failure."""


class PatchParseError(PatchError):
    """Raised when a patch contains nothing that can be applied."""


class PathViolationError(PatchError):
    """Raised when a patch header names a file outside the allowed targets."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Patch references unexpected file path: {path}")
        self.path = path


class HunkHeaderError(PatchError):
    """Raised when an ``@@`` line does not follow the hunk header grammar."""

    def __init__(self, header: str) -> None:
        super().__init__(f"Invalid hunk header: {header}")
        self.header = header


@dataclass(frozen=True, slots=True)
class Hunk:
    old_start: int
    old_count: int | None
    new_start: int
    new_count: int | None
    lines: list[str]

    @property
    def start_index(self) -> int:
        """Zero-based offset of the first original line the hunk touches."""

        return max(self.old_start - 1, 0)


@dataclass(frozen=True, slots=True)
class FilePatch:
    patch_text: str
    raw_old_path: str | None
    raw_new_path: str | None
    old_path: str | None
    new_path: str | None


def normalize_patch_path(raw_path: str | None) -> str | None:
    """Canonicalize a header path; ``None`` means there is no file on that side."""

    if not raw_path:
        return None
    cleaned = raw_path.replace("\\", "/")
    if cleaned.startswith("./"):
        cleaned = cleaned[2:]
    cleaned = cleaned.strip()
    if not cleaned or cleaned == DEV_NULL:
        return None
    if cleaned.startswith(("a/", "b/")):
        return cleaned[2:]
    return cleaned


def sanitize_patch_targets(patch_text: str, targets: str | Sequence[str]) -> None:
    """Reject patches whose ``---``/``+++`` headers name files outside ``targets``."""

    candidates = [targets] if isinstance(targets, str) else list(targets)
    accepted: set[str] = set()
    for target in candidates:
        if not target:
            continue
        normalized = normalize_patch_path(target)
        if normalized:
            accepted.update((normalized, f"a/{normalized}", f"b/{normalized}"))

    for line in patch_text.split("\n"):
        if not line.startswith(_FILE_HEADERS):
            continue
        candidate = _header_path(line)
        if not candidate or candidate == DEV_NULL:
            continue
        normalized_candidate = normalize_patch_path(candidate)
        if normalized_candidate is None:
            raise PathViolationError(candidate)
        if normalized_candidate not in accepted and candidate not in accepted:
            raise PathViolationError(candidate)


def split_unified_diff_by_file(patch_text: str) -> list[FilePatch]:
    """Split a multi-file unified diff into per-file segments in source order."""

    lines = patch_text.replace("\r", "").split("\n")
    patches: list[FilePatch] = []
    buffer: list[str] = []
    raw_old: str | None = None
    raw_new: str | None = None
    recording = False

    def flush() -> None:
        nonlocal buffer, raw_old, raw_new, recording
        if recording:
            patches.append(
                FilePatch(
                    patch_text="\n".join(buffer),
                    raw_old_path=raw_old,
                    raw_new_path=raw_new,
                    old_path=normalize_patch_path(raw_old),
                    new_path=normalize_patch_path(raw_new),
                )
            )
        buffer = []
        raw_old = None
        raw_new = None
        recording = False

    for line in lines:
        if line.startswith("diff --git "):
            flush()
            buffer = [line]
            recording = True
            continue

        if recording:
            buffer.append(line)
        elif line.startswith(_SECTION_HEADERS):
            buffer = [line]
            recording = True
        else:
            continue

        if line.startswith("--- "):
            raw_old = _header_path(line)
        elif line.startswith("+++ "):
            raw_new = _header_path(line)

    flush()
    return [p for p in patches if p.raw_old_path is not None or p.raw_new_path is not None]


def iter_hunks(patch_lines: Sequence[str]) -> Iterator[Hunk]:
    """Yield hunks in file order, collecting each body up to the next header.

    Lines outside a hunk (file headers, ``diff --git`` and git metadata) are
    skipped. Body lines are passed through untouched; classifying them is left
    to the applier so errors surface in the order the lines are consumed.
    """

    idx = 0
    total = len(patch_lines)
    while idx < total:
        line = patch_lines[idx]
        idx += 1
        if not line.startswith("@@ "):
            continue
        match = _HUNK_HEADER.match(line)
        if not match:
            raise HunkHeaderError(line)

        body: list[str] = []
        while idx < total and not patch_lines[idx].startswith(_SECTION_HEADERS):
            body.append(patch_lines[idx])
            idx += 1

        yield Hunk(
            old_start=int(match.group(1)),
            old_count=_optional_int(match.group(2)),
            new_start=int(match.group(3)),
            new_count=_optional_int(match.group(4)),
            lines=body,
        )


def _header_path(line: str) -> str:
    return line[4:].split("\t", 1)[0].strip()


def _optional_int(value: str | None) -> int | None:
    return int(value) if value is not None else None


__all__ = [
    "DEV_NULL",
    "PatchError",
    "PatchParseError",
    "PathViolationError",
    "HunkHeaderError",
    "Hunk",
    "FilePatch",
    "normalize_patch_path",
    "sanitize_patch_targets",
    "split_unified_diff_by_file",
    "iter_hunks",
]
