"""Hunk application and transactional multi-file patching within a boundary."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import cast

from pydantic import Field

from gambit.tools.base import Tool, ToolRequest, ToolResponse
from gambit.tools.fs import FsBoundary
from gambit.tools.patch_parser import (
    FilePatch,
    PatchError,
    PatchParseError,
    iter_hunks,
    sanitize_patch_targets,
    split_unified_diff_by_file,
)
from gambit.tools.registry import ToolRegistration

logger = logging.getLogger(__name__)

NO_NEWLINE_MARKER = "\\ No newline"


class PatchApplyError(PatchError):
    """Raised when a patch cannot be applied cleanly."""


class LengthExceededError(PatchApplyError):
    def __init__(self) -> None:
        super().__init__("Patch hunk exceeds original file length.")


class ContextMismatchError(PatchApplyError):
    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f'Context mismatch while applying patch.\nExpected: "{expected}"\nActual: "{actual}"')
        self.expected = expected
        self.actual = actual


class DeletionMismatchError(PatchApplyError):
    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            f'Deletion mismatch while applying patch.\nExpected to delete: "{expected}"\nFound: "{actual}"'
        )
        self.expected = expected
        self.actual = actual


class UnsupportedLineError(PatchApplyError):
    def __init__(self, line: str) -> None:
        super().__init__(f"Unsupported patch line: {line}")
        self.line = line


class PatchAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RENAME = "rename"


@dataclass(frozen=True, slots=True)
class PatchResult:
    action: PatchAction
    path: str
    target: Path
    bytes_written: int
    old_path: str | None = None
    dry_run: bool = False

    @property
    def message(self) -> str:
        if self.action == PatchAction.CREATE:
            return f"Created {self.path} via patch."
        if self.action == PatchAction.DELETE:
            return f"Deleted {self.path} via patch."
        if self.action == PatchAction.RENAME:
            return f"Moved {self.old_path} -> {self.path} via patch."
        return f"Updated {self.path} via patch."


@dataclass(frozen=True, slots=True)
class _PlannedChange:
    action: PatchAction
    path: str
    old_path: str | None
    target: Path
    source: Path | None
    content: str | None


def apply_unified_diff(base_text: str, diff_text: str) -> str:
    """Apply one file's hunks to ``base_text`` and return the new text.

    Hunk starts are absolute offsets into the original text. Context and
    deletion lines must match the source exactly; there is no fuzzing.
    """

    source = base_text.replace("\r", "").split("\n")
    output: list[str] = []
    cursor = 0

    for hunk in iter_hunks(diff_text.replace("\r", "").split("\n")):
        while cursor < hunk.start_index:
            if cursor >= len(source):
                raise LengthExceededError()
            output.append(source[cursor])
            cursor += 1

        for line in hunk.lines:
            if not line or line.startswith(NO_NEWLINE_MARKER):
                continue
            marker, payload = line[0], line[1:]
            if marker == " ":
                actual = source[cursor] if cursor < len(source) else ""
                if payload != actual:
                    raise ContextMismatchError(payload, actual)
                output.append(actual)
                cursor += 1
            elif marker == "-":
                actual = source[cursor] if cursor < len(source) else ""
                if payload != actual:
                    raise DeletionMismatchError(payload, actual)
                cursor += 1
            elif marker == "+":
                output.append(payload)
            elif not marker.strip():
                output.append("")
            else:
                raise UnsupportedLineError(line)

    output.extend(source[cursor:])
    return "\n".join(output)


def classify_patch(file_patch: FilePatch) -> PatchAction:
    """Infer the file operation from which sides of the patch name a file."""

    if file_patch.old_path is None and file_patch.new_path is not None:
        return PatchAction.CREATE
    if file_patch.new_path is None:
        return PatchAction.DELETE
    if file_patch.old_path != file_patch.new_path:
        return PatchAction.RENAME
    return PatchAction.UPDATE


def apply_patch(
    boundary: FsBoundary,
    patch_text: str,
    *,
    targets: str | Sequence[str] | None = None,
    dry_run: bool = False,
) -> list[PatchResult]:
    """Apply a multi-file unified diff inside ``boundary``.

    Every file's new content is computed before anything is written, so a
    failing hunk in any file leaves the workspace untouched.
    """

    if targets is not None:
        sanitize_patch_targets(patch_text, targets)

    file_patches = split_unified_diff_by_file(patch_text)
    if not file_patches:
        raise PatchParseError("no file patches found")

    pending: dict[Path, str | None] = {}
    plan = [_plan_change(boundary, file_patch, pending) for file_patch in file_patches]

    results: list[PatchResult] = []
    for change in plan:
        if not dry_run:
            _execute_change(change)
        written = len(change.content.encode("utf-8")) if change.content is not None else 0
        results.append(
            PatchResult(
                action=change.action,
                path=change.path,
                target=change.target,
                bytes_written=written,
                old_path=change.old_path,
                dry_run=dry_run,
            )
        )
    return results


def _plan_change(boundary: FsBoundary, file_patch: FilePatch, pending: dict[Path, str | None]) -> _PlannedChange:
    action = classify_patch(file_patch)
    logger.debug("planning %s for %s -> %s", action.value, file_patch.old_path, file_patch.new_path)

    if action == PatchAction.CREATE:
        path = cast(str, file_patch.new_path)
        target = boundary.sanitize_path(path)
        if _current_text(target, pending) is not None:
            raise PatchApplyError(f"cannot create {path}: file already exists")
        content = apply_unified_diff("", file_patch.patch_text)
        pending[target] = content
        return _PlannedChange(action, path, None, target, None, content)

    old_path = cast(str, file_patch.old_path)
    source = boundary.sanitize_path(old_path)
    original = _current_text(source, pending)
    if original is None:
        raise PatchApplyError(f"cannot {action.value} {old_path}: file does not exist")
    content = apply_unified_diff(original, file_patch.patch_text)

    if action == PatchAction.DELETE:
        pending[source] = None
        return _PlannedChange(action, old_path, None, source, source, None)

    if action == PatchAction.RENAME:
        path = cast(str, file_patch.new_path)
        target = boundary.sanitize_path(path)
        if target != source and _current_text(target, pending) is not None:
            raise PatchApplyError(f"cannot move {old_path} -> {path}: destination exists")
        pending[source] = None
        pending[target] = content
        return _PlannedChange(action, path, old_path, target, source, content)

    pending[source] = content
    return _PlannedChange(action, old_path, None, source, source, content)


def _current_text(path: Path, pending: dict[Path, str | None]) -> str | None:
    """Return the text a path holds at this point of the plan, ``None`` if absent."""

    if path in pending:
        return pending[path]
    if not path.exists():
        return None
    if path.is_dir():
        raise PatchApplyError(f"target {path} is a directory")
    return path.read_text(encoding="utf-8")


def _execute_change(change: _PlannedChange) -> None:
    if change.content is not None:
        _atomic_write(change.target, change.content)
    if change.source is not None and (change.content is None or change.source != change.target):
        change.source.unlink(missing_ok=True)
    logger.info("%s %s", change.action.value, change.target)


def _atomic_write(target: Path, content: str) -> None:
    tmp_path: Path | None = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=target.parent, delete=False) as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
            tmp_path = Path(tmp.name)
        tmp_path.replace(target)
    except Exception:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise


class ApplyPatchInput(ToolRequest):
    patch: str = Field(description="Unified diff text, optionally covering several files.")
    path: str | list[str] | None = Field(
        default=None,
        description="Files the patch is allowed to touch. Any other header path rejects the patch.",
    )


class PatchResultModel(ToolResponse):
    action: PatchAction = Field(description="Operation performed on the file.")
    path: str = Field(description="Patched file path relative to the workspace.")
    old_path: str | None = Field(default=None, description="Previous path for moved files.")
    bytes_written: int = Field(description="Bytes written to the file.")
    message: str = Field(description="Human readable summary.")


class ApplyPatchOutput(ToolResponse):
    results: list[PatchResultModel] = Field(description="Per-file patch results.")


def _convert_results(results: list[PatchResult]) -> ApplyPatchOutput:
    return ApplyPatchOutput(
        results=[
            PatchResultModel(
                action=res.action,
                path=res.path,
                old_path=res.old_path,
                bytes_written=res.bytes_written,
                message=res.message,
            )
            for res in results
        ]
    )


class ApplyPatchTool(Tool[ApplyPatchInput, ApplyPatchOutput]):
    name = "apply_patch"
    description = "Apply a unified diff to workspace files"
    InputModel = ApplyPatchInput
    OutputModel = ApplyPatchOutput
    requires_approval = True

    def __init__(self, boundary: FsBoundary, *, dry_run: bool = False) -> None:
        self.boundary = boundary
        self.dry_run = dry_run

    def execute(self, request: ApplyPatchInput) -> ApplyPatchOutput:
        results = apply_patch(self.boundary, request.patch, targets=request.path, dry_run=self.dry_run)
        return _convert_results(results)


def tool_registrations(boundary: FsBoundary) -> list[ToolRegistration]:
    def _end_event(validated: ApplyPatchInput, output: ApplyPatchOutput) -> dict[str, object]:
        return {"files": len(output.results), "actions": [r.action.value for r in output.results]}

    def _adapt(out: ToolResponse) -> list[dict[str, object]]:
        return [r.model_dump(mode="json") for r in cast(ApplyPatchOutput, out).results]

    return [
        ToolRegistration(
            name="apply_patch",
            description="Apply a unified diff to workspace files",
            input_model=ApplyPatchInput,
            output_model=ApplyPatchOutput,
            handler=cast(Callable[[ToolRequest], ToolResponse], ApplyPatchTool(boundary).execute),
            requires_approval=True,
            result_adapter=_adapt,
            end_event_builder=lambda v, o: _end_event(cast(ApplyPatchInput, v), cast(ApplyPatchOutput, o)),
        ),
        ToolRegistration(
            name="check_patch",
            description="Validate a unified diff against workspace files without writing",
            input_model=ApplyPatchInput,
            output_model=ApplyPatchOutput,
            handler=cast(Callable[[ToolRequest], ToolResponse], ApplyPatchTool(boundary, dry_run=True).execute),
            requires_approval=False,
            result_adapter=_adapt,
            end_event_builder=lambda v, o: _end_event(cast(ApplyPatchInput, v), cast(ApplyPatchOutput, o)),
        ),
    ]


__all__ = [
    "apply_patch",
    "apply_unified_diff",
    "classify_patch",
    "PatchAction",
    "PatchApplyError",
    "PatchResult",
    "LengthExceededError",
    "ContextMismatchError",
    "DeletionMismatchError",
    "UnsupportedLineError",
    "ApplyPatchTool",
    "ApplyPatchInput",
    "ApplyPatchOutput",
    "tool_registrations",
]
