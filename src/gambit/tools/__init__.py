"""Patch engine and tool registry.

The pure engine (``normalize_patch_path``, ``sanitize_patch_targets``,
``split_unified_diff_by_file``, ``apply_unified_diff``) performs no I/O.
The orchestrator lives in the ``gambit.tools.apply_patch`` module, next to the
registered tools that layer workspace file access on top.
"""

from __future__ import annotations

from gambit.tools.apply_patch import (
    ContextMismatchError,
    DeletionMismatchError,
    LengthExceededError,
    PatchAction,
    PatchApplyError,
    PatchResult,
    UnsupportedLineError,
    apply_unified_diff,
    classify_patch,
)
from gambit.tools.apply_patch import tool_registrations as apply_patch_registrations
from gambit.tools.fs import FsBoundary, FsViolationError
from gambit.tools.patch_parser import (
    FilePatch,
    HunkHeaderError,
    PatchError,
    PatchParseError,
    PathViolationError,
    normalize_patch_path,
    sanitize_patch_targets,
    split_unified_diff_by_file,
)
from gambit.tools.registry import ToolRegistration


def get_tool_registrations(boundary: FsBoundary) -> list[ToolRegistration]:
    return list(apply_patch_registrations(boundary))


__all__ = [
    "get_tool_registrations",
    "ToolRegistration",
    "FsBoundary",
    "FsViolationError",
    "FilePatch",
    "PatchAction",
    "PatchResult",
    "PatchError",
    "PatchParseError",
    "PatchApplyError",
    "PathViolationError",
    "HunkHeaderError",
    "LengthExceededError",
    "ContextMismatchError",
    "DeletionMismatchError",
    "UnsupportedLineError",
    "normalize_patch_path",
    "sanitize_patch_targets",
    "split_unified_diff_by_file",
    "apply_unified_diff",
    "classify_patch",
]
