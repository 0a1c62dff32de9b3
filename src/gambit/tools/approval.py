"""Approval policy checks for tools that write to the workspace.

``never`` lets every write through. ``on-request`` allows a write only when
the caller explicitly asked for it, as ``gambit apply`` does. ``always``
blocks every write until approval is granted out of band (``--yes``).
"""

from __future__ import annotations

from gambit.config import ApprovalPolicy


class ApprovalRequiredError(Exception):
    """Raised when the approval policy blocks a workspace write."""


def approval_guard(policy: ApprovalPolicy, tool_name: str, *, requested: bool = False) -> None:
    if policy == ApprovalPolicy.NEVER:
        return
    if policy == ApprovalPolicy.ON_REQUEST:
        if requested:
            return
        raise ApprovalRequiredError(f"approval required for tool {tool_name} (not explicitly requested)")
    if policy == ApprovalPolicy.ALWAYS:
        raise ApprovalRequiredError(f"approval required for tool {tool_name}")
    raise ValueError(f"unknown approval policy: {policy}")


__all__ = ["approval_guard", "ApprovalRequiredError"]
