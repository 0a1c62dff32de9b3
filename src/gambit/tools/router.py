"""Tool router exposing specs and dispatch for the patch tools.

Tool parameters and outputs are pydantic models defined next to each tool;
the advertised JSON specs are generated from those models.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from gambit.config import ApprovalPolicy, FsMode
from gambit.tools import get_tool_registrations
from gambit.tools.approval import ApprovalRequiredError, approval_guard
from gambit.tools.base import ToolRequest, ToolResponse
from gambit.tools.fs import FsBoundary


def tool_specs(boundary: FsBoundary | None = None) -> list[dict[str, Any]]:
    """Return function-calling specs derived from the pydantic input schemas."""

    regs = get_tool_registrations(boundary or FsBoundary(FsMode.RESTRICTED))
    return [reg.to_spec() for reg in regs]


class ToolRouter:
    """Dispatch tool calls with boundary and approval enforcement."""

    def __init__(
        self,
        boundary: FsBoundary,
        approval_policy: ApprovalPolicy,
        logger: logging.Logger | None = None,
    ) -> None:
        self.boundary = boundary
        self.approval_policy = approval_policy
        self.logger = logger
        self.events: list[dict[str, Any]] = []
        self._registrations = get_tool_registrations(self.boundary)
        self._spec_index = {reg.name: reg for reg in self._registrations}
        self._handlers: dict[str, Callable[[ToolRequest], ToolResponse]] = {
            reg.name: reg.handler for reg in self._registrations
        }

    def dispatch(self, name: str, *, requested: bool = False, **kwargs: Any) -> Any:
        """Validate, guard and run tool ``name``.

        ``requested`` marks a write the user asked for directly, which the
        ``on-request`` approval policy lets through.
        """

        spec = self._spec_index.get(name)
        handler = self._handlers.get(name)
        if spec is None or handler is None:
            raise ValueError(f"unknown tool {name}")

        self._emit_event("start", name, kwargs)
        self._log_request(name, kwargs)

        try:
            validated = spec.input_model.model_validate(kwargs)
            if spec.requires_approval:
                approval_guard(self.approval_policy, name, requested=requested)
            output_model = handler(validated)
            result = spec.result_adapter(output_model) if spec.result_adapter else output_model.model_dump()
        except Exception as exc:
            self._emit_event("error", name, {"error": str(exc)})
            self._log_response(name, {"error": str(exc)})
            raise

        end_data = spec.end_event_builder(validated, output_model) if spec.end_event_builder else {}
        self._emit_event("end", name, end_data)
        self._log_response(name, result)
        return result

    def _emit_event(self, phase: str, tool_name: str, data: dict[str, Any]) -> None:
        self.events.append({"phase": phase, "tool": tool_name, **data})

    def _log_request(self, name: str, kwargs: dict[str, Any]) -> None:
        if not self.logger:
            return
        self.logger.info("tool request: %s args=%s", name, self._stringify(kwargs))

    def _log_response(self, name: str, result: Any) -> None:
        if not self.logger:
            return
        self.logger.debug("tool response: %s result=%s", name, self._stringify(result))

    @staticmethod
    def _stringify(obj: Any) -> str:
        try:
            text = json.dumps(obj, default=str)
        except (TypeError, ValueError):
            text = repr(obj)

        if len(text) > 2000:
            return f"{text[:2000]}... [truncated]"
        return text


__all__ = ["tool_specs", "ToolRouter", "ApprovalRequiredError"]
