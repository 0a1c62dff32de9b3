"""Registration records for the patch tools.

``tool_registrations(boundary)`` in a tool module returns one record per tool
name, already bound to the workspace boundary.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from gambit.tools.base import ToolRequest, ToolResponse


@dataclass(frozen=True)
class ToolRegistration:
    name: str
    description: str
    input_model: type[ToolRequest]
    output_model: type[ToolResponse]
    handler: Callable[[ToolRequest], ToolResponse]
    requires_approval: bool = False
    result_adapter: Callable[[ToolResponse], Any] | None = None
    end_event_builder: Callable[[ToolRequest, ToolResponse], dict[str, Any]] | None = None

    def to_spec(self) -> dict[str, Any]:
        """Function-calling spec built from the input model's JSON schema."""

        params = self.input_model.model_json_schema()
        params.setdefault("additionalProperties", False)
        return {
            "type": "function",
            "function": {"name": self.name, "description": self.description, "parameters": params},
        }


__all__ = ["ToolRegistration"]
