"""Typed request/response contract shared by the patch tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

Req = TypeVar("Req", bound=BaseModel)
Res = TypeVar("Res", bound=BaseModel)


class ToolRequest(BaseModel):
    """Base for tool arguments. Unknown arguments are rejected."""

    model_config = ConfigDict(extra="forbid")


class ToolResponse(BaseModel):
    """Base for tool results."""


class Tool(Generic[Req, Res], ABC):
    """A workspace tool bound to one request and one response model.

    ``requires_approval`` marks tools that write files; the router runs the
    approval guard before calling ``execute`` on them.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    InputModel: ClassVar[type[Req]]
    OutputModel: ClassVar[type[Res]]
    requires_approval: ClassVar[bool] = False

    @abstractmethod
    def execute(self, request: Req) -> Res:
        """Run the tool against the workspace and return its response."""


__all__ = ["ToolRequest", "ToolResponse", "Tool", "Req", "Res"]
