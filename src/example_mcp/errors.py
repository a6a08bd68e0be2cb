"""Typed outcomes for MCP tool invocations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Literal, TypedDict, Union

import mcp.types as types


class ErrorKind(IntEnum):
    """JSON-RPC error codes used on the wire."""

    PARSE_ERROR = types.PARSE_ERROR
    INVALID_REQUEST = types.INVALID_REQUEST
    METHOD_NOT_FOUND = types.METHOD_NOT_FOUND
    INVALID_PARAMS = types.INVALID_PARAMS
    INTERNAL_ERROR = types.INTERNAL_ERROR

    @property
    def label(self) -> str:
        """Return the CamelCase name clients see in logs and messages."""
        return "".join(part.capitalize() for part in self.name.split("_"))


class TextContentPayload(TypedDict):
    """Serialized text content block."""

    type: Literal["text"]
    text: str


class ToolFailurePayload(TypedDict):
    """Serialized failure envelope."""

    code: int
    message: str


@dataclass(frozen=True)
class TextContent:
    """Single text block of a tool result."""

    text: str
    type: Literal["text"] = "text"

    def to_dict(self) -> TextContentPayload:
        """Return the wire representation of the block."""
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ToolResult:
    """Successful tool outcome.

    Attributes:
        content: Ordered content blocks returned to the client.

    """

    content: tuple[TextContent, ...] = field(default_factory=tuple)

    @classmethod
    def text(cls, *texts: str) -> ToolResult:
        """Build a result with one text block per argument."""
        return cls(content=tuple(TextContent(text=text) for text in texts))

    def to_dict(self) -> dict[str, list[TextContentPayload]]:
        """Return the wire representation of the result."""
        return {"content": [block.to_dict() for block in self.content]}


@dataclass(frozen=True)
class ToolFailure:
    """Recoverable, user-facing tool failure.

    Attributes:
        code: Error kind, ordered by where the defect lies.
        message: Human-readable description of the failure.

    """

    code: ErrorKind
    message: str

    def to_dict(self) -> ToolFailurePayload:
        """Return the structured error payload."""
        return {"code": int(self.code), "message": self.message}


ToolOutcome = Union[ToolResult, ToolFailure]


def tool_failure(
    code: ErrorKind, message: str, cause: object | None = None
) -> ToolFailure:
    """Create a :class:`ToolFailure`, appending ``cause`` when provided."""
    if cause is not None:
        message = f"{message}: {cause}"
    return ToolFailure(code=code, message=message)


def invalid_params(message: str) -> ToolFailure:
    """Shortcut for an ``InvalidParams`` failure."""
    return ToolFailure(code=ErrorKind.INVALID_PARAMS, message=message)


def internal_error(message: str, cause: object | None = None) -> ToolFailure:
    """Shortcut for an ``InternalError`` failure."""
    return tool_failure(ErrorKind.INTERNAL_ERROR, message, cause)
