"""Echo, arithmetic and clock tools."""

from __future__ import annotations

import math
import operator
from collections.abc import Callable
from datetime import datetime, timezone

from pydantic import Field

from example_mcp.errors import ToolResult
from example_mcp.tools import Number, ToolDefinition, ToolHandler, ToolParameters


class EchoParams(ToolParameters):
    """Parameters for the echo tool."""

    text: str = Field(description="Text to echo back")


class OperandsParams(ToolParameters):
    """Two numeric operands."""

    a: Number = Field(description="First number")
    b: Number = Field(description="Second number")


class NoParams(ToolParameters):
    """Tools without arguments."""


def utc_now() -> datetime:
    """Return the current instant in UTC."""
    return datetime.now(tz=timezone.utc)


def iso_timestamp(instant: datetime) -> str:
    """Format an instant as ISO-8601 UTC with millisecond precision."""
    utc = instant.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def as_float(value: int | float) -> float:
    """Convert an operand to a double, saturating at infinity."""
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def format_number(value: float) -> str:
    """Render a double, without a fraction when it holds an integer."""
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _arithmetic(symbol: str, operation: Callable[[float, float], float]) -> ToolHandler:
    async def handler(params: OperandsParams) -> ToolResult:
        a, b = as_float(params.a), as_float(params.b)
        return ToolResult.text(
            f"{format_number(a)} {symbol} {format_number(b)} = "
            f"{format_number(operation(a, b))}"
        )

    return handler


def echo_tool() -> ToolDefinition:
    """Create the echo tool."""

    async def handler(params: EchoParams) -> ToolResult:
        return ToolResult.text(f"Echo: {params.text}")

    return ToolDefinition(
        name="echo",
        description="Echo back the input text",
        parameters_model=EchoParams,
        handler=handler,
    )


def add_numbers_tool() -> ToolDefinition:
    """Create the add_numbers tool."""
    return ToolDefinition(
        name="add_numbers",
        description="Add two numbers together",
        parameters_model=OperandsParams,
        handler=_arithmetic("+", operator.add),
    )


def multiply_numbers_tool() -> ToolDefinition:
    """Create the multiply_numbers tool."""
    return ToolDefinition(
        name="multiply_numbers",
        description="Multiply two numbers together",
        parameters_model=OperandsParams,
        handler=_arithmetic("*", operator.mul),
    )


def get_time_tool(clock: Callable[[], datetime] = utc_now) -> ToolDefinition:
    """Create the get_time tool.

    Args:
        clock: Source of the current instant.

    """

    async def handler(_: NoParams) -> ToolResult:
        return ToolResult.text(f"Current time: {iso_timestamp(clock())}")

    return ToolDefinition(
        name="get_time",
        description="Get the current time",
        parameters_model=NoParams,
        handler=handler,
    )
