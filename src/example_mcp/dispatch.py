"""Routing of tool invocations to their handlers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from example_mcp.errors import (
    ErrorKind,
    ToolFailure,
    ToolOutcome,
    ToolResult,
    internal_error,
    invalid_params,
)
from example_mcp.tools import ToolCatalog

logger = logging.getLogger(__name__)


class Dispatcher:
    """Resolve, validate and execute tool invocations.

    Every call produces exactly one :class:`ToolResult` or :class:`ToolFailure`.
    Unknown tools and invalid arguments are rejected before any handler runs;
    exceptions raised by a handler are normalized to ``InternalError`` here and
    nowhere else.
    """

    def __init__(self, catalog: ToolCatalog) -> None:
        self._catalog = catalog

    async def dispatch(self, name: str, arguments: object) -> ToolOutcome:
        """Execute the tool registered under ``name``.

        Args:
            name: Tool name requested by the client.
            arguments: Raw, unchecked arguments. ``None`` means no arguments.

        Returns:
            The handler's result, or a typed failure.
        """
        tool = self._catalog.lookup(name)
        if tool is None:
            return ToolFailure(ErrorKind.METHOD_NOT_FOUND, f"Unknown tool: {name}")

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            return invalid_params("Arguments must be an object")

        params = tool.validate(arguments)
        if isinstance(params, ToolFailure):
            logger.debug("Rejected arguments for %s: %s", name, params.message)
            return params

        try:
            outcome: Any = await tool.handler(params)
        except Exception as exc:
            logger.exception("Tool %s raised an unexpected error", name)
            return internal_error("Tool execution failed", exc)

        if isinstance(outcome, (ToolResult, ToolFailure)):
            return outcome
        logger.error("Tool %s returned %r instead of a tool outcome", name, outcome)
        return internal_error(
            "Tool execution failed",
            f"handler returned {type(outcome).__name__}",
        )
