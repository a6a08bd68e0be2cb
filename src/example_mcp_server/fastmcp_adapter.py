"""Adapters for exposing the tool catalog via FastMCP."""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool, ToolResult as FastMCPToolResult
from mcp.types import TextContent

from example_mcp.errors import ToolFailure
from example_mcp.server import MCPServer
from example_mcp.tools import ToolDefinition


class ToolDefinitionAdapter(Tool):
    """Expose a :class:`ToolDefinition` as a FastMCP tool."""

    def __init__(self, definition: ToolDefinition, server: MCPServer) -> None:
        """Create a FastMCP tool wrapper routed through ``server``."""
        super().__init__(
            name=definition.name,
            description=definition.description,
            parameters=definition.input_schema,
            tags=set(),
        )
        self._server = server

    async def run(self, arguments: dict[str, Any]) -> FastMCPToolResult:
        """Dispatch through the server so validation and errors stay uniform."""
        outcome = await self._server.call_tool(self.name, arguments)
        if isinstance(outcome, ToolFailure):
            raise ToolError(f"{outcome.code.label}: {outcome.message}")
        return FastMCPToolResult(
            content=[
                TextContent(type="text", text=block.text) for block in outcome.content
            ]
        )


def to_fastmcp_tools(server: MCPServer) -> list[Tool]:
    """Wrap every catalog entry of ``server`` as a FastMCP tool."""
    return [ToolDefinitionAdapter(definition, server) for definition in server.catalog]


def build_fastmcp_app(server: MCPServer) -> tuple[FastMCP, list[ToolDefinition]]:
    """Create a FastMCP app serving the same catalog as ``server``."""
    app = FastMCP(
        name=server.name,
        instructions="Example tools exposed over the Model Context Protocol.",
    )
    for tool in to_fastmcp_tools(server):
        app.add_tool(tool)
    return app, list(server.catalog.tools())
