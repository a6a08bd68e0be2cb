"""example_mcp package initialization."""

from example_mcp.dispatch import Dispatcher
from example_mcp.errors import ErrorKind, TextContent, ToolFailure, ToolResult
from example_mcp.server import MCPServer
from example_mcp.tools import Number, ToolCatalog, ToolDefinition, ToolParameters
from example_mcp.transport import StdioTransport, Transport

__all__ = [
    "Dispatcher",
    "ErrorKind",
    "MCPServer",
    "Number",
    "StdioTransport",
    "TextContent",
    "ToolCatalog",
    "ToolDefinition",
    "ToolFailure",
    "ToolParameters",
    "ToolResult",
    "Transport",
]
