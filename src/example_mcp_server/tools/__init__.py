"""Tool registration helpers for the example MCP server."""

from __future__ import annotations

from collections.abc import Mapping

from example_mcp.tools import ToolCatalog, ToolDefinition
from example_mcp_server.config import Settings
from example_mcp_server.http_client import HttpClient
from example_mcp_server.tools.basic import (
    add_numbers_tool,
    echo_tool,
    get_time_tool,
    multiply_numbers_tool,
)
from example_mcp_server.tools.files import file_operations_tool
from example_mcp_server.tools.http import http_request_tool
from example_mcp_server.tools.placeholder import json_placeholder_tool
from example_mcp_server.tools.weather import weather_api_tool


def build_tools(
    client: HttpClient,
    settings: Settings | None = None,
    environ: Mapping[str, str] | None = None,
) -> list[ToolDefinition]:
    """Instantiate all tool definitions with the provided capabilities."""
    settings = settings or Settings()
    return [
        echo_tool(),
        add_numbers_tool(),
        multiply_numbers_tool(),
        get_time_tool(),
        file_operations_tool(),
        http_request_tool(client),
        weather_api_tool(client, settings, environ),
        json_placeholder_tool(client, settings),
    ]


def build_catalog(
    client: HttpClient,
    settings: Settings | None = None,
    environ: Mapping[str, str] | None = None,
) -> ToolCatalog:
    """Build the immutable catalog served by the process."""
    return ToolCatalog(build_tools(client, settings, environ))
