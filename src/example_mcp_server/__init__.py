"""Model Context Protocol server exposing a small set of example tools."""

from example_mcp_server.config import Settings
from example_mcp_server.http_client import HttpClient
from example_mcp_server.tools import build_catalog, build_tools

__all__ = ["HttpClient", "Settings", "build_catalog", "build_tools"]
