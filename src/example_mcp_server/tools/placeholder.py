"""JSONPlaceholder sample data tool."""

from __future__ import annotations

from typing import Literal, Optional

import requests
from pydantic import Field

from example_mcp.errors import ToolOutcome, ToolResult, internal_error
from example_mcp.tools import Number, ToolDefinition, ToolParameters
from example_mcp_server.config import Settings
from example_mcp_server.http_client import HttpClient
from example_mcp_server.tools.common import pretty_json


class JsonPlaceholderParams(ToolParameters):
    """Parameters for the json_placeholder tool."""

    endpoint: Literal["posts", "users", "todos", "comments", "albums", "photos"] = (
        Field(description="API endpoint to fetch data from")
    )
    id: Optional[Number] = Field(
        default=None, description="Optional ID to fetch specific item"
    )


def _id_segment(item_id: int | float | None) -> str | None:
    if not item_id:
        return None
    if isinstance(item_id, float) and item_id.is_integer():
        item_id = int(item_id)
    return str(item_id)


def json_placeholder_tool(client: HttpClient, settings: Settings) -> ToolDefinition:
    """Create the json_placeholder tool."""

    async def handler(params: JsonPlaceholderParams) -> ToolOutcome:
        segment = _id_segment(params.id)
        url = f"{settings.placeholder_url.rstrip('/')}/{params.endpoint}"
        if segment is not None:
            url = f"{url}/{segment}"
        try:
            response = await client.request(
                "GET", url, timeout=settings.upstream_timeout
            )
            if not response.ok:
                return internal_error(
                    "JSONPlaceholder API request failed",
                    f"API request failed with status {response.status_code}",
                )
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            return internal_error("JSONPlaceholder API request failed", exc)
        label = f" (ID: {segment})" if segment is not None else ""
        return ToolResult.text(
            f"JSONPlaceholder API - {params.endpoint}{label}:\n\n{pretty_json(data)}"
        )

    return ToolDefinition(
        name="json_placeholder",
        description="Get sample data from JSONPlaceholder API (posts, users, todos)",
        parameters_model=JsonPlaceholderParams,
        handler=handler,
    )
