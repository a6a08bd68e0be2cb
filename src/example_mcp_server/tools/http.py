"""Generic outbound HTTP request tool."""

from __future__ import annotations

from typing import Literal, Optional

import requests
from pydantic import Field

from example_mcp.errors import ToolOutcome, ToolResult, internal_error
from example_mcp.tools import Number, ToolDefinition, ToolParameters
from example_mcp_server.http_client import HttpClient
from example_mcp_server.tools.common import is_json_response, pretty_json

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
DEFAULT_TIMEOUT_MS = 10000


class HttpRequestParams(ToolParameters):
    """Parameters for the http_request tool."""

    url: str = Field(description="The URL to make the request to")
    method: Literal["GET", "POST", "PUT", "DELETE", "PATCH"] = Field(
        default="GET", description="HTTP method"
    )
    headers: Optional[dict[str, str]] = Field(
        default=None, description="HTTP headers as key-value pairs"
    )
    body: Optional[str] = Field(
        default=None, description="Request body (for POST, PUT, PATCH)"
    )
    timeout: Number = Field(
        default=DEFAULT_TIMEOUT_MS,
        description="Request timeout in milliseconds; 0 selects the default",
    )


def _request_headers(params: HttpRequestParams) -> dict[str, str]:
    headers = dict(params.headers or {})
    if params.body is not None and params.method in BODY_METHODS:
        if not any(name.lower() == "content-type" for name in headers):
            headers["Content-Type"] = "application/json"
    return headers


def _format_response(params: HttpRequestParams, response: requests.Response) -> str:
    content_type = response.headers.get("content-type", "")
    data: object = response.json() if is_json_response(response) else response.text
    return (
        f"HTTP {params.method} {params.url}\n"
        f"Status: {response.status_code} {response.reason}\n"
        f"Content-Type: {content_type}\n\n"
        f"Response:\n{pretty_json(data)}"
    )


def http_request_tool(client: HttpClient) -> ToolDefinition:
    """Create the http_request tool.

    The timeout aborts the in-flight request; it is never retried. A timeout
    that is not positive falls back to the default.
    """

    async def handler(params: HttpRequestParams) -> ToolOutcome:
        timeout = params.timeout if params.timeout > 0 else DEFAULT_TIMEOUT_MS
        seconds = timeout / 1000
        body = params.body if params.method in BODY_METHODS else None
        try:
            response = await client.request(
                params.method,
                params.url,
                headers=_request_headers(params),
                data=body.encode("utf-8") if body is not None else None,
                timeout=seconds,
                deadline=seconds,
            )
            text = _format_response(params, response)
        except (TimeoutError, requests.Timeout):
            return internal_error(
                "HTTP request failed",
                f"request aborted after {timeout} ms timeout",
            )
        except (requests.RequestException, ValueError) as exc:
            return internal_error("HTTP request failed", exc)
        return ToolResult.text(text)

    return ToolDefinition(
        name="http_request",
        description="Make HTTP requests to APIs",
        parameters_model=HttpRequestParams,
        handler=handler,
    )
