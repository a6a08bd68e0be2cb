"""Shared helpers for MCP tools."""

from __future__ import annotations

import json

import requests


def pretty_json(data: object) -> str:
    """Render ``data`` as indented JSON, keeping non-ASCII text readable."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def is_json_response(response: requests.Response) -> bool:
    """Whether the response declares a JSON body."""
    return "application/json" in response.headers.get("content-type", "").lower()


def error_message(response: requests.Response) -> str:
    """Extract the upstream ``message`` field from an error body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return "Unknown error"
