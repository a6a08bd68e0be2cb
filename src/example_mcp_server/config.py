"""Runtime settings for the example MCP server."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

LOG_LEVEL_ENV = "EXAMPLE_MCP_LOG_LEVEL"
UPSTREAM_TIMEOUT_ENV = "EXAMPLE_MCP_UPSTREAM_TIMEOUT"


@dataclass(frozen=True)
class Settings:
    """Static configuration resolved once at startup.

    The weather credential is deliberately not stored here: tools look up
    ``weather_api_key_env`` in the environment on every call.
    """

    server_name: str = "example-mcp-server"
    server_version: str = "0.1.0"
    log_level: str = "INFO"
    user_agent: str = "MCP-Server/1.0"
    upstream_timeout: float = 30.0
    weather_api_key_env: str = "OPENWEATHER_API_KEY"
    weather_url: str = "https://api.openweathermap.org/data/2.5/weather"
    placeholder_url: str = "https://jsonplaceholder.typicode.com"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings, honoring overrides from the environment."""
        env = os.environ if environ is None else environ
        defaults = cls()
        timeout = env.get(UPSTREAM_TIMEOUT_ENV, "").strip()
        return cls(
            log_level=env.get(LOG_LEVEL_ENV, defaults.log_level).strip().upper(),
            upstream_timeout=float(timeout) if timeout else defaults.upstream_timeout,
        )
