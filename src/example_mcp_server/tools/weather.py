"""OpenWeatherMap lookup tool."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Literal

import requests
from pydantic import Field

from example_mcp.errors import ToolOutcome, ToolResult, internal_error
from example_mcp.tools import ToolDefinition, ToolParameters
from example_mcp_server.config import Settings
from example_mcp_server.http_client import HttpClient
from example_mcp_server.tools.common import error_message

UNIT_SYMBOLS = {"metric": "°C", "imperial": "°F", "kelvin": "K"}
WIND_UNITS = {"metric": "m/s", "imperial": "mph", "kelvin": "m/s"}


class WeatherParams(ToolParameters):
    """Parameters for the weather_api tool."""

    city: str = Field(description="City name (e.g., 'London', 'New York')")
    units: Literal["metric", "imperial", "kelvin"] = Field(
        default="metric", description="Temperature units"
    )


def setup_instructions(env_name: str) -> str:
    """Explain how to configure the weather credential."""
    return (
        f"Weather API requires {env_name} environment variable. "
        "You can get a free API key from https://openweathermap.org/api\n\n"
        f"Example usage:\n{env_name}=your_key_here example-mcp-server"
    )


def _clock_time(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%H:%M:%S")


def format_weather(data: Mapping[str, Any], units: str) -> str:
    """Render an OpenWeatherMap ``weather`` payload as a summary."""
    symbol = UNIT_SYMBOLS[units]
    main = data["main"]
    condition = data["weather"][0]
    system = data["sys"]
    visibility_km = data.get("visibility", 0) / 1000
    return (
        f"Weather in {data['name']}, {system['country']}:\n"
        f"🌡️ Temperature: {main['temp']}{symbol} "
        f"(feels like {main['feels_like']}{symbol})\n"
        f"🌤️ Condition: {condition['main']} - {condition['description']}\n"
        f"💧 Humidity: {main['humidity']}%\n"
        f"🌬️ Wind: {data['wind']['speed']} {WIND_UNITS[units]}\n"
        f"👁️ Visibility: {visibility_km:g} km\n"
        f"🌅 Sunrise: {_clock_time(system['sunrise'])}\n"
        f"🌇 Sunset: {_clock_time(system['sunset'])}"
    )


def weather_api_tool(
    client: HttpClient,
    settings: Settings,
    environ: Mapping[str, str] | None = None,
) -> ToolDefinition:
    """Create the weather_api tool.

    Args:
        client: Outbound HTTP capability.
        settings: Endpoint and credential variable name.
        environ: Environment consulted for the credential on every call.

    """
    env = os.environ if environ is None else environ

    async def handler(params: WeatherParams) -> ToolOutcome:
        api_key = env.get(settings.weather_api_key_env)
        if not api_key:
            return ToolResult.text(setup_instructions(settings.weather_api_key_env))
        try:
            response = await client.request(
                "GET",
                settings.weather_url,
                params={"q": params.city, "appid": api_key, "units": params.units},
                timeout=settings.upstream_timeout,
            )
            if not response.ok:
                return internal_error(
                    "Weather API request failed",
                    f"Weather API error: {error_message(response)}",
                )
            text = format_weather(response.json(), params.units)
        except (requests.RequestException, ValueError, KeyError, IndexError) as exc:
            return internal_error("Weather API request failed", exc)
        return ToolResult.text(text)

    return ToolDefinition(
        name="weather_api",
        description="Get weather data for a city using OpenWeatherMap API",
        parameters_model=WeatherParams,
        handler=handler,
    )
