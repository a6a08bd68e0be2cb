"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from typing import Any

import anyio
import mcp.types as types
import pytest
from mcp.shared.message import SessionMessage

from example_mcp.server import MCPServer
from example_mcp.tools import ToolCatalog
from example_mcp_server.config import Settings
from example_mcp_server.http_client import HttpClient
from example_mcp_server.tools import build_catalog


@pytest.fixture()
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture()
def settings() -> Settings:
    """Default settings with a short upstream timeout."""
    return Settings(upstream_timeout=5.0)


@pytest.fixture()
def http_client() -> Iterator[HttpClient]:
    """HTTP capability backed by a fresh requests session."""
    client = HttpClient()
    yield client
    client.close()


@pytest.fixture()
def environ() -> dict[str, str]:
    """Isolated environment for credential lookups."""
    return {}


@pytest.fixture()
def catalog(
    http_client: HttpClient, settings: Settings, environ: dict[str, str]
) -> ToolCatalog:
    """Catalog with every example tool registered."""
    return build_catalog(http_client, settings, environ)


@pytest.fixture()
def server(catalog: ToolCatalog) -> MCPServer:
    """Server over the full example catalog."""
    return MCPServer(catalog)


class MemoryTransport:
    """In-memory transport that records every response."""

    def __init__(self) -> None:
        self._client_send, self._server_receive = anyio.create_memory_object_stream(
            100
        )
        self._server_send, self._client_receive = anyio.create_memory_object_stream(
            100
        )
        self.closed = False

    async def feed(self, message: types.JSONRPCMessage | Exception) -> None:
        """Deliver one client frame, or a decoding error, to the server."""
        if isinstance(message, Exception):
            await self._client_send.send(message)
        else:
            await self._client_send.send(SessionMessage(message))

    def finish(self) -> None:
        """Signal end of input."""
        self._client_send.close()

    def sent(self) -> list[dict[str, Any]]:
        """Return the responses written so far as wire payloads."""
        payloads = []
        while True:
            try:
                item = self._client_receive.receive_nowait()
            except (anyio.WouldBlock, anyio.EndOfStream):
                return payloads
            payloads.append(item.message.model_dump(by_alias=True, exclude_unset=True))

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[tuple[Any, Any]]:
        try:
            yield self._server_receive, self._server_send
        finally:
            self.closed = True


@pytest.fixture()
def memory_transport() -> MemoryTransport:
    """Fresh in-memory transport."""
    return MemoryTransport()
