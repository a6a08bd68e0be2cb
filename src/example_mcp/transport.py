"""Stdio transport built on the MCP SDK's newline-delimited JSON-RPC framing."""

from __future__ import annotations

import io
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, BinaryIO, Protocol, TextIO, Union

import anyio
from mcp.server.stdio import stdio_server
from mcp.shared.message import SessionMessage

IncomingMessage = Union[SessionMessage, Exception]
"""Decoded message, or the error raised while decoding a frame."""

Streams = tuple[Any, Any]
"""``(read_stream, write_stream)`` pair yielded by :meth:`Transport.connect`.

The read stream yields :data:`IncomingMessage` items; the write stream accepts
:class:`~mcp.shared.message.SessionMessage` responses.
"""


class Transport(Protocol):
    """Duplex channel consumed by :class:`example_mcp.server.MCPServer`."""

    def connect(self) -> AbstractAsyncContextManager[Streams]:
        """Open the channel for the duration of the context."""
        ...


class StdioTransport:
    """JSON-RPC over a pair of text streams, one message per line.

    Framing, decoding and encoding are delegated to
    :func:`mcp.server.stdio.stdio_server`. Frames that fail to decode are
    delivered on the read stream as exceptions instead of ending the session.
    Without explicit streams the SDK binds the process stdin and stdout.
    """

    def __init__(
        self, stdin: TextIO | None = None, stdout: TextIO | None = None
    ) -> None:
        self._stdin = stdin
        self._stdout = stdout

    @classmethod
    def from_buffers(cls, stdin: BinaryIO, stdout: BinaryIO) -> StdioTransport:
        """Wrap binary streams as UTF-8 text, replacing undecodable bytes."""
        return cls(
            io.TextIOWrapper(stdin, encoding="utf-8", errors="replace"),
            io.TextIOWrapper(stdout, encoding="utf-8"),
        )

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[Streams]:
        """Run the SDK reader and writer tasks while the context is open."""
        stdin = anyio.wrap_file(self._stdin) if self._stdin is not None else None
        stdout = anyio.wrap_file(self._stdout) if self._stdout is not None else None
        async with stdio_server(stdin, stdout) as streams:
            yield streams
