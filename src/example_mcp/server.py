"""MCP server core.

The server owns the tool catalog and the dispatcher, answers ``tools/list``
directly from the catalog and routes ``tools/call`` to the dispatcher. It is
bound to a :class:`~example_mcp.transport.Transport` by :meth:`MCPServer.start`
and released by :meth:`MCPServer.stop`.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Union

import anyio
import mcp.types as types
from mcp.shared.message import SessionMessage
from mcp.types.version import HANDSHAKE_PROTOCOL_VERSIONS, LATEST_HANDSHAKE_VERSION
from pydantic import ValidationError

from example_mcp.dispatch import Dispatcher
from example_mcp.errors import (
    ErrorKind,
    ToolFailure,
    ToolOutcome,
    ToolResult,
    invalid_params,
)
from example_mcp.tools import ToolCatalog
from example_mcp.transport import IncomingMessage, Transport

logger = logging.getLogger(__name__)

MethodHandler = Callable[[dict[str, Any]], Awaitable[Any]]
ErrorSink = Callable[[BaseException], None]
Request = Union[types.JSONRPCRequest, types.JSONRPCNotification]
Response = Union[types.JSONRPCResponse, types.JSONRPCError]


def success_response(request_id: types.RequestId, result: dict[str, Any]) -> Response:
    """Build a JSON-RPC success envelope."""
    return types.JSONRPCResponse(jsonrpc="2.0", id=request_id, result=result)


def error_response(
    request_id: types.RequestId | None, failure: ToolFailure
) -> Response:
    """Build a JSON-RPC error envelope."""
    return types.JSONRPCError(
        jsonrpc="2.0",
        id=request_id,
        error=types.ErrorData(code=int(failure.code), message=failure.message),
    )


def malformed_frame(error: Exception) -> ToolFailure:
    """Classify a frame the transport could not decode."""
    if isinstance(error, ValidationError) and all(
        detail["type"] != "json_invalid" for detail in error.errors()
    ):
        return ToolFailure(ErrorKind.INVALID_REQUEST, "Invalid request")
    return ToolFailure(ErrorKind.PARSE_ERROR, "Parse error")


def log_transport_error(error: BaseException) -> None:
    """Default diagnostic sink for transport-level errors."""
    logger.error("[MCP Error] %s", error)


class MCPServer:
    """Catalog-backed MCP server with an explicit start/stop lifecycle.

    Requests are handled concurrently on a single event loop: each incoming
    message runs in its own task, so responses may be written out of request
    order. Correlation ids are passed through untouched.
    """

    def __init__(
        self,
        catalog: ToolCatalog,
        *,
        name: str = "example-mcp-server",
        version: str = "0.1.0",
        on_error: ErrorSink | None = None,
    ) -> None:
        """Create a server over a fully built catalog.

        Args:
            catalog: Tools exposed by this server.
            name: Server name reported during ``initialize``.
            version: Server version reported during ``initialize``.
            on_error: Sink receiving transport-level errors.

        """
        self._catalog = catalog
        self._dispatcher = Dispatcher(catalog)
        self.name = name
        self.version = version
        self._on_error = on_error or log_transport_error
        self._accept_scope: anyio.CancelScope | None = None
        self._methods: dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    @property
    def catalog(self) -> ToolCatalog:
        """Catalog served by this instance."""
        return self._catalog

    @property
    def running(self) -> bool:
        """Whether the server is currently bound to a transport."""
        return self._accept_scope is not None

    def available_tools(self) -> list[str]:
        """List the names of registered tools in catalog order."""
        return [tool.name for tool in self._catalog]

    def list_tools(self) -> list[dict[str, Any]]:
        """Return tool descriptors exactly as the catalog orders them."""
        return self._catalog.descriptors()

    def to_catalog(self) -> dict[str, Any]:
        """Produce the ``tools/list`` result payload."""
        return {"tools": self.list_tools()}

    async def call_tool(self, name: str, arguments: object = None) -> ToolOutcome:
        """Execute a registered tool through the dispatcher."""
        return await self._dispatcher.dispatch(name, arguments)

    async def handle_message(self, message: Request) -> Response | None:
        """Answer one decoded request.

        Returns:
            The response envelope, or ``None`` for notifications.

        """
        if isinstance(message, types.JSONRPCNotification):
            logger.debug("Notification %s", message.method)
            return None

        handler = self._methods.get(message.method)
        if handler is None:
            outcome: Any = ToolFailure(
                ErrorKind.METHOD_NOT_FOUND, f"Method not found: {message.method}"
            )
        else:
            outcome = await handler(message.params or {})

        if isinstance(outcome, ToolFailure):
            return error_response(message.id, outcome)
        return success_response(message.id, outcome)

    async def start(self, transport: Transport) -> None:
        """Serve ``transport`` until it is exhausted or :meth:`stop` is called.

        In-flight requests are allowed to finish and their responses are
        written before the transport is released.

        Raises:
            RuntimeError: If the server is already running.

        """
        if self._accept_scope is not None:
            raise RuntimeError("Server is already running")
        accept_scope = self._accept_scope = anyio.CancelScope()
        logger.info("%s %s accepting requests", self.name, self.version)
        try:
            with anyio.CancelScope() as connection_scope:
                async with transport.connect() as (read_stream, write_stream):
                    async with anyio.create_task_group() as task_group:
                        with accept_scope:
                            async for item in read_stream:
                                task_group.start_soon(self._respond, write_stream, item)
                    await write_stream.aclose()
                    if accept_scope.cancel_called:
                        # The reader may still be blocked on input.
                        connection_scope.cancel()
        finally:
            self._accept_scope = None
            logger.info("%s stopped", self.name)

    async def stop(self) -> None:
        """Stop accepting new messages; running requests are not cancelled."""
        if self._accept_scope is not None:
            logger.info("Stopping %s", self.name)
            self._accept_scope.cancel()

    async def _respond(self, write_stream: Any, item: IncomingMessage) -> None:
        if isinstance(item, Exception):
            self._on_error(item)
            response: Response | None = error_response(None, malformed_frame(item))
        elif isinstance(item.message, types.JSONRPCRequest | types.JSONRPCNotification):
            response = await self.handle_message(item.message)
        else:
            logger.debug("Ignoring client response frame")
            response = None
        if response is None:
            return
        try:
            await write_stream.send(SessionMessage(response))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as exc:
            self._on_error(exc)

    async def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        result = types.InitializeResult(
            protocol_version=requested
            if requested in HANDSHAKE_PROTOCOL_VERSIONS
            else LATEST_HANDSHAKE_VERSION,
            capabilities=types.ServerCapabilities(tools=types.ToolsCapability()),
            server_info=types.Implementation(name=self.name, version=self.version),
        )
        return result.model_dump(by_alias=True, exclude_unset=True)

    async def _ping(self, _: dict[str, Any]) -> dict[str, Any]:
        return types.EmptyResult().model_dump(by_alias=True, exclude_unset=True)

    async def _list_tools(self, _: dict[str, Any]) -> dict[str, Any]:
        return self.to_catalog()

    async def _call_tool(self, params: dict[str, Any]) -> dict[str, Any] | ToolFailure:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            return invalid_params("Tool name must be a non-empty string")
        outcome = await self.call_tool(name, params.get("arguments"))
        if isinstance(outcome, ToolResult):
            return outcome.to_dict()
        return outcome
