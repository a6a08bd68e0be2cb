"""Tests for the MCP server core."""

from __future__ import annotations

import io
import json
from typing import Any

import anyio
import mcp.types as types
import pytest
from mcp.types.version import LATEST_HANDSHAKE_VERSION
from pydantic import ValidationError

from example_mcp.errors import ErrorKind, ToolFailure, ToolResult
from example_mcp.server import MCPServer
from example_mcp.tools import ToolCatalog, ToolDefinition, ToolParameters
from example_mcp.transport import StdioTransport
from example_mcp_server.tools.basic import echo_tool

EXPECTED_TOOLS = [
    "echo",
    "add_numbers",
    "multiply_numbers",
    "get_time",
    "file_operations",
    "http_request",
    "weather_api",
    "json_placeholder",
]

PING = '{"jsonrpc": "2.0", "id": 2, "method": "ping"}'


class SleepParams(ToolParameters):
    """Parameters for the sleep test tool."""

    seconds: float


def sleep_tool(started: anyio.Event | None = None) -> ToolDefinition:
    """Tool that sleeps before answering."""

    async def handler(params: SleepParams) -> ToolResult:
        if started is not None:
            started.set()
        await anyio.sleep(params.seconds)
        return ToolResult.text(f"slept {params.seconds}")

    return ToolDefinition(
        name="sleep",
        description="Sleep for a while.",
        parameters_model=SleepParams,
        handler=handler,
    )


def _request(
    request_id: int | str, method: str, params: dict[str, Any] | None = None
) -> types.JSONRPCRequest:
    return types.JSONRPCRequest(
        jsonrpc="2.0", id=request_id, method=method, params=params
    )


def _call(request_id: int, name: str, arguments: dict[str, object]) -> str:
    return json.dumps(
        {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments},
        }
    )


def _wire(response: Any) -> dict[str, Any]:
    assert response is not None
    return response.model_dump(by_alias=True, exclude_unset=True)


def _lines(stream: io.StringIO) -> list[dict[str, Any]]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestMCPServer:
    """Behavioral coverage for MCPServer."""

    def test_lists_tools_in_registration_order(self, server: MCPServer) -> None:
        """The catalog order is the display order and is stable."""
        # Act
        first = server.list_tools()
        second = server.list_tools()

        # Assert
        assert [tool["name"] for tool in first] == EXPECTED_TOOLS
        assert first == second
        assert server.available_tools() == EXPECTED_TOOLS
        assert all(
            set(tool) == {"name", "description", "inputSchema"} for tool in first
        )

    def test_prevents_duplicate_tool_names(self) -> None:
        """Duplicate tool registrations raise a ValueError."""
        # Act / Assert
        with pytest.raises(ValueError):
            ToolCatalog([echo_tool(), echo_tool()])

    @pytest.mark.anyio()
    async def test_runs_registered_tool(self, server: MCPServer) -> None:
        """Executing a registered tool returns its content."""
        # Act
        result = await server.call_tool("echo", {"text": "hi"})

        # Assert
        assert isinstance(result, ToolResult)
        assert result.to_dict() == {"content": [{"type": "text", "text": "Echo: hi"}]}

    @pytest.mark.anyio()
    async def test_running_unknown_tool_errors(self, server: MCPServer) -> None:
        """Unknown tool invocations produce MethodNotFound."""
        # Act
        result = await server.call_tool("missing", {})

        # Assert
        assert isinstance(result, ToolFailure)
        assert result.code is ErrorKind.METHOD_NOT_FOUND

    @pytest.mark.anyio()
    async def test_rejects_invalid_parameters(self, server: MCPServer) -> None:
        """Invalid parameters are surfaced as InvalidParams."""
        # Act
        result = await server.call_tool("add_numbers", {"a": "x", "b": 3})

        # Assert
        assert isinstance(result, ToolFailure)
        assert result.code is ErrorKind.INVALID_PARAMS


class TestMessageHandling:
    """JSON-RPC envelopes produced by handle_message."""

    @pytest.mark.anyio()
    async def test_initialize_reports_server_info(self, server: MCPServer) -> None:
        """initialize echoes a supported protocol version and names the server."""
        # Act
        response = _wire(
            await server.handle_message(
                _request(0, "initialize", {"protocolVersion": "2025-03-26"})
            )
        )

        # Assert
        assert response["id"] == 0
        assert response["result"] == {
            "protocolVersion": "2025-03-26",
            "capabilities": {"tools": {}},
            "serverInfo": {"name": "example-mcp-server", "version": "0.1.0"},
        }

    @pytest.mark.anyio()
    async def test_initialize_falls_back_to_latest_version(
        self, server: MCPServer
    ) -> None:
        """An unsupported protocol version is answered with the latest one."""
        # Act
        response = _wire(
            await server.handle_message(
                _request(1, "initialize", {"protocolVersion": "1999-01-01"})
            )
        )

        # Assert
        assert response["result"]["protocolVersion"] == LATEST_HANDSHAKE_VERSION

    @pytest.mark.anyio()
    async def test_tools_list_matches_catalog(self, server: MCPServer) -> None:
        """tools/list returns the catalog verbatim."""
        # Act
        response = _wire(await server.handle_message(_request("a", "tools/list")))

        # Assert
        assert response == {
            "jsonrpc": "2.0",
            "id": "a",
            "result": {"tools": server.list_tools()},
        }

    @pytest.mark.anyio()
    async def test_tools_call_success_envelope(self, server: MCPServer) -> None:
        """A successful call carries the tool content as its result."""
        # Act
        response = _wire(
            await server.handle_message(
                _request(
                    7,
                    "tools/call",
                    {"name": "add_numbers", "arguments": {"a": 2, "b": 3}},
                )
            )
        )

        # Assert
        assert response == {
            "jsonrpc": "2.0",
            "id": 7,
            "result": {"content": [{"type": "text", "text": "2 + 3 = 5"}]},
        }

    @pytest.mark.anyio()
    async def test_tools_call_failure_envelope(self, server: MCPServer) -> None:
        """A failed call carries the failure code and message as its error."""
        # Act
        response = _wire(
            await server.handle_message(
                _request(8, "tools/call", {"name": "nope", "arguments": {}})
            )
        )

        # Assert
        assert response == {
            "jsonrpc": "2.0",
            "id": 8,
            "error": {"code": -32601, "message": "Unknown tool: nope"},
        }

    @pytest.mark.anyio()
    async def test_tools_call_requires_name(self, server: MCPServer) -> None:
        """tools/call without a tool name is InvalidParams."""
        # Act
        response = _wire(
            await server.handle_message(_request(9, "tools/call", {"arguments": {}}))
        )

        # Assert
        assert response["error"]["code"] == ErrorKind.INVALID_PARAMS

    @pytest.mark.anyio()
    async def test_unknown_method_is_method_not_found(self, server: MCPServer) -> None:
        """Methods outside the tools surface are MethodNotFound."""
        # Act
        response = _wire(await server.handle_message(_request(10, "resources/list")))

        # Assert
        assert response["error"] == {
            "code": ErrorKind.METHOD_NOT_FOUND,
            "message": "Method not found: resources/list",
        }

    @pytest.mark.anyio()
    async def test_notifications_get_no_response(self, server: MCPServer) -> None:
        """Notifications are never answered, known or not."""
        # Act
        initialized = await server.handle_message(
            types.JSONRPCNotification(
                jsonrpc="2.0", method="notifications/initialized"
            )
        )
        unknown = await server.handle_message(
            types.JSONRPCNotification(jsonrpc="2.0", method="notifications/unknown")
        )

        # Assert
        assert initialized is None
        assert unknown is None

    @pytest.mark.anyio()
    async def test_ping(self, server: MCPServer) -> None:
        """ping answers with an empty result."""
        # Act
        response = _wire(await server.handle_message(_request(1, "ping")))

        # Assert
        assert response == {"jsonrpc": "2.0", "id": 1, "result": {}}


class TestLifecycle:
    """start/stop behavior over real and in-memory transports."""

    @pytest.mark.anyio()
    async def test_serves_stdio_lines_until_eof(self, server: MCPServer) -> None:
        """Every request line is answered, notifications are not, then EOF stops."""
        # Arrange
        in_stream = io.StringIO(
            "\n".join(
                [
                    json.dumps({"jsonrpc": "2.0", "id": 1, "method": "tools/list"}),
                    _call(2, "multiply_numbers", {"a": 2, "b": 3}),
                    json.dumps(
                        {"jsonrpc": "2.0", "method": "notifications/initialized"}
                    ),
                    "{not json",
                ]
            )
            + "\n"
        )
        out_stream = io.StringIO()

        # Act
        await server.start(StdioTransport(in_stream, out_stream))

        # Assert
        responses = _lines(out_stream)
        by_id = {response["id"]: response for response in responses}
        assert len(responses) == 3
        assert len(by_id[1]["result"]["tools"]) == 8
        assert by_id[2]["result"]["content"][0]["text"] == "2 * 3 = 6"
        assert by_id[None]["error"]["code"] == ErrorKind.PARSE_ERROR
        assert not server.running

    @pytest.mark.anyio()
    async def test_slow_call_does_not_block_fast_call(self) -> None:
        """Responses are written as soon as each request completes."""
        # Arrange
        server = MCPServer(ToolCatalog([sleep_tool(), echo_tool()]))
        in_stream = io.StringIO(
            _call(1, "sleep", {"seconds": 0.5})
            + "\n"
            + _call(2, "echo", {"text": "x"})
            + "\n"
        )
        out_stream = io.StringIO()

        # Act
        await server.start(StdioTransport(in_stream, out_stream))

        # Assert
        assert [response["id"] for response in _lines(out_stream)] == [2, 1]

    @pytest.mark.anyio()
    async def test_stop_lets_in_flight_calls_finish(self, memory_transport) -> None:
        """stop() stops accepting, but running calls still get their response."""
        # Arrange
        started = anyio.Event()
        server = MCPServer(ToolCatalog([sleep_tool(started)]))

        # Act
        async with anyio.create_task_group() as task_group:
            task_group.start_soon(server.start, memory_transport)
            await memory_transport.feed(
                _request(
                    1, "tools/call", {"name": "sleep", "arguments": {"seconds": 0.1}}
                )
            )
            await started.wait()
            await server.stop()

        # Assert
        sent = memory_transport.sent()
        assert memory_transport.closed
        assert [message["id"] for message in sent] == [1]
        assert sent[0]["result"]["content"][0]["text"] == "slept 0.1"

    @pytest.mark.anyio()
    async def test_client_responses_are_ignored(
        self, server: MCPServer, memory_transport
    ) -> None:
        """Response frames from the client need no answer."""
        # Arrange
        await memory_transport.feed(
            types.JSONRPCResponse(jsonrpc="2.0", id=5, result={})
        )
        await memory_transport.feed(_request(6, "ping"))
        memory_transport.finish()

        # Act
        await server.start(memory_transport)

        # Assert
        assert memory_transport.sent() == [{"jsonrpc": "2.0", "id": 6, "result": {}}]

    @pytest.mark.anyio()
    async def test_malformed_frames_reach_error_sink(self, catalog) -> None:
        """Undecodable frames are reported and answered with InvalidRequest."""
        # Arrange
        errors: list[BaseException] = []
        server = MCPServer(catalog, on_error=errors.append)
        in_stream = io.StringIO('[1, 2]\n{"jsonrpc": "1.0", "id": 4, "method": "x"}\n')
        out_stream = io.StringIO()

        # Act
        await server.start(StdioTransport(in_stream, out_stream))

        # Assert
        responses = _lines(out_stream)
        assert len(responses) == 2
        assert {response["error"]["code"] for response in responses} == {
            ErrorKind.INVALID_REQUEST
        }
        assert {response["id"] for response in responses} == {None}
        assert len(errors) == 2
        assert all(isinstance(error, ValidationError) for error in errors)

    @pytest.mark.anyio()
    async def test_invalid_utf8_does_not_end_the_session(
        self, server: MCPServer
    ) -> None:
        """Undecodable bytes become a parse error and later lines are served."""
        # Arrange
        in_buffer = io.BytesIO(b"\xff\xfe\n" + PING.encode("utf-8") + b"\n")
        out_buffer = io.BytesIO()
        transport = StdioTransport.from_buffers(in_buffer, out_buffer)

        # Act
        await server.start(transport)

        # Assert
        responses = [
            json.loads(line) for line in out_buffer.getvalue().decode().splitlines()
        ]
        assert len(responses) == 2
        assert {"jsonrpc": "2.0", "id": 2, "result": {}} in responses
        assert {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": ErrorKind.PARSE_ERROR, "message": "Parse error"},
        } in responses

    @pytest.mark.anyio()
    async def test_oversized_number_literal_does_not_end_the_session(
        self, server: MCPServer
    ) -> None:
        """A numeric literal too long to convert is answered and serving goes on."""
        # Arrange
        huge = '{"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": '
        huge += '{"name": "add_numbers", "arguments": {"a": '
        huge += "9" * 5001 + ', "b": 3}}}'
        in_stream = io.StringIO(huge + "\n" + PING + "\n")
        out_stream = io.StringIO()

        # Act
        await server.start(StdioTransport(in_stream, out_stream))

        # Assert
        responses = _lines(out_stream)
        assert len(responses) == 2
        assert {"jsonrpc": "2.0", "id": 2, "result": {}} in responses

    @pytest.mark.anyio()
    async def test_start_twice_is_rejected(
        self, server: MCPServer, memory_transport
    ) -> None:
        """A server is bound to at most one transport at a time."""
        # Act / Assert
        async with anyio.create_task_group() as task_group:
            task_group.start_soon(server.start, memory_transport)
            await anyio.wait_all_tasks_blocked()
            with pytest.raises(RuntimeError):
                await server.start(memory_transport)
            await server.stop()
