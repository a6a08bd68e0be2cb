"""Entry point for the example MCP server."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
from collections.abc import Mapping

import anyio

from example_mcp.server import MCPServer
from example_mcp.transport import StdioTransport, Transport
from example_mcp_server.config import Settings
from example_mcp_server.fastmcp_adapter import build_fastmcp_app
from example_mcp_server.http_client import HttpClient
from example_mcp_server.tools import build_catalog

logger = logging.getLogger("example_mcp_server")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(description="Example MCP server")
    parser.add_argument(
        "--transport",
        choices=("stdio", "http"),
        default="stdio",
        help="Serve over stdio (default) or FastMCP's HTTP transport.",
    )
    parser.add_argument("--host", default="127.0.0.1", help="HTTP bind host.")
    parser.add_argument("--port", type=int, default=8000, help="HTTP bind port.")
    parser.add_argument("--path", default="/mcp", help="HTTP endpoint path.")
    parser.add_argument("--log-level", default=None, help="Logging level.")
    parser.add_argument(
        "--catalog", action="store_true", help="Print the tool catalog and exit."
    )
    return parser


def configure_logging(level: str) -> None:
    """Send diagnostics to stderr; stdout carries the protocol."""
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def create_server(
    settings: Settings,
    client: HttpClient,
    environ: Mapping[str, str] | None = None,
) -> MCPServer:
    """Build the catalog and wrap it in a server."""
    return MCPServer(
        build_catalog(client, settings, environ),
        name=settings.server_name,
        version=settings.server_version,
    )


async def _stop_on_signal(server: MCPServer) -> None:
    with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
        async for signum in signals:
            logger.info("Received %s, shutting down", signal.Signals(signum).name)
            await server.stop()
            return


async def serve(server: MCPServer, transport: Transport) -> None:
    """Run ``server`` on ``transport`` until EOF or an interrupt."""
    async with anyio.create_task_group() as task_group:
        task_group.start_soon(_stop_on_signal, server)
        await server.start(transport)
        task_group.cancel_scope.cancel()


async def serve_stdio(server: MCPServer) -> None:
    """Serve over the process standard streams."""
    logger.info("%s running on stdio", server.name)
    await serve(server, StdioTransport())


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(args.log_level or settings.log_level)

    client = HttpClient(user_agent=settings.user_agent)
    try:
        server = create_server(settings, client)
        if args.catalog:
            print(json.dumps(server.to_catalog(), indent=2))
            return 0
        if args.transport == "http":
            app, _ = build_fastmcp_app(server)
            app.run(transport="http", host=args.host, port=args.port, path=args.path)
        else:
            anyio.run(serve_stdio, server)
    except Exception:
        logger.exception("Failed to start server")
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
