"""Filesystem tool."""

from __future__ import annotations

from typing import Literal, Optional

import anyio
from pydantic import Field

from example_mcp.errors import ToolOutcome, ToolResult, internal_error, invalid_params
from example_mcp.tools import ToolDefinition, ToolParameters


class FileOperationsParams(ToolParameters):
    """Parameters for the file_operations tool."""

    operation: Literal["read", "write", "list"] = Field(
        description="Type of file operation"
    )
    path: str = Field(description="File or directory path")
    content: Optional[str] = Field(
        default=None, description="Content to write (for write operation)"
    )


async def _read(path: str) -> str:
    content = await anyio.Path(path).read_text(encoding="utf-8")
    return f"File content of {path}:\n{content}"


async def _write(path: str, content: str) -> str:
    await anyio.Path(path).write_text(content, encoding="utf-8")
    return f"Successfully wrote to {path}"


async def _list(path: str) -> str:
    target = anyio.Path(path)
    stats = await target.stat()
    if await target.is_dir():
        names = [entry.name async for entry in target.iterdir()]
        listing = "\n".join(names)
        return f"Directory contents of {path}:\n{listing}"
    return f"{path} is a file (size: {stats.st_size} bytes)"


def file_operations_tool() -> ToolDefinition:
    """Create the file_operations tool.

    Any filesystem fault, including a missing path, is reported as
    ``InternalError``.
    """

    async def handler(params: FileOperationsParams) -> ToolOutcome:
        try:
            if params.operation == "read":
                text = await _read(params.path)
            elif params.operation == "write":
                if params.content is None:
                    return invalid_params(
                        "Content parameter is required for write operation"
                    )
                text = await _write(params.path, params.content)
            else:
                text = await _list(params.path)
        except (OSError, UnicodeDecodeError) as exc:
            return internal_error("File operation failed", exc)
        return ToolResult.text(text)

    return ToolDefinition(
        name="file_operations",
        description="Perform basic file operations (read, write, list)",
        parameters_model=FileOperationsParams,
        handler=handler,
    )
