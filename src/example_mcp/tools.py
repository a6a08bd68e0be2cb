"""Tool definitions, argument validation and the tool catalog."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from functools import cached_property
from types import MappingProxyType
from typing import Annotated, Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError, WithJsonSchema

from example_mcp.errors import ToolFailure, ToolOutcome, invalid_params

Number = Annotated[Union[int, float], WithJsonSchema({"type": "number"})]
"""JSON number that keeps integers as integers and rejects booleans."""


class ToolParameters(BaseModel):
    """Base parameters schema for MCP tools.

    Validation is strict: values are never coerced between primitive kinds.
    Undeclared fields are kept and exposed through ``model_extra``.
    """

    model_config = ConfigDict(strict=True, extra="allow")


ToolHandler = Callable[[Any], Awaitable[ToolOutcome]]


def _clean_schema(node: Any) -> Any:
    """Drop pydantic titles and collapse ``X | None`` into ``X``."""
    if isinstance(node, list):
        return [_clean_schema(item) for item in node]
    if not isinstance(node, dict):
        return node
    any_of = node.get("anyOf")
    if any_of is not None:
        members = [member for member in any_of if member.get("type") != "null"]
        if len(members) == 1:
            rest = {key: value for key, value in node.items() if key != "anyOf"}
            node = {**members[0], **rest}
    return {
        key: _clean_schema(value)
        for key, value in node.items()
        if not (key == "title" and isinstance(value, str))
        and not (key == "default" and value is None)
    }


_JSON_KINDS: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
    "object": (dict,),
    "array": (list, tuple),
    "null": (type(None),),
}


def _is_json_kind(value: Any, kind: str) -> bool:
    """Whether ``value`` is of the JSON schema primitive ``kind``."""
    if isinstance(value, bool) and kind != "boolean":
        return False
    return isinstance(value, _JSON_KINDS.get(kind, (object,)))


@dataclass(frozen=True)
class ToolDefinition:
    """Description of a tool that can be registered with the server.

    Attributes:
        name: Unique name of the tool.
        description: Human-readable description of the tool purpose.
        parameters_model: Pydantic model used to validate input parameters.
        handler: Coroutine function executing the tool logic on validated
            parameters.
    """

    name: str
    description: str
    parameters_model: type[ToolParameters]
    handler: ToolHandler

    @cached_property
    def input_schema(self) -> dict[str, Any]:
        """JSON schema advertised to clients for this tool's arguments."""
        schema = _clean_schema(self.parameters_model.model_json_schema())
        schema.setdefault("properties", {})
        return schema

    def validate(self, arguments: Mapping[str, Any]) -> ToolParameters | ToolFailure:
        """Validate incoming tool arguments without coercion.

        Args:
            arguments: Raw arguments provided by the client.

        Returns:
            The validated parameter model, or an ``InvalidParams`` failure
            describing the first offending field in declaration order.
        """
        try:
            return self.parameters_model.model_validate(dict(arguments))
        except ValidationError as error:
            return self._describe_error(error.errors()[0])

    def _describe_error(self, error: Mapping[str, Any]) -> ToolFailure:
        location = error.get("loc") or ("arguments",)
        field_name = str(location[0])
        if error["type"] == "missing":
            return invalid_params(f"Missing required parameter '{field_name}'")
        path = [field_name]
        prop = self.input_schema["properties"].get(field_name, {})
        for segment in location[1:]:
            if isinstance(segment, int) and "items" in prop:
                prop = prop["items"]
            elif segment in prop.get("properties", {}):
                prop = prop["properties"][segment]
            elif isinstance(segment, str) and isinstance(
                prop.get("additionalProperties"), dict
            ):
                prop = prop["additionalProperties"]
            else:
                # union member tags such as "int" are not part of the path
                break
            path.append(str(segment))
        name = ".".join(path)
        kind = prop.get("type", "valid value")
        if (
            error["type"] == "literal_error"
            and "enum" in prop
            and _is_json_kind(error.get("input"), kind)
        ):
            choices = ", ".join(str(choice) for choice in prop["enum"])
            return invalid_params(f"Parameter '{name}' must be one of: {choices}")
        return invalid_params(f"Parameter '{name}' must be of type {kind}")

    def descriptor(self) -> dict[str, Any]:
        """Return the discovery descriptor sent in ``tools/list``."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolCatalog:
    """Immutable table of tool definitions in registration order."""

    def __init__(self, tools: Iterable[ToolDefinition]) -> None:
        """Build the catalog.

        Raises:
            ValueError: If two tools share a name.
        """
        entries: dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in entries:
                raise ValueError(f"Tool '{tool.name}' is already registered")
            entries[tool.name] = tool
        self._tools = MappingProxyType(entries)

    def tools(self) -> tuple[ToolDefinition, ...]:
        """Return every tool in registration order."""
        return tuple(self._tools.values())

    def lookup(self, name: str) -> ToolDefinition | None:
        """Return the tool registered under ``name``, if any."""
        return self._tools.get(name)

    def descriptors(self) -> list[dict[str, Any]]:
        """Return wire descriptors in registration order."""
        return [tool.descriptor() for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
