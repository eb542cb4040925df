"""legal_mcp.tools.registry

Tool registry consumed by both transports.

The registry is the boundary between the protocol layer and tool code:
``call_tool`` never raises. Handler failures and unknown tool names come back
as a normal ``CallToolResult`` flagged with ``isError``.
"""

from __future__ import annotations

import inspect
import json
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Union

import mcp.types as types

from legal_mcp.utils.logger import get_logger

logger = get_logger(__name__)

ToolHandler = Callable[[dict[str, Any]], Union[Any, Awaitable[Any]]]


def text_result(payload: Any, is_error: bool = False) -> types.CallToolResult:
    """Wrap a payload as a single text block (plus structured content for dicts)."""
    text = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False, indent=2)
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        structuredContent=payload if isinstance(payload, dict) else None,
        isError=is_error,
    )


def error_result(message: str) -> types.CallToolResult:
    return text_result({"error": message, "status": "failed"}, is_error=True)


class ToolRegistry(ABC):
    """Enumerates tools and executes them by name."""

    @abstractmethod
    def list_tools(self) -> list[types.Tool]:
        """Return the static tool enumeration."""

    @abstractmethod
    async def call_tool(self, name: str, arguments: Any) -> types.CallToolResult:
        """Execute ``name`` with ``arguments``; must not raise."""

    def tool_names(self) -> list[str]:
        return [tool.name for tool in self.list_tools()]


class FunctionToolRegistry(ToolRegistry):
    """Registry backed by plain (sync or async) handler functions.

    Handlers receive the argument dict and return either a ready
    ``CallToolResult`` or any JSON-serializable payload, which is wrapped with
    :func:`text_result`. Raising inside a handler produces an error result.
    """

    def __init__(self) -> None:
        self._tools: dict[str, tuple[types.Tool, ToolHandler]] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def register(self, tool: types.Tool, handler: ToolHandler) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = (tool, handler)

    def tool(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any],
    ) -> Callable[[ToolHandler], ToolHandler]:
        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register(
                types.Tool(name=name, description=description, inputSchema=input_schema),
                handler,
            )
            return handler

        return decorator

    def list_tools(self) -> list[types.Tool]:
        return [tool for tool, _ in self._tools.values()]

    async def call_tool(self, name: str, arguments: Any) -> types.CallToolResult:
        entry = self._tools.get(name)
        if entry is None:
            return text_result({"error": f"Unknown tool: {name}"}, is_error=True)

        _, handler = entry
        args = arguments if isinstance(arguments, dict) else {}

        try:
            result = handler(args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.warning(f"Tool {name} failed: {e}")
            return error_result(str(e))

        if isinstance(result, types.CallToolResult):
            return result
        return text_result(result)
