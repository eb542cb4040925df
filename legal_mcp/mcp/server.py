"""legal_mcp.mcp.server

MCP server over stdio for the Legal MCP Server.

This is the persistent single-connection transport. The session lifecycle is
handled by the SDK's low-level ``Server``; tools come from the same registry
the streamable HTTP transport uses.
"""

from __future__ import annotations

from typing import Any

import anyio
import mcp.types as types
from mcp.server.lowlevel import NotificationOptions, Server
from mcp.server.stdio import stdio_server

from legal_mcp.config.settings import settings
from legal_mcp.tools.legal import create_legal_tool_registry
from legal_mcp.tools.registry import ToolRegistry
from legal_mcp.utils.logger import get_logger

logger = get_logger(__name__)


def create_stdio_server(tools: ToolRegistry | None = None) -> Server:
    registry = tools if tools is not None else create_legal_tool_registry()

    server = Server(
        settings.service_name,
        version=settings.service_version,
        instructions=(
            "Legal reasoning tools. Use legal_think for step-by-step analysis, "
            "legal_ask_followup_question to gather facts and legal_attempt_completion to conclude."
        ),
    )

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return registry.list_tools()

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        logger.info(f"stdio tool call request: {name}")
        return await registry.call_tool(name, arguments or {})

    return server


async def _run() -> None:
    server = create_stdio_server()
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Legal MCP server running on stdio")
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(
                notification_options=NotificationOptions(
                    prompts_changed=False,
                    resources_changed=False,
                    tools_changed=False,
                ),
                experimental_capabilities={},
            ),
        )


def main() -> None:
    anyio.run(_run)


if __name__ == "__main__":
    main()
