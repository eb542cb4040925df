"""Tests for the stdio transport built on the SDK low-level server."""

import pytest
from mcp.shared.memory import create_connected_server_and_client_session

from legal_mcp.mcp.server import create_stdio_server


@pytest.mark.anyio
async def test_stdio_server_lists_registry_tools():
    server = create_stdio_server()
    async with create_connected_server_and_client_session(server) as client:
        result = await client.list_tools()

    assert [tool.name for tool in result.tools] == [
        "legal_think",
        "legal_ask_followup_question",
        "legal_attempt_completion",
    ]


@pytest.mark.anyio
async def test_stdio_server_calls_tools_through_registry():
    server = create_stdio_server()
    async with create_connected_server_and_client_session(server) as client:
        ok = await client.call_tool("legal_attempt_completion", {"result": "Claim is time-barred."})
        failed = await client.call_tool("legal_attempt_completion", {})

    assert ok.isError is False
    assert "Claim is time-barred." in ok.content[0].text
    assert failed.isError is True
