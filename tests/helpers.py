"""Shared test helpers for the streamable HTTP transport tests."""

from __future__ import annotations

import json
from typing import Any

import httpx

from legal_mcp.mcp.http_transport import MCP_SESSION_HEADER

MCP_PATH = "/mcp"

HEADERS = {
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}


class FakeClock:
    """Manually advanced clock for session timeout tests."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def rpc(request_id: Any, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    message: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


def notification(method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    message: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        message["params"] = params
    return message


def parse_sse(body: str) -> list[dict[str, Any]]:
    """Return the JSON-RPC frames carried in ``data:`` lines of an SSE body."""
    return [json.loads(line[len("data: "):]) for line in body.splitlines() if line.startswith("data: ")]


def session_headers(session_id: str) -> dict[str, str]:
    return {**HEADERS, MCP_SESSION_HEADER: session_id}


async def post(client: httpx.AsyncClient, payload: Any, session_id: str | None = None) -> httpx.Response:
    headers = session_headers(session_id) if session_id else HEADERS
    return await client.post(MCP_PATH, headers=headers, content=json.dumps(payload))


async def initialize_session(client: httpx.AsyncClient, request_id: Any = 0) -> str:
    """Run the handshake and return the new session id."""
    response = await post(client, rpc(request_id, "initialize", {"protocolVersion": "2025-03-26"}))
    assert response.status_code == 200
    session_id = response.headers[MCP_SESSION_HEADER]
    assert session_id
    return session_id
