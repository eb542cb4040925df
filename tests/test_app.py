"""Tests for the auxiliary HTTP endpoints and app wiring."""

import httpx
import pytest

from legal_mcp.config.settings import Settings
from legal_mcp.main import create_app
from tests.helpers import initialize_session


@pytest.mark.anyio
async def test_health_reports_active_sessions(client):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["active_sessions"] == 0

    await initialize_session(client)
    assert (await client.get("/health")).json()["active_sessions"] == 1


@pytest.mark.anyio
async def test_service_info_lists_endpoints_and_tools(client):
    body = (await client.get("/")).json()
    assert body["endpoints"] == {"health": "/health", "mcp": "/mcp", "tools": "/tools"}
    assert "legal_think" in body["tools"]


@pytest.mark.anyio
async def test_tools_endpoint_enumerates_registry(client):
    body = (await client.get("/tools")).json()
    names = [tool["name"] for tool in body["tools"]]
    assert names == ["legal_think", "legal_ask_followup_question", "legal_attempt_completion"]
    assert body["tools"][0]["inputSchema"]["type"] == "object"


@pytest.mark.anyio
async def test_cors_exposes_session_header(client):
    response = await client.get("/health", headers={"Origin": "https://example.org"})
    assert response.headers["access-control-allow-origin"] == "https://example.org"
    assert "Mcp-Session-Id" in response.headers["access-control-expose-headers"]


@pytest.mark.anyio
async def test_custom_endpoint_path(store):
    app = create_app(Settings(mcp_endpoint="/rpc"), store=store, start_sweeper=False)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/rpc")
        assert response.status_code == 405
        assert (await client.get("/")).json()["endpoints"]["mcp"] == "/rpc"


def test_app_state_shares_the_injected_store(app, store):
    assert app.state.session_store is store
    assert app.state.dispatcher.store is store
    assert app.state.mcp_endpoint.store is store
