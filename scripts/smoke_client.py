"""
Smoke test client for a running Legal MCP Server (streamable HTTP)

Usage:
    python scripts/smoke_client.py --url http://localhost:3000/mcp
"""
import argparse
import asyncio
import json
import os
import sys

import httpx

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from legal_mcp.mcp.http_transport import MCP_SESSION_HEADER

HEADERS = {
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}


def parse_sse(body: str) -> list[dict]:
    """Extract JSON-RPC frames from an SSE body"""
    frames = []
    for line in body.splitlines():
        if line.startswith("data: "):
            frames.append(json.loads(line[len("data: "):]))
    return frames


async def main(url: str):
    async with httpx.AsyncClient(timeout=30.0) as client:
        print("=" * 80)
        print("Legal MCP Server - HTTP smoke test")
        print("=" * 80)

        # 1. Handshake
        response = await client.post(
            url,
            headers=HEADERS,
            json={
                "jsonrpc": "2.0",
                "id": 1,
                "method": "initialize",
                "params": {"protocolVersion": "2025-03-26", "capabilities": {}},
            },
        )
        response.raise_for_status()
        session_id = response.headers.get(MCP_SESSION_HEADER)
        if not session_id:
            print("❌ Server did not return a session id")
            return
        print(f"✅ Session: {session_id}")
        for frame in parse_sse(response.text):
            print(json.dumps(frame, indent=2, ensure_ascii=False))

        session_headers = {**HEADERS, MCP_SESSION_HEADER: session_id}

        # 2. Acknowledge the handshake
        response = await client.post(
            url,
            headers=session_headers,
            json={"jsonrpc": "2.0", "method": "notifications/initialized"},
        )
        print(f"initialized notification -> {response.status_code}")

        # 3. List tools and call one in the same batch
        response = await client.post(
            url,
            headers=session_headers,
            json=[
                {"jsonrpc": "2.0", "id": 2, "method": "tools/list", "params": {}},
                {
                    "jsonrpc": "2.0",
                    "id": 3,
                    "method": "tools/call",
                    "params": {
                        "name": "legal_think",
                        "arguments": {
                            "thought": "Identify the applicable consumer protection framework",
                            "category": "consumer_protection",
                            "thoughtNumber": 1,
                            "totalThoughts": 3,
                            "nextThoughtNeeded": True,
                        },
                    },
                },
            ],
        )
        response.raise_for_status()
        for frame in parse_sse(response.text):
            print("-" * 80)
            print(json.dumps(frame, indent=2, ensure_ascii=False))

        # 4. Terminate the session
        response = await client.delete(url, headers={MCP_SESSION_HEADER: session_id})
        print("-" * 80)
        print(f"DELETE -> {response.status_code}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Smoke test a running Legal MCP Server")
    parser.add_argument("--url", default="http://localhost:3000/mcp")
    args = parser.parse_args()

    asyncio.run(main(args.url))
