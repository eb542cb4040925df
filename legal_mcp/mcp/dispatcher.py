"""legal_mcp.mcp.dispatcher

Routes a single JSON-RPC request to its protocol operation.

Supported methods:
- initialize  (no session required; creates one)
- ping
- tools/list
- tools/call

The transport is stateless between HTTP calls, so the protocol state
(unbound / bound-uninitialized / bound-initialized) lives on the ``Session``
passed in, never on the dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import mcp.types as types
from mcp.shared.exceptions import McpError
from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS

from legal_mcp.core.session_store import SessionStore
from legal_mcp.mcp.messages import INITIALIZE_METHOD, RequestMessage
from legal_mcp.models.entities import Session
from legal_mcp.tools.registry import ToolRegistry


@dataclass(frozen=True)
class DispatchResult:
    result: dict[str, Any]
    new_session_id: Optional[str] = None


def rpc_error(code: int, message: str) -> McpError:
    return McpError(types.ErrorData(code=code, message=message))


def negotiate_protocol_version(requested: Any) -> str:
    if isinstance(requested, str) and requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return types.LATEST_PROTOCOL_VERSION


def _dump(model: Any) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


class RequestDispatcher:
    def __init__(
        self,
        store: SessionStore,
        tools: ToolRegistry,
        *,
        server_name: str,
        server_version: str,
        instructions: str | None = None,
    ):
        self.store = store
        self.tools = tools
        self.server_name = server_name
        self.server_version = server_version
        self.instructions = instructions

    async def dispatch(self, request: RequestMessage, session: Session | None) -> DispatchResult:
        method = request.method

        if method == INITIALIZE_METHOD:
            return self._initialize(request)

        if method == "ping":
            self._bind(session)
            return DispatchResult(result={})

        if method == "tools/list":
            self._bind(session)
            return DispatchResult(result={"tools": [_dump(tool) for tool in self.tools.list_tools()]})

        if method == "tools/call":
            self._bind(session)
            name = request.params.get("name")
            if not isinstance(name, str):
                raise rpc_error(types.INVALID_PARAMS, "Tool name is required")

            result = await self.tools.call_tool(name, request.params.get("arguments"))
            return DispatchResult(result=_dump(result))

        raise rpc_error(types.METHOD_NOT_FOUND, f"Unsupported method: {method}")

    def _initialize(self, request: RequestMessage) -> DispatchResult:
        session = self.store.create()
        result = types.InitializeResult(
            protocolVersion=negotiate_protocol_version(request.params.get("protocolVersion")),
            capabilities=types.ServerCapabilities(tools=types.ToolsCapability()),
            serverInfo=types.Implementation(name=self.server_name, version=self.server_version),
            instructions=self.instructions,
        )
        return DispatchResult(result=_dump(result), new_session_id=session.id)

    def _bind(self, session: Session | None) -> Session:
        if session is None:
            raise rpc_error(types.INVALID_REQUEST, "Request requires an active session")
        self.store.touch(session)
        return session
