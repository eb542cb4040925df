"""legal_mcp.mcp.http_transport

Streamable HTTP transport for the MCP endpoint.

Surface:
- POST   /mcp  JSON-RPC message or batch -> 202 (notifications only) or an SSE stream
- DELETE /mcp  terminate the session named by ``Mcp-Session-Id``
- GET    /mcp  405, the server never opens server-initiated streams

Validation failures before the stream opens are raised as ``HTTPException``
with an ``{"error", "message"}`` detail and rendered by the application's error
envelope. Once the stream is open every request yields exactly one frame,
success or error, in completion order.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional, Sequence

import anyio
import mcp.types as types
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import StreamingResponse
from mcp.shared.exceptions import McpError

from legal_mcp.core.session_store import SessionNotFoundError, SessionStore
from legal_mcp.mcp.dispatcher import RequestDispatcher
from legal_mcp.mcp.messages import (
    BatchFramingError,
    NotificationMessage,
    RequestMessage,
    ResponseMessage,
    decode_body,
    partition,
)
from legal_mcp.models.entities import Session
from legal_mcp.utils.logger import get_logger

logger = get_logger(__name__)


MCP_SESSION_HEADER = "Mcp-Session-Id"

INITIALIZED_NOTIFICATIONS = ("initialized", "notifications/initialized")
ACTIVITY_NOTIFICATIONS = ("notifications/cancelled", "notifications/progress")

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def transport_error(status_code: int, error: str, message: str, headers: dict[str, str] | None = None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": error, "message": message},
        headers=headers,
    )


def success_frame(request_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def error_frame(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


def encode_sse(frame: dict[str, Any]) -> str:
    return f"data: {json.dumps(frame, ensure_ascii=False)}\n\n"


@dataclass
class _BatchOutcome:
    session_id: Optional[str] = None

    def attach(self, session_id: str) -> None:
        # First handshake response wins.
        if self.session_id is None:
            self.session_id = session_id


class StreamableHTTPEndpoint:
    def __init__(
        self,
        store: SessionStore,
        dispatcher: RequestDispatcher,
        *,
        max_body_bytes: int | None = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.max_body_bytes = max_body_bytes
        self._batches: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # POST
    # ------------------------------------------------------------------

    async def handle_post(self, request: Request) -> Response:
        self._check_accept(request)
        self._check_content_type(request)
        self._check_declared_length(request)

        body = await request.body()
        if self.max_body_bytes is not None and len(body) > self.max_body_bytes:
            raise transport_error(413, "PayloadTooLarge", "Request body exceeds the size limit")

        try:
            messages = decode_body(body)
        except BatchFramingError as e:
            raise transport_error(400, "InvalidPayload", str(e)) from e

        if not messages:
            raise transport_error(400, "InvalidPayload", "Empty JSON-RPC payload")

        header_session_id = request.headers.get(MCP_SESSION_HEADER) or None
        batch = partition(messages)

        self.process_notifications(header_session_id, batch.notifications)
        self._log_client_responses(header_session_id, batch.responses)

        if not batch.requests:
            return Response(status_code=202)

        if batch.has_handshake and len(batch.requests) > 1:
            raise transport_error(400, "InvalidBatch", "Initialize request must be sent separately.")

        if batch.requires_session:
            session = self._load_session(header_session_id)
        else:
            session = self.store.get(header_session_id)

        return await self._stream(batch.requests, session)

    def _check_accept(self, request: Request) -> None:
        accept = request.headers.get("accept", "").lower()
        if "application/json" not in accept and "text/event-stream" not in accept:
            raise transport_error(
                406,
                "NotAcceptable",
                "Clients must include application/json or text/event-stream in the Accept header.",
            )

    def _check_content_type(self, request: Request) -> None:
        content_type = request.headers.get("content-type", "").lower()
        if "application/json" not in content_type:
            raise transport_error(415, "UnsupportedMediaType", "Content-Type must be application/json")

    def _check_declared_length(self, request: Request) -> None:
        if self.max_body_bytes is None:
            return
        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_body_bytes:
            raise transport_error(413, "PayloadTooLarge", "Request body exceeds the size limit")

    def _load_session(self, session_id: str | None) -> Session:
        if not session_id:
            raise transport_error(400, "MissingSessionId", f"Missing {MCP_SESSION_HEADER} header")
        try:
            return self.store.load(session_id)
        except SessionNotFoundError as e:
            raise transport_error(404, "SessionNotFound", "Session not found") from e

    def process_notifications(
        self,
        header_session_id: str | None,
        notifications: Sequence[NotificationMessage],
    ) -> None:
        if not notifications:
            return

        session = self._load_session(header_session_id)

        for notification in notifications:
            if notification.method in INITIALIZED_NOTIFICATIONS:
                session.mark_initialized()
                self.store.touch(session)
                logger.info(f"Session {session.id} marked as initialized")
            elif notification.method in ACTIVITY_NOTIFICATIONS:
                # No cancellation support; in-flight work runs to completion.
                self.store.touch(session)
                logger.debug(f"Received {notification.method} notification: {notification.params}")
            else:
                logger.debug(f"Unhandled notification: {notification.method}")

    def _log_client_responses(self, session_id: str | None, responses: Sequence[ResponseMessage]) -> None:
        if not responses:
            return
        ids = [response.id for response in responses]
        logger.debug(f"Ignoring client response(s) {ids} for session {session_id}")

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    async def _stream(self, requests: Sequence[RequestMessage], session: Session | None) -> StreamingResponse:
        # One frame per request and a buffer that holds them all, so senders never block.
        send_stream, receive_stream = anyio.create_memory_object_stream(max_buffer_size=len(requests))
        outcome = _BatchOutcome()

        runner = asyncio.create_task(self._run_batch(requests, session, send_stream, outcome))
        self._batches.add(runner)
        runner.add_done_callback(self._batches.discard)

        # Headers go out with the first chunk, so wait for the first frame before
        # committing them; a handshake is always alone in its batch.
        try:
            first = await receive_stream.receive()
        except anyio.EndOfStream:
            receive_stream.close()
            await runner
            raise RuntimeError("Batch finished without producing a frame")

        headers = dict(SSE_HEADERS)
        if outcome.session_id is not None:
            headers[MCP_SESSION_HEADER] = outcome.session_id

        return StreamingResponse(
            self._frames(first, receive_stream),
            media_type="text/event-stream",
            headers=headers,
        )

    async def _frames(
        self,
        first: dict[str, Any],
        receive_stream: MemoryObjectReceiveStream[dict[str, Any]],
    ) -> AsyncIterator[str]:
        try:
            yield encode_sse(first)
            async for frame in receive_stream:
                yield encode_sse(frame)
        finally:
            receive_stream.close()

    async def _run_batch(
        self,
        requests: Sequence[RequestMessage],
        session: Session | None,
        send_stream: MemoryObjectSendStream[dict[str, Any]],
        outcome: _BatchOutcome,
    ) -> None:
        async with send_stream:
            async with anyio.create_task_group() as tg:
                for request in requests:
                    tg.start_soon(self._run_request, request, session, send_stream, outcome)

    async def _run_request(
        self,
        request: RequestMessage,
        session: Session | None,
        send_stream: MemoryObjectSendStream[dict[str, Any]],
        outcome: _BatchOutcome,
    ) -> None:
        try:
            dispatched = await self.dispatcher.dispatch(request, session)
        except McpError as e:
            frame = error_frame(request.id, e.error.code, e.error.message)
        except Exception:
            logger.exception(f"Unhandled RPC error while handling {request.method}")
            frame = error_frame(request.id, types.INTERNAL_ERROR, "Internal server error")
        else:
            if dispatched.new_session_id is not None:
                outcome.attach(dispatched.new_session_id)
            frame = success_frame(request.id, dispatched.result)

        try:
            await send_stream.send(frame)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            logger.debug(f"Client stream closed, dropping frame for request {request.id!r}")

    # ------------------------------------------------------------------
    # DELETE / GET
    # ------------------------------------------------------------------

    async def handle_delete(self, request: Request) -> Response:
        session_id = request.headers.get(MCP_SESSION_HEADER)
        if not session_id:
            raise transport_error(400, "MissingSessionId", f"Missing {MCP_SESSION_HEADER} header")

        if not self.store.delete(session_id):
            raise transport_error(404, "SessionNotFound", "Session not found")

        logger.info(f"Session {session_id} terminated via DELETE")
        return Response(status_code=204)

    async def handle_get(self, request: Request) -> Response:
        raise transport_error(
            405,
            "MethodNotAllowed",
            "Server-initiated SSE streams are not supported on this endpoint.",
            headers={"Allow": "POST, DELETE"},
        )


def create_mcp_router(endpoint: StreamableHTTPEndpoint, path: str = "/mcp") -> APIRouter:
    router = APIRouter()

    @router.post(path, include_in_schema=False)
    async def mcp_post(request: Request) -> Response:
        return await endpoint.handle_post(request)

    @router.delete(path, include_in_schema=False)
    async def mcp_delete(request: Request) -> Response:
        return await endpoint.handle_delete(request)

    @router.get(path, include_in_schema=False)
    async def mcp_get(request: Request) -> Response:
        return await endpoint.handle_get(request)

    return router
