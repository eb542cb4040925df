"""legal_mcp.main

FastAPI entrypoint for the Legal MCP Server (streamable HTTP transport).

Endpoints:
  - POST/DELETE/GET {settings.mcp_endpoint}   MCP streamable HTTP transport
  - GET /health                              liveness + active session count
  - GET /                                    service metadata
  - GET /tools                               tool enumeration

Sessions live in an in-memory ``SessionStore`` owned by the app; idle sessions
are evicted by a ``SessionSweeper`` started in the app lifespan.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from legal_mcp.config.settings import Settings, settings as default_settings
from legal_mcp.core.scheduler import SessionSweeper
from legal_mcp.core.session_store import SessionStore, SessionStoreConfig
from legal_mcp.mcp.dispatcher import RequestDispatcher
from legal_mcp.mcp.http_transport import MCP_SESSION_HEADER, StreamableHTTPEndpoint, create_mcp_router
from legal_mcp.tools.legal import create_legal_tool_registry
from legal_mcp.tools.registry import ToolRegistry
from legal_mcp.utils.logger import get_logger

logger = get_logger(__name__)


SERVER_DESCRIPTION = "Enterprise-grade HTTP MCP server for legal reasoning and analysis"
SERVER_INSTRUCTIONS = (
    "Legal reasoning tools. Use legal_think to work through a legal problem step by step, "
    "legal_ask_followup_question to gather missing facts, and legal_attempt_completion "
    "to present the conclusion."
)


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[dict[str, Any]] = None
    timestamp: str
    request_id: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
    active_sessions: int


def _error_response(
    request: Request,
    *,
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    payload = ErrorResponse(
        error=error,
        message=message,
        details=details,
        timestamp=datetime.now(timezone.utc).isoformat(),
        request_id=getattr(request.state, "request_id", ""),
    ).model_dump()
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        # Allow raising HTTPException(detail={...}) with our standard schema.
        if isinstance(exc.detail, dict) and "error" in exc.detail and "message" in exc.detail:
            return _error_response(
                request,
                status_code=exc.status_code,
                error=str(exc.detail.get("error")),
                message=str(exc.detail.get("message")),
                details=exc.detail.get("details"),
                headers=exc.headers,
            )

        return _error_response(
            request,
            status_code=exc.status_code,
            error="HTTPException",
            message=str(exc.detail),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error_response(
            request,
            status_code=400,
            error="ValidationError",
            message="Request validation failed",
            details={"errors": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled HTTP error: {exc!r}", exc_info=exc)
        return _error_response(
            request,
            status_code=500,
            error="InternalServerError",
            message="Internal server error",
        )


def create_app(
    config: Settings | None = None,
    *,
    store: SessionStore | None = None,
    tools: ToolRegistry | None = None,
    start_sweeper: bool = True,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Settings to use (defaults to the module-level settings)
        store: Session store to inject (defaults to a fresh in-memory store)
        tools: Tool registry to expose (defaults to the built-in legal tools)
        start_sweeper: Whether the lifespan starts the idle-session sweeper

    Returns:
        Configured FastAPI app; the store, dispatcher and endpoint are on ``app.state``
    """
    config = config or default_settings
    if store is None:
        store = SessionStore(SessionStoreConfig(timeout_seconds=config.session_timeout_seconds))
    if tools is None:
        tools = create_legal_tool_registry()

    dispatcher = RequestDispatcher(
        store,
        tools,
        server_name=config.service_name,
        server_version=config.service_version,
        instructions=SERVER_INSTRUCTIONS,
    )
    endpoint = StreamableHTTPEndpoint(store, dispatcher, max_body_bytes=config.max_body_bytes)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        sweeper = SessionSweeper(store) if start_sweeper else None
        if sweeper is not None:
            await sweeper.initialize()
        app.state.sweeper = sweeper
        logger.info(f"MCP endpoint ready at {config.mcp_endpoint}")
        try:
            yield
        finally:
            if sweeper is not None:
                await sweeper.shutdown()

    app = FastAPI(
        title="Legal MCP Server",
        version=config.service_version,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.session_store = store
    app.state.dispatcher = dispatcher
    app.state.mcp_endpoint = endpoint
    app.state.tools = tools

    if config.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=".*",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=[MCP_SESSION_HEADER],
        )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    _install_error_handlers(app)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            status="ok",
            service=config.service_name,
            version=config.service_version,
            timestamp=datetime.now(timezone.utc).isoformat(),
            active_sessions=len(store),
        )

    @app.get("/")
    async def service_info():
        return {
            "name": "MCP Cerebra Legal Server",
            "description": SERVER_DESCRIPTION,
            "version": config.service_version,
            "endpoints": {
                "health": "/health",
                "mcp": config.mcp_endpoint,
                "tools": "/tools",
            },
            "tools": tools.tool_names(),
        }

    @app.get("/tools")
    async def list_tools():
        return {
            "tools": [
                tool.model_dump(mode="json", by_alias=True, exclude_none=True)
                for tool in tools.list_tools()
            ]
        }

    app.include_router(create_mcp_router(endpoint, config.mcp_endpoint))

    return app


app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run(
        "legal_mcp.main:app",
        host=default_settings.api_host,
        port=default_settings.api_port,
        reload=default_settings.api_reload,
        log_level=default_settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
