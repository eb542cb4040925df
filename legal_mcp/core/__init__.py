"""Core Package for the Legal MCP Server

이 패키지는 세션 저장소와 세션 만료 스케줄러를 포함합니다.
"""

from .scheduler import SessionSweeper
from .session_store import (
    SessionNotFoundError,
    SessionStore,
    SessionStoreConfig,
)

__all__ = [
    # Session Store
    "SessionNotFoundError",
    "SessionStore",
    "SessionStoreConfig",
    # Scheduler
    "SessionSweeper",
]
