"""In-Memory Session Store

streamable HTTP 세션을 메모리에 보관하는 저장소입니다.
유휴 시간이 timeout 이상인 세션은 sweep_expired()로 제거됩니다.
"""

from __future__ import annotations

import time
from typing import Callable, Iterator
from uuid import uuid4

from pydantic import BaseModel, Field

from legal_mcp.models.entities import Session
from legal_mcp.utils.logger import get_logger

logger = get_logger(__name__)


class SessionNotFoundError(LookupError):
    """세션이 존재하지 않거나 만료됨"""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class SessionStoreConfig(BaseModel):
    """세션 저장소 설정"""

    timeout_seconds: int = Field(default=30 * 60, ge=1)  # 유휴 세션 만료 시간 (초)


class SessionStore:
    """인메모리 세션 저장소

    모든 변경은 이벤트 루프 스레드에서만 일어나므로 락을 사용하지 않습니다.
    스레드에서 호출하도록 바꾼다면 create/load/touch/delete/sweep 전체를 락으로 보호해야 합니다.
    """

    def __init__(
        self,
        config: SessionStoreConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or SessionStoreConfig()
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    @property
    def timeout_seconds(self) -> int:
        return self.config.timeout_seconds

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def create(self) -> Session:
        """새 세션 생성"""
        session_id = str(uuid4())
        while session_id in self._sessions:
            session_id = str(uuid4())

        now = self._clock()
        session = Session(id=session_id, created_at=now, last_activity=now)
        self._sessions[session_id] = session
        logger.info(f"Created session {session_id}")
        return session

    def load(self, session_id: str) -> Session:
        """세션 조회 (없으면 SessionNotFoundError)"""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def get(self, session_id: str | None) -> Session | None:
        """세션 조회 (없으면 None)"""
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def touch(self, session: Session) -> None:
        """마지막 활동 시각 갱신"""
        session.last_activity = self._clock()

    def delete(self, session_id: str) -> bool:
        """세션 삭제

        Returns:
            삭제되었으면 True, 원래 없었으면 False
        """
        return self._sessions.pop(session_id, None) is not None

    def sweep_expired(self, now: float | None = None) -> list[str]:
        """만료된 세션 제거

        Args:
            now: 기준 시각 (기본값: 저장소 clock)

        Returns:
            제거된 세션 ID 목록
        """
        current_time = self._clock() if now is None else now
        expired_ids = [
            session_id
            for session_id, session in self._sessions.items()
            if session.idle_seconds(current_time) >= self.config.timeout_seconds
        ]
        for session_id in expired_ids:
            del self._sessions[session_id]
            logger.info(f"Session {session_id} expired and was removed")

        return expired_ids
