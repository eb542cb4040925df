"""Scheduler for idle session eviction

APScheduler를 사용해 유휴 세션을 주기적으로 제거하는 스케줄러입니다.
스윕 주기는 세션 timeout과 같습니다.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from legal_mcp.core.session_store import SessionStore
from legal_mcp.utils.logger import get_logger

logger = get_logger(__name__)


class SessionSweeper:
    """세션 만료 스케줄러"""

    JOB_ID = "sweep_sessions"

    def __init__(self, store: SessionStore, scheduler: AsyncIOScheduler | None = None):
        self.store = store
        self.scheduler = scheduler or AsyncIOScheduler()
        self._initialized = False

    @property
    def running(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """스케줄러 초기화 및 시작"""
        interval = self.store.timeout_seconds
        # async job: AsyncIOScheduler runs coroutines on the event loop, not in a thread pool
        self.scheduler.add_job(
            self._sweep_sessions,
            trigger=IntervalTrigger(seconds=interval),
            id=self.JOB_ID,
            name="Evict idle MCP sessions",
            replace_existing=True,
        )
        logger.info(f"Scheduled session sweep every {interval}s")

        self._initialized = True
        self.scheduler.start()

    async def shutdown(self) -> None:
        """스케줄러 종료"""
        if self._initialized:
            self.scheduler.shutdown(wait=False)
            self._initialized = False
            logger.info("Session sweeper shutdown complete")

    async def _sweep_sessions(self) -> list[str]:
        """만료 세션 제거 작업"""
        expired = self.store.sweep_expired()
        if expired:
            logger.info(f"Session sweep removed {len(expired)} session(s), {len(self.store)} active")
        else:
            logger.debug(f"Session sweep found nothing to remove, {len(self.store)} active")
        return expired

    async def trigger_sweep(self) -> dict[str, Any]:
        """수동으로 스윕 실행

        Returns:
            스윕 결과 통계
        """
        started_at = datetime.now()
        expired = await self._sweep_sessions()

        return {
            "triggered_at": started_at.isoformat(),
            "completed_at": datetime.now().isoformat(),
            "expired_sessions": expired,
            "active_sessions": len(self.store),
        }

    def get_jobs(self) -> list[dict[str, Any]]:
        """등록된 작업 목록 반환"""
        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                }
            )
        return jobs
