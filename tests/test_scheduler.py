"""Tests for the periodic idle-session sweeper."""

import pytest

from legal_mcp.core.scheduler import SessionSweeper


@pytest.mark.anyio
async def test_sweeper_registers_interval_job_matching_timeout(store):
    sweeper = SessionSweeper(store)
    await sweeper.initialize()
    try:
        assert sweeper.running
        jobs = sweeper.get_jobs()
        assert [job["id"] for job in jobs] == [SessionSweeper.JOB_ID]
        assert jobs[0]["next_run_time"] is not None

        trigger = sweeper.scheduler.get_job(SessionSweeper.JOB_ID).trigger
        assert trigger.interval.total_seconds() == store.timeout_seconds
    finally:
        await sweeper.shutdown()

    assert not sweeper.running


@pytest.mark.anyio
async def test_trigger_sweep_removes_only_idle_sessions(store, clock):
    stale = store.create()
    clock.advance(45)
    fresh = store.create()
    clock.advance(15)

    sweeper = SessionSweeper(store)
    stats = await sweeper.trigger_sweep()

    assert stats["expired_sessions"] == [stale.id]
    assert stats["active_sessions"] == 1
    assert fresh.id in store
    assert stale.id not in store


@pytest.mark.anyio
async def test_shutdown_without_initialize_is_a_noop(store):
    sweeper = SessionSweeper(store)
    await sweeper.shutdown()
    assert not sweeper.running
