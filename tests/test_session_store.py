"""Tests for the in-memory session store and idle eviction."""

import pytest

from legal_mcp.core.session_store import SessionNotFoundError, SessionStore, SessionStoreConfig
from tests.helpers import FakeClock


def test_create_allocates_unique_uninitialized_sessions(store, clock):
    first = store.create()
    second = store.create()

    assert first.id != second.id
    assert first.initialized is False
    assert first.created_at == first.last_activity == clock.now
    assert len(store) == 2
    assert first.id in store and second.id in store


def test_load_returns_session_and_raises_when_missing(store):
    session = store.create()
    assert store.load(session.id) is session

    with pytest.raises(SessionNotFoundError) as exc_info:
        store.load("missing")
    assert exc_info.value.session_id == "missing"


def test_get_is_optional_lookup(store):
    session = store.create()
    assert store.get(session.id) is session
    assert store.get("missing") is None
    assert store.get(None) is None
    assert store.get("") is None


def test_touch_refreshes_last_activity(store, clock):
    session = store.create()
    clock.advance(30)
    store.touch(session)
    assert session.last_activity == clock.now
    assert session.created_at == clock.now - 30


def test_delete_is_idempotent_and_reports_presence(store):
    session = store.create()
    assert store.delete(session.id) is True
    assert store.delete(session.id) is False
    assert session.id not in store


def test_initialized_flag_is_monotonic(store):
    session = store.create()
    session.mark_initialized()
    session.mark_initialized()
    assert session.initialized is True


def test_sweep_evicts_sessions_idle_for_the_full_window(store, clock):
    session = store.create()
    clock.advance(60)

    assert store.sweep_expired() == [session.id]
    with pytest.raises(SessionNotFoundError):
        store.load(session.id)


def test_session_touched_just_before_window_survives(store, clock):
    session = store.create()
    clock.advance(59)
    store.touch(session)
    clock.advance(59)

    assert store.sweep_expired() == []
    assert store.load(session.id) is session


def test_sweep_accepts_explicit_now():
    clock = FakeClock(start=0.0)
    store = SessionStore(SessionStoreConfig(timeout_seconds=10), clock=clock)
    stale = store.create()
    clock.advance(5)
    fresh = store.create()

    assert store.sweep_expired(now=10.0) == [stale.id]
    assert fresh.id in store
    assert len(store) == 1


def test_iterating_the_store_is_safe_while_deleting(store):
    for _ in range(3):
        store.create()
    for session in store:
        store.delete(session.id)
    assert len(store) == 0
