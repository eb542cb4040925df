import httpx
import pytest

from legal_mcp.core.session_store import SessionStore, SessionStoreConfig
from legal_mcp.main import create_app

from tests.helpers import FakeClock


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return SessionStore(SessionStoreConfig(timeout_seconds=60), clock=clock)


@pytest.fixture
def app(store):
    return create_app(store=store, start_sweeper=False)


@pytest.fixture
async def client(app, anyio_backend):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
