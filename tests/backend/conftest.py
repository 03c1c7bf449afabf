import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from stings.config import DEFAULT_ACCESS_CODES_PATH
from stings.core.access_codes import AccessCodeTable
from stings.core.db import UserStore
from stings.main import create_app
from stings.services.accounts import AccountService


TEST_DB_URL = "sqlite://:memory:"
START_MS = 1_700_000_000_000


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(scope="session")
def codes():
    return AccessCodeTable.load(DEFAULT_ACCESS_CODES_PATH)


@pytest_asyncio.fixture
async def store():
    """
    A fresh in-memory SQLite user store for every test.
    """
    s = UserStore(TEST_DB_URL)
    await s.init()
    yield s
    await s.close()


@pytest.fixture
def accounts(store, codes, clock):
    return AccountService(store, codes, clock=clock)


@pytest_asyncio.fixture
async def client(store, accounts):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB
    and the fake clock wired into the account service.
    """
    app = create_app(store=store)
    app.state.accounts = accounts
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture
def username():
    """Unique valid username starting with "A"."""
    return f"Alice_{uuid.uuid4().hex[:6]}"
