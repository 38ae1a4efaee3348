# tests/conftest.py
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

from foodbank.main import app
from foodbank.schemas import User
from foodbank.services.matching import DonationEngine

class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)

@pytest.fixture(scope="session")
def anyio_backend():
    # keep AnyIO on asyncio for the whole test session
    return "asyncio"

@pytest.fixture
async def test_client():
    # fresh lifespan per test -> fresh engine and user registry
    async with LifespanManager(app):
        transport = ASGITransport(app=app, raise_app_exceptions=True)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc))

@pytest.fixture
def engine(clock):
    return DonationEngine(clock=clock)

@pytest.fixture
def donor():
    return User(id=1, name="Alice Donor", email="alice@donor", role="donor")

@pytest.fixture
def recipient():
    return User(id=2, name="Bob Recipient", email="bob@rec", role="recipient")
