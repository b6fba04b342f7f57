"""
Centralized Test Configuration.
"""

import pytest
import httpx
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from parcel_tracker.app.main import app
from parcel_tracker.app.core.config import Settings
from parcel_tracker.app.core.dependencies import get_tracking_gateway
from parcel_tracker.app.db.session import get_db, Base
from parcel_tracker.app.services.tracking_cache import TrackingCache
from parcel_tracker.app.services.tracking_gateway import ThailandPostGateway

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_TOKEN = "test-token"


class FakeClock:
    """Monotonic clock the tests move forward by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def carrier_event(status, status_date, description=None, detail=None, location=None):
    """Raw carrier event as it appears in the API payload."""
    return {
        "barcode": "EF582568151TH",
        "status": status,
        "status_description": description,
        "status_date": status_date,
        "statusDetail": detail,
        "location": location,
        "postcode": "10000",
        "delivery_status": None,
        "delivery_description": None,
        "delivery_datetime": None,
        "receiver_name": None,
        "signature": None,
    }


def carrier_payload(items):
    """Successful carrier envelope wrapping `items`."""
    return {
        "status": True,
        "message": "successful",
        "response": {
            "items": items,
            "track_count": {
                "track_date": "21/07/2568",
                "count_number": 3,
                "track_count_limit": 1500,
            },
        },
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_gateway(clock):
    """
    Factory for gateways talking to an httpx MockTransport.

    Usage:
        gateway = make_gateway(handler, token="...", timeout_ms=50)
    """
    def factory(handler, token=TEST_TOKEN, timeout_ms=30000, now=None):
        config = Settings(
            thailand_post_api_url="https://track.test/post/api/v1/track",
            thailand_post_api_token=token,
            thailand_post_timeout_ms=timeout_ms,
        )
        client = AsyncClient(transport=httpx.MockTransport(handler))
        kwargs = {"now": now} if now is not None else {}
        return ThailandPostGateway(
            config=config,
            cache=TrackingCache(ttl_seconds=300, clock=clock),
            client=client,
            **kwargs
        )

    return factory


@pytest.fixture
async def db_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def use_gateway():
    """Point the API at a test gateway for the duration of one test."""
    def install(gateway):
        async def override_get_tracking_gateway():
            return gateway

        app.dependency_overrides[get_tracking_gateway] = override_get_tracking_gateway
        return gateway

    yield install
    app.dependency_overrides.pop(get_tracking_gateway, None)


@pytest.fixture
async def client(session_factory):
    """Async client for testing."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_db, None)
