"""
Centralized Test Configuration.
"""

import itertools
from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from backend.app.main import app
from backend.app.db.session import get_db, Base
from backend.app.core.redis_client import get_redis
import backend.app.core.redis_client as redis_client_module
from backend.app.models.driver import Driver
from backend.app.models.fleet_enums import DriverPayType, TruckType
from backend.app.models.order import Order
from backend.app.models.order_enums import OrderStatus
from backend.app.models.trip import Trip
from backend.app.models.trip_enums import TripStatus
from backend.app.models.truck import Truck
from backend.app.services.events import EventPublisher

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.published = []
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def publish(self, channel, message):
        if self._closed:
            return 0
        self.published.append((channel, message))
        return 1

    async def aclose(self):
        self._closed = True


@pytest.fixture
def mock_redis():
    return MockRedis()


@pytest.fixture
def publisher(mock_redis):
    return EventPublisher(mock_redis, channel_prefix="dispatch", enabled=True)


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# Shared session for fixture data creation and service tests
@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory, mock_redis, monkeypatch):
    """Async client for testing, wired to the test database and MockRedis."""
    monkeypatch.setattr(redis_client_module, "redis_client", mock_redis)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        return mock_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


# Data factories

_sequence = itertools.count(1)


@pytest.fixture
def make_truck(db_session):
    async def _make(truck_type: TruckType = TruckType.SEVEN_CAR) -> Truck:
        truck = Truck(unit_number=f"T-{next(_sequence)}", truck_type=truck_type)
        db_session.add(truck)
        await db_session.commit()
        await db_session.refresh(truck)
        return truck
    return _make


@pytest.fixture
def make_driver(db_session):
    async def _make(
        pay_type: DriverPayType = DriverPayType.PERCENTAGE_OF_CARRIER_PAY,
        pay_rate: Decimal = Decimal("0")
    ) -> Driver:
        driver = Driver(first_name="Test", last_name=f"Driver{next(_sequence)}", pay_type=pay_type, pay_rate=pay_rate)
        db_session.add(driver)
        await db_session.commit()
        await db_session.refresh(driver)
        return driver
    return _make


@pytest.fixture
def make_trip(db_session):
    async def _make(truck_id=None, driver_id=None, **fields) -> Trip:
        trip = Trip(truck_id=truck_id, driver_id=driver_id, status=fields.pop("status", TripStatus.PLANNED), **fields)
        db_session.add(trip)
        await db_session.commit()
        await db_session.refresh(trip)
        return trip
    return _make


@pytest.fixture
def make_order(db_session):
    async def _make(**fields) -> Order:
        fields.setdefault("status", OrderStatus.NEW)
        fields.setdefault("revenue", Decimal("1000"))
        fields.setdefault("carrier_pay", Decimal("0"))
        fields.setdefault("broker_fee", Decimal("0"))
        fields.setdefault("local_fee", Decimal("0"))
        order = Order(order_number=f"ORD-{next(_sequence)}", **fields)
        db_session.add(order)
        await db_session.commit()
        await db_session.refresh(order)
        return order
    return _make
