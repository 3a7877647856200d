"""
Pytest fixtures for the test database, services, HTTP client and auth.

Each test gets its own SQLite file with all tables created, so tests are
isolated and can open as many concurrent connections as they need.
"""

import os

# Must be set before rail_reservation reads its settings.
os.environ["ENVIRONMENT"] = "test"
os.environ["REDIS_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./rail_reservation_unused.db"

from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from rail_reservation.main import app
from rail_reservation.db.base import Base
from rail_reservation.db.session import create_engine_from_url, create_session_factory, get_session_factory
from rail_reservation.core.security import create_access_token
from rail_reservation.models import Booking, Schedule, SeatClass, Train
from rail_reservation.services.booking_service import BookingService
from rail_reservation.services.cancellation_service import CancellationService
from rail_reservation.services.ticket_issuer import TicketIssuer

AC_FARE = Decimal("1500.00")
SLEEPER_FARE = Decimal("450.50")


class ScriptedRandom:
    """Stands in for the issuer's random source and returns the given numbers in order."""

    def __init__(self, *values: int):
        self.values = list(values)

    def randint(self, low: int, high: int) -> int:
        value = self.values.pop(0)
        assert low <= value <= high
        return value


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create tables in a fresh database file, yield the engine, then dispose it."""
    test_engine = create_engine_from_url(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def booking_service(session_factory) -> BookingService:
    return BookingService(session_factory)


@pytest.fixture
def cancellation_service(session_factory) -> CancellationService:
    return CancellationService(session_factory)


@pytest_asyncio.fixture
async def test_train(session_factory) -> Train:
    """A route with 5 AC and 10 Sleeper seats."""
    train = Train(
        train_number="12951",
        train_name="Mumbai Rajdhani",
        source="Mumbai Central",
        destination="New Delhi",
        departure_time="17:00",
        journey_duration="15:50",
        total_ac_seats=5,
        total_sleeper_seats=10,
        ac_fare=AC_FARE,
        sleeper_fare=SLEEPER_FARE,
    )
    async with session_factory() as session, session.begin():
        session.add(train)
    return train


async def create_schedule(
    session_factory,
    train: Train,
    departure_date: date,
    ac_available: int = None,
    sleeper_available: int = None,
) -> Schedule:
    schedule = Schedule(
        train_number=train.train_number,
        departure_date=departure_date,
        ac_capacity=train.total_ac_seats,
        sleeper_capacity=train.total_sleeper_seats,
        ac_available=train.total_ac_seats if ac_available is None else ac_available,
        sleeper_available=train.total_sleeper_seats if sleeper_available is None else sleeper_available,
    )
    async with session_factory() as session, session.begin():
        session.add(schedule)
    return schedule


@pytest_asyncio.fixture
async def test_schedule(session_factory, test_train) -> Schedule:
    """The test train running 30 days from now with every seat free."""
    return await create_schedule(session_factory, test_train, date.today() + timedelta(days=30))


@pytest_asyncio.fixture
async def past_schedule(session_factory, test_train) -> Schedule:
    return await create_schedule(session_factory, test_train, date.today() - timedelta(days=1))


async def fetch_schedule(session_factory, schedule_id: int) -> Schedule:
    async with session_factory() as session:
        return await session.get(Schedule, schedule_id)


async def booked_seats(session_factory, schedule_id: int, seat_class: SeatClass) -> int:
    async with session_factory() as session:
        result = await session.execute(
            select(func.coalesce(func.sum(Booking.seat_count), 0)).where(
                Booking.schedule_id == schedule_id,
                Booking.seat_class == seat_class.value,
            )
        )
        return result.scalar_one()


async def assert_conserved(session_factory, schedule_id: int) -> None:
    """available + live booked seats == capacity, for both classes, and nothing negative."""
    schedule = await fetch_schedule(session_factory, schedule_id)
    for seat_class in SeatClass:
        available = schedule.available(seat_class)
        assert available >= 0
        assert available + await booked_seats(session_factory, schedule_id, seat_class) == schedule.capacity(seat_class)


def issuer_with(*numbers: int) -> TicketIssuer:
    return TicketIssuer(prefix="TKT", rng=ScriptedRandom(*numbers))


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose services all use the test database."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': 'alice'})}"}


@pytest.fixture
def other_auth_headers() -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': 'bob'})}"}
