"""
Tests for the seat counters and schedule creation.
"""

from datetime import date, timedelta

import pytest

from conftest import create_schedule, fetch_schedule
from rail_reservation.core.exceptions import (
    DuplicateScheduleError,
    InsufficientSeatsError,
    InvalidInputError,
    InventoryIntegrityError,
    ScheduleInPastError,
    ScheduleNotFoundError,
    TrainNotFoundError,
    TransactionFailedError,
)
from rail_reservation.db.unit_of_work import unit_of_work
from rail_reservation.models.enums import SeatClass
from rail_reservation.services.inventory_store import Availability, InventoryStore


@pytest.mark.asyncio
async def test_read_and_peek_availability(session_factory, test_schedule):
    async with unit_of_work(session_factory) as session:
        store = InventoryStore(session)
        assert await store.read_availability(test_schedule.id, SeatClass.AC) == 5
        assert await store.read_availability(test_schedule.id, SeatClass.SLEEPER) == 10
        assert await store.peek_availability(test_schedule.id) == Availability(ac_available=5, sleeper_available=10)


@pytest.mark.asyncio
async def test_unknown_schedule(session_factory):
    async with unit_of_work(session_factory) as session:
        store = InventoryStore(session)
        with pytest.raises(ScheduleNotFoundError):
            await store.read_availability(999, SeatClass.AC)
        with pytest.raises(ScheduleNotFoundError):
            await store.peek_availability(999)
        with pytest.raises(ScheduleNotFoundError):
            await store.try_decrement(999, SeatClass.AC, 1)
        with pytest.raises(ScheduleNotFoundError):
            await store.increment(999, SeatClass.AC, 1)


@pytest.mark.asyncio
async def test_try_decrement_takes_seats_and_bumps_version(session_factory, test_schedule):
    async with unit_of_work(session_factory) as session:
        await InventoryStore(session).try_decrement(test_schedule.id, SeatClass.AC, 3)

    schedule = await fetch_schedule(session_factory, test_schedule.id)
    assert schedule.ac_available == 2
    assert schedule.sleeper_available == 10
    assert schedule.version == test_schedule.version + 1


@pytest.mark.asyncio
async def test_try_decrement_never_goes_negative(session_factory, test_schedule):
    with pytest.raises(InsufficientSeatsError) as exc_info:
        async with unit_of_work(session_factory) as session:
            await InventoryStore(session).try_decrement(test_schedule.id, SeatClass.AC, 6)

    assert exc_info.value.requested == 6
    assert exc_info.value.available == 5
    schedule = await fetch_schedule(session_factory, test_schedule.id)
    assert schedule.ac_available == 5


@pytest.mark.asyncio
async def test_try_decrement_exact_remaining(session_factory, test_schedule):
    async with unit_of_work(session_factory) as session:
        await InventoryStore(session).try_decrement(test_schedule.id, SeatClass.SLEEPER, 10)

    schedule = await fetch_schedule(session_factory, test_schedule.id)
    assert schedule.sleeper_available == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -2])
async def test_non_positive_amounts_rejected(session_factory, test_schedule, amount):
    async with unit_of_work(session_factory) as session:
        store = InventoryStore(session)
        with pytest.raises(InvalidInputError):
            await store.try_decrement(test_schedule.id, SeatClass.AC, amount)
        with pytest.raises(InvalidInputError):
            await store.increment(test_schedule.id, SeatClass.AC, amount)


@pytest.mark.asyncio
async def test_increment_restores_seats(session_factory, test_train):
    schedule = await create_schedule(
        session_factory, test_train, date.today() + timedelta(days=3), ac_available=1
    )
    async with unit_of_work(session_factory) as session:
        await InventoryStore(session).increment(schedule.id, SeatClass.AC, 4)

    assert (await fetch_schedule(session_factory, schedule.id)).ac_available == 5


@pytest.mark.asyncio
async def test_increment_beyond_capacity_rolls_back(session_factory, test_train):
    schedule = await create_schedule(
        session_factory, test_train, date.today() + timedelta(days=3), ac_available=4
    )
    with pytest.raises(InventoryIntegrityError) as exc_info:
        async with unit_of_work(session_factory) as session:
            store = InventoryStore(session)
            await store.try_decrement(schedule.id, SeatClass.SLEEPER, 2)
            await store.increment(schedule.id, SeatClass.AC, 2)

    assert isinstance(exc_info.value, TransactionFailedError)
    after = await fetch_schedule(session_factory, schedule.id)
    assert after.ac_available == 4
    # the sleeper decrement in the same unit was rolled back too
    assert after.sleeper_available == 10


@pytest.mark.asyncio
async def test_open_schedule_copies_capacities(session_factory, test_train):
    departure = date.today() + timedelta(days=7)
    async with unit_of_work(session_factory) as session:
        schedule = await InventoryStore(session).open_schedule(test_train.train_number, departure, today=date.today())

    stored = await fetch_schedule(session_factory, schedule.id)
    assert stored.departure_date == departure
    assert (stored.ac_capacity, stored.ac_available) == (5, 5)
    assert (stored.sleeper_capacity, stored.sleeper_available) == (10, 10)


@pytest.mark.asyncio
async def test_open_schedule_twice_same_day_rejected(session_factory, test_schedule):
    with pytest.raises(DuplicateScheduleError):
        async with unit_of_work(session_factory) as session:
            await InventoryStore(session).open_schedule(
                test_schedule.train_number, test_schedule.departure_date, today=date.today()
            )


@pytest.mark.asyncio
async def test_open_schedule_unknown_train(session_factory):
    with pytest.raises(TrainNotFoundError):
        async with unit_of_work(session_factory) as session:
            await InventoryStore(session).open_schedule("00000", date.today(), today=date.today())


@pytest.mark.asyncio
async def test_open_schedule_in_past(session_factory, test_train):
    with pytest.raises(ScheduleInPastError):
        async with unit_of_work(session_factory) as session:
            await InventoryStore(session).open_schedule(
                test_train.train_number, date.today() - timedelta(days=1), today=date.today()
            )
