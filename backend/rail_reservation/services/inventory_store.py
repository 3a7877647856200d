"""
Seat inventory: the per-schedule AC and Sleeper counters.

CONCURRENCY STRATEGY: Row Lock + Conditional Update
===================================================

Problem:
  Two customers try to book the last seat simultaneously.
  Both read available=1, both write available=0, both succeed.
  Result: Overbooking.

Solution:
  Callers never write a counter value they computed themselves. Every change
  is a single conditional UPDATE that the database re-validates at write time:

    UPDATE schedules SET ac_available = ac_available - :n, version = version + 1
    WHERE id = :schedule_id AND ac_available >= :n

  If rows_affected == 0 the precondition failed at the instant of application
  and nothing was written. The booking path additionally takes
  SELECT ... FOR UPDATE on the schedule row (see lock_schedule) so that writers
  on one schedule queue instead of racing, and the CHECK constraints on the
  table are the final safety net.

  The UPDATEs run with synchronize_session=False: a Schedule already loaded in
  the session keeps the values it was read with. Re-read through the store
  after changing a counter.

An InventoryStore is bound to one open unit of work; it never commits.
"""

from dataclasses import dataclass
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rail_reservation.core.exceptions import (
    DuplicateScheduleError,
    InsufficientSeatsError,
    InventoryIntegrityError,
    InvalidInputError,
    ScheduleInPastError,
    ScheduleNotFoundError,
)
from rail_reservation.core.logging import get_logger
from rail_reservation.models.enums import SeatClass
from rail_reservation.models.schedule import Schedule
from rail_reservation.services import catalog_service

logger = get_logger(__name__)


@dataclass(frozen=True)
class Availability:
    ac_available: int
    sleeper_available: int


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidInputError(f"Seat amount must be a positive integer, got {amount!r}")


class InventoryStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def lock_schedule(self, schedule_id: int) -> Schedule:
        """Load the schedule row and hold its write lock until the unit ends."""
        result = await self.session.execute(
            select(Schedule)
            .where(Schedule.id == schedule_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        schedule = result.scalar_one_or_none()
        if schedule is None:
            raise ScheduleNotFoundError(schedule_id)
        return schedule

    async def read_availability(self, schedule_id: int, seat_class: SeatClass) -> int:
        result = await self.session.execute(
            select(Schedule.available_column(seat_class)).where(Schedule.id == schedule_id)
        )
        available = result.scalar_one_or_none()
        if available is None:
            raise ScheduleNotFoundError(schedule_id)
        return available

    async def peek_availability(self, schedule_id: int) -> Availability:
        result = await self.session.execute(
            select(Schedule.ac_available, Schedule.sleeper_available).where(Schedule.id == schedule_id)
        )
        row = result.one_or_none()
        if row is None:
            raise ScheduleNotFoundError(schedule_id)
        return Availability(ac_available=row.ac_available, sleeper_available=row.sleeper_available)

    async def _exists(self, schedule_id: int) -> bool:
        result = await self.session.execute(select(Schedule.id).where(Schedule.id == schedule_id))
        return result.scalar_one_or_none() is not None

    async def try_decrement(self, schedule_id: int, seat_class: SeatClass, amount: int) -> None:
        """
        Take `amount` seats of `seat_class`, or raise without changing anything.

        Raises InsufficientSeatsError if fewer than `amount` seats are left at
        the instant the UPDATE applies, ScheduleNotFoundError if there is no
        such schedule.
        """
        _check_amount(amount)
        available = Schedule.available_column(seat_class)
        result = await self.session.execute(
            update(Schedule)
            .where(Schedule.id == schedule_id, available >= amount)
            .values({available.key: available - amount, "version": Schedule.version + 1})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            if not await self._exists(schedule_id):
                raise ScheduleNotFoundError(schedule_id)
            raise InsufficientSeatsError(amount, await self.read_availability(schedule_id, seat_class))

    async def increment(self, schedule_id: int, seat_class: SeatClass, amount: int) -> None:
        """
        Return `amount` seats of `seat_class` to the schedule.

        The update is conditional on staying within capacity. Exceeding it means
        the ledger and the counter already disagree; we refuse with
        InventoryIntegrityError rather than paper over it, and the unit rolls back.
        """
        _check_amount(amount)
        available = Schedule.available_column(seat_class)
        capacity = Schedule.capacity_column(seat_class)
        result = await self.session.execute(
            update(Schedule)
            .where(Schedule.id == schedule_id, available + amount <= capacity)
            .values({available.key: available + amount, "version": Schedule.version + 1})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            if not await self._exists(schedule_id):
                raise ScheduleNotFoundError(schedule_id)
            logger.error(
                "inventory_capacity_exceeded",
                schedule_id=schedule_id,
                seat_class=seat_class.value,
                amount=amount,
            )
            raise InventoryIntegrityError(
                f"Restoring {amount} {seat_class.value} seats would exceed the capacity of schedule {schedule_id}"
            )

    async def open_schedule(self, train_number: str, departure_date: date, today: date) -> Schedule:
        """Schedule `train_number` on `departure_date` with every seat available."""
        if departure_date < today:
            raise ScheduleInPastError(f"Departure date {departure_date} is in the past")

        capacities = await catalog_service.get_train_capacities(self.session, train_number)
        if await catalog_service.schedule_exists(self.session, train_number, departure_date):
            raise DuplicateScheduleError(f"Train {train_number} is already scheduled on {departure_date}")

        schedule = Schedule(
            train_number=train_number,
            departure_date=departure_date,
            ac_capacity=capacities.ac_capacity,
            sleeper_capacity=capacities.sleeper_capacity,
            ac_available=capacities.ac_capacity,  # All seats available initially
            sleeper_available=capacities.sleeper_capacity,
        )
        self.session.add(schedule)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateScheduleError(
                f"Train {train_number} is already scheduled on {departure_date}"
            ) from e

        logger.info(
            "schedule_opened",
            schedule_id=schedule.id,
            train_number=train_number,
            departure_date=str(departure_date),
            ac_seats=schedule.ac_capacity,
            sleeper_seats=schedule.sleeper_capacity,
        )
        return schedule
