"""
Read-side adapter over the train catalog.

Train routes are owned by the catalog; the reservation engine only asks it
for capacities, fares and schedule identity. These functions run inside the
caller's session and never write.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from rail_reservation.core.exceptions import ScheduleNotFoundError, TrainNotFoundError
from rail_reservation.models.schedule import Schedule
from rail_reservation.models.train import Train


@dataclass(frozen=True)
class TrainCapacities:
    ac_capacity: int
    sleeper_capacity: int
    ac_fare: Decimal
    sleeper_fare: Decimal


@dataclass(frozen=True)
class ScheduleSnapshot:
    train_number: str
    departure_date: date


async def get_train_capacities(db: AsyncSession, train_number: str) -> TrainCapacities:
    result = await db.execute(
        select(
            Train.total_ac_seats,
            Train.total_sleeper_seats,
            Train.ac_fare,
            Train.sleeper_fare,
        ).where(Train.train_number == train_number)
    )
    row = result.one_or_none()
    if row is None:
        raise TrainNotFoundError(train_number)
    return TrainCapacities(
        ac_capacity=row.total_ac_seats,
        sleeper_capacity=row.total_sleeper_seats,
        ac_fare=Decimal(row.ac_fare),
        sleeper_fare=Decimal(row.sleeper_fare),
    )


async def get_schedule_snapshot(db: AsyncSession, schedule_id: int) -> ScheduleSnapshot:
    result = await db.execute(
        select(Schedule.train_number, Schedule.departure_date).where(Schedule.id == schedule_id)
    )
    row = result.one_or_none()
    if row is None:
        raise ScheduleNotFoundError(schedule_id)
    return ScheduleSnapshot(train_number=row.train_number, departure_date=row.departure_date)


async def schedule_exists(db: AsyncSession, train_number: str, departure_date: date) -> bool:
    result = await db.execute(
        select(Schedule.id).where(
            Schedule.train_number == train_number,
            Schedule.departure_date == departure_date,
        )
    )
    return result.scalar_one_or_none() is not None


async def list_upcoming_schedules(
    db: AsyncSession,
    today: date,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[dict], int]:
    """
    Schedules departing today or later, joined with their route and fares.
    Uses ix_schedules_departure_date for the date filter.
    """
    query = (
        select(
            Schedule.id.label("schedule_id"),
            Train.train_number,
            Train.train_name,
            Train.source,
            Train.destination,
            Train.departure_time,
            Schedule.departure_date,
            Schedule.ac_available,
            Schedule.sleeper_available,
            Train.ac_fare,
            Train.sleeper_fare,
        )
        .join(Train, Schedule.train_number == Train.train_number)
        .where(Schedule.departure_date >= today)
    )

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    result = await db.execute(
        query
        .order_by(Schedule.departure_date.asc(), Schedule.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    schedules = [dict(row._mapping) for row in result]
    return schedules, total
