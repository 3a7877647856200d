"""
Schedule endpoints: listing (cached), real-time availability, and opening a
train for a date.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rail_reservation.db.session import get_session_factory
from rail_reservation.db.unit_of_work import unit_of_work
from rail_reservation.schemas.schedule import (
    AvailabilityResponse,
    ScheduleCreate,
    ScheduleListItem,
    ScheduleListResponse,
    ScheduleResponse,
)
from rail_reservation.services import catalog_service
from rail_reservation.services.inventory_store import InventoryStore
from rail_reservation.services.cache_service import (
    get_cached_schedules,
    set_cached_schedules,
    invalidate_schedule_cache,
)
from rail_reservation.core.security import get_current_owner
from rail_reservation.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/schedules", tags=["Schedules"])


@router.post("/", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def open_schedule_endpoint(
    schedule_data: ScheduleCreate,
    owner: str = Depends(get_current_owner),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Schedule a train on a date with its full seat capacity available."""
    async with unit_of_work(session_factory) as session:
        schedule = await InventoryStore(session).open_schedule(
            schedule_data.train_number,
            schedule_data.departure_date,
            today=date.today(),
        )
    logger.info("schedule_opened_by", owner=owner, schedule_id=schedule.id)
    await invalidate_schedule_cache()
    return schedule


@router.get("/", response_model=ScheduleListResponse)
async def list_schedules_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """
    Upcoming schedules with seats left and per-seat fares.
    Cached in Redis; invalidated whenever a booking or cancellation commits.
    """
    today = date.today()
    cached = await get_cached_schedules(today, page, page_size)
    if cached:
        logger.info("schedules_list_cache_hit", page=page)
        cached["cached"] = True
        return ScheduleListResponse(**cached)

    async with unit_of_work(session_factory) as session:
        schedules, total = await catalog_service.list_upcoming_schedules(session, today, page, page_size)

    response_data = {
        "schedules": [ScheduleListItem.model_validate(s).model_dump(mode="json") for s in schedules],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }
    await set_cached_schedules(today, page, page_size, response_data)
    return ScheduleListResponse(**response_data)


@router.get("/{schedule_id}/availability", response_model=AvailabilityResponse)
async def peek_availability_endpoint(
    schedule_id: int,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Current seat counts for one schedule. Never cached."""
    async with unit_of_work(session_factory) as session:
        availability = await InventoryStore(session).peek_availability(schedule_id)
    return AvailabilityResponse(
        schedule_id=schedule_id,
        ac_available=availability.ac_available,
        sleeper_available=availability.sleeper_available,
    )
