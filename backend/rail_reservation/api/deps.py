"""
FastAPI dependencies wiring the services to the shared session factory.
Tests override get_session_factory to point everything at their own database.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rail_reservation.db.session import get_session_factory
from rail_reservation.services.booking_service import BookingService
from rail_reservation.services.cancellation_service import CancellationService


def get_booking_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> BookingService:
    return BookingService(session_factory)


def get_cancellation_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> CancellationService:
    return CancellationService(session_factory)
