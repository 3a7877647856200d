"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from rail_reservation.api.routes import schedules, bookings

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(schedules.router)
api_router.include_router(bookings.router)
