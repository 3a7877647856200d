from rail_reservation.schemas.booking import BookingCreate, BookingResponse, BookingCancelResponse
from rail_reservation.schemas.schedule import (
    ScheduleCreate, ScheduleResponse, AvailabilityResponse, ScheduleListItem, ScheduleListResponse,
)

__all__ = [
    "BookingCreate", "BookingResponse", "BookingCancelResponse",
    "ScheduleCreate", "ScheduleResponse", "AvailabilityResponse", "ScheduleListItem", "ScheduleListResponse",
]
