"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from rail_reservation.models.enums import SeatClass


class BookingCreate(BaseModel):
    schedule_id: int
    seat_class: SeatClass
    seat_count: int = Field(..., gt=0, le=50)


class BookingResponse(BaseModel):
    ticket_id: str
    owner: str
    schedule_id: int
    seat_class: SeatClass
    seat_count: int
    total_fare: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingCancelResponse(BaseModel):
    message: str
    ticket_id: str
    schedule_id: int
    seat_class: SeatClass
    seats_restored: int
