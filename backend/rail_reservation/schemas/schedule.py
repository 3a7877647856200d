"""
Pydantic schemas for schedule listing, availability and scheduling requests.
"""

from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field


class ScheduleCreate(BaseModel):
    train_number: str = Field(..., min_length=1, max_length=20)
    departure_date: date


class ScheduleResponse(BaseModel):
    id: int
    train_number: str
    departure_date: date
    ac_capacity: int
    sleeper_capacity: int
    ac_available: int
    sleeper_available: int
    created_at: datetime

    model_config = {"from_attributes": True}


class AvailabilityResponse(BaseModel):
    schedule_id: int
    ac_available: int
    sleeper_available: int


class ScheduleListItem(BaseModel):
    schedule_id: int
    train_number: str
    train_name: str
    source: str
    destination: str
    departure_time: str
    departure_date: date
    ac_available: int
    sleeper_available: int
    ac_fare: Decimal
    sleeper_fare: Decimal


class ScheduleListResponse(BaseModel):
    schedules: list[ScheduleListItem]
    total: int
    page: int
    page_size: int
    cached: bool = False
