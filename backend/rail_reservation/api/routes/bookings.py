"""
Booking endpoints with concurrency-safe seat reservation.
"""

from fastapi import APIRouter, Depends, status

from rail_reservation.api.deps import get_booking_service, get_cancellation_service
from rail_reservation.schemas.booking import BookingCreate, BookingResponse, BookingCancelResponse
from rail_reservation.services.booking_service import BookingService
from rail_reservation.services.cancellation_service import CancellationService
from rail_reservation.services.cache_service import invalidate_schedule_cache
from rail_reservation.core.security import get_current_owner
from rail_reservation.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    owner: str = Depends(get_current_owner),
    service: BookingService = Depends(get_booking_service),
):
    """
    Book seats on a scheduled train.

    The availability check, the seat decrement and the booking insert commit
    as one unit; a request that does not fit returns 409 and changes nothing.
    """
    booking = await service.book(
        owner,
        booking_data.schedule_id,
        booking_data.seat_class,
        booking_data.seat_count,
    )
    # Listing shows seat counts, which just changed
    await invalidate_schedule_cache()
    return booking


@router.delete("/{ticket_id}", response_model=BookingCancelResponse)
async def cancel_booking_endpoint(
    ticket_id: str,
    owner: str = Depends(get_current_owner),
    service: CancellationService = Depends(get_cancellation_service),
):
    """Cancel a ticket and release its seats back to the schedule."""
    booking = await service.cancel(owner, ticket_id)
    await invalidate_schedule_cache()
    return BookingCancelResponse(
        message="Booking cancelled successfully",
        ticket_id=booking.ticket_id,
        schedule_id=booking.schedule_id,
        seat_class=booking.seat_class,
        seats_restored=booking.seat_count,
    )


@router.get("/", response_model=list[BookingResponse])
async def list_user_bookings(
    owner: str = Depends(get_current_owner),
    service: BookingService = Depends(get_booking_service),
):
    """Get all live bookings for the authenticated customer, oldest first."""
    return [booking async for booking in service.list_bookings(owner)]
