"""
Booking service: concurrency-safe seat reservation.

A booking is one unit of work:

  1. Lock the schedule row (SELECT ... FOR UPDATE) and read availability
  2. Reject with InsufficientSeatsError if the request does not fit
  3. Conditionally decrement the counter (re-validated by the database)
  4. Price the seats from the train's per-seat fares
  5. Record a fresh ticket id in the ledger and insert the booking
  6. Commit

Either the decrement and the booking both become visible or neither does.
A failed booking is never retried here, with one exception: if the random
ticket id was already issued, the whole unit is rolled back and re-run with a
new id, up to TICKET_ID_MAX_ATTEMPTS times.
"""

import time
from datetime import date
from typing import AsyncIterator, Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rail_reservation.core.config import get_settings
from rail_reservation.core.exceptions import (
    BookingError,
    DuplicateTicketError,
    InsufficientSeatsError,
    InvalidInputError,
    ScheduleInPastError,
    TransactionFailedError,
)
from rail_reservation.core.logging import get_logger
from rail_reservation.core.metrics import booking_latency, record_booking_attempt, ticket_id_collisions
from rail_reservation.db.unit_of_work import unit_of_work
from rail_reservation.models.booking import Booking, IssuedTicket
from rail_reservation.models.enums import SeatClass
from rail_reservation.services import catalog_service
from rail_reservation.services.fare_calculator import compute_fare
from rail_reservation.services.inventory_store import InventoryStore
from rail_reservation.services.ticket_issuer import TicketIssuer

logger = get_logger(__name__)


def validate_booking_request(owner: str, seat_class, seat_count) -> SeatClass:
    if not isinstance(owner, str) or not owner.strip():
        raise InvalidInputError("Owner must be a non-empty string")
    if isinstance(seat_count, bool) or not isinstance(seat_count, int) or seat_count <= 0:
        raise InvalidInputError(f"Seat count must be a positive integer, got {seat_count!r}")
    try:
        return SeatClass.parse(seat_class)
    except ValueError as e:
        raise InvalidInputError(str(e)) from e


class BookingService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ticket_issuer: Optional[TicketIssuer] = None,
        today: Callable[[], date] = date.today,
        max_ticket_attempts: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.ticket_issuer = ticket_issuer or TicketIssuer()
        self.today = today
        if max_ticket_attempts is None:
            max_ticket_attempts = get_settings().TICKET_ID_MAX_ATTEMPTS
        if max_ticket_attempts < 1:
            raise ValueError(f"max_ticket_attempts must be at least 1, got {max_ticket_attempts}")
        self.max_ticket_attempts = max_ticket_attempts

    async def book(self, owner: str, schedule_id: int, seat_class, seat_count: int) -> Booking:
        """
        Reserve `seat_count` seats of `seat_class` on a schedule for `owner`.

        Raises InvalidInputError, ScheduleNotFoundError, ScheduleInPastError,
        InsufficientSeatsError or TransactionFailedError. On any error nothing
        has been persisted.
        """
        try:
            seat_class = validate_booking_request(owner, seat_class, seat_count)
        except InvalidInputError:
            record_booking_attempt("rejected")
            raise

        for attempt in range(1, self.max_ticket_attempts + 1):
            ticket_id = self.ticket_issuer.issue()
            try:
                booking = await self._book_once(owner, schedule_id, seat_class, seat_count, ticket_id)
            except DuplicateTicketError:
                ticket_id_collisions.inc()
                logger.warning(
                    "ticket_id_collision",
                    ticket_id=ticket_id,
                    schedule_id=schedule_id,
                    attempt=attempt,
                )
                continue
            except InsufficientSeatsError as e:
                record_booking_attempt("insufficient_seats")
                logger.warning(
                    "booking_failed_no_seats",
                    schedule_id=schedule_id,
                    seat_class=seat_class.value,
                    requested=e.requested,
                    available=e.available,
                )
                raise
            except TransactionFailedError:
                record_booking_attempt("failed")
                raise
            except BookingError as e:
                record_booking_attempt("rejected")
                logger.info("booking_rejected", schedule_id=schedule_id, reason=e.code)
                raise

            record_booking_attempt("success")
            logger.info(
                "booking_created",
                ticket_id=booking.ticket_id,
                owner=owner,
                schedule_id=schedule_id,
                seat_class=seat_class.value,
                seats=seat_count,
                total_fare=str(booking.total_fare),
                attempt=attempt,
            )
            return booking

        record_booking_attempt("failed")
        logger.error(
            "ticket_id_attempts_exhausted",
            schedule_id=schedule_id,
            attempts=self.max_ticket_attempts,
        )
        raise TransactionFailedError(
            f"Could not issue a unique ticket id after {self.max_ticket_attempts} attempts"
        )

    async def _book_once(
        self,
        owner: str,
        schedule_id: int,
        seat_class: SeatClass,
        seat_count: int,
        ticket_id: str,
    ) -> Booking:
        started = time.perf_counter()
        async with unit_of_work(self.session_factory) as session:
            store = InventoryStore(session)

            # Step 1: Lock the schedule and read current availability
            schedule = await store.lock_schedule(schedule_id)
            if schedule.departure_date < self.today():
                raise ScheduleInPastError(
                    f"Schedule {schedule_id} departed on {schedule.departure_date}"
                )
            available = schedule.available(seat_class)

            # Step 2: Fail fast without touching the counter
            if seat_count > available:
                raise InsufficientSeatsError(seat_count, available)

            # Step 3: Conditional decrement, re-validated at write time
            await store.try_decrement(schedule_id, seat_class, seat_count)

            # Step 4: Price it
            capacities = await catalog_service.get_train_capacities(session, schedule.train_number)
            total_fare = compute_fare(seat_class, seat_count, capacities.ac_fare, capacities.sleeper_fare)

            # Step 5: Ledger entry + booking record
            booking = await self._insert_booking(
                session,
                Booking(
                    ticket_id=ticket_id,
                    owner=owner,
                    schedule_id=schedule_id,
                    seat_class=seat_class.value,
                    seat_count=seat_count,
                    total_fare=total_fare,
                ),
            )
        # Step 6: committed on leaving the unit of work
        booking_latency.observe(time.perf_counter() - started)
        return booking

    async def _insert_booking(self, session: AsyncSession, booking: Booking) -> Booking:
        if await session.get(IssuedTicket, booking.ticket_id) is not None:
            raise DuplicateTicketError(booking.ticket_id)

        session.add(IssuedTicket(ticket_id=booking.ticket_id))
        try:
            await session.flush()
        except IntegrityError as e:
            # Another transaction issued the same id between our check and insert
            raise DuplicateTicketError(booking.ticket_id) from e

        session.add(booking)
        await session.flush()
        return booking

    async def list_bookings(self, owner: str) -> AsyncIterator[Booking]:
        """Yield the owner's live bookings in creation order, streamed from the database."""
        async with self.session_factory() as session:
            result = await session.stream_scalars(
                select(Booking)
                .where(Booking.owner == owner)
                .order_by(Booking.created_at.asc(), Booking.ticket_id.asc())
            )
            async for booking in result:
                yield booking
