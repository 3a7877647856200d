"""
Cancellation service: delete a booking and give its seats back.

Runs as one unit of work: lock the booking row, delete it, increment the
schedule's counter, commit. A ticket that does not exist and a ticket owned by
someone else produce the same NotFoundOrNotOwnedError, so the endpoint cannot
be used to discover which ticket ids are live.
"""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rail_reservation.core.exceptions import (
    BookingError,
    InvalidInputError,
    NotFoundOrNotOwnedError,
    TransactionFailedError,
)
from rail_reservation.core.logging import get_logger
from rail_reservation.core.metrics import record_cancellation_attempt
from rail_reservation.db.unit_of_work import unit_of_work
from rail_reservation.models.booking import Booking
from rail_reservation.models.enums import SeatClass
from rail_reservation.services import catalog_service
from rail_reservation.services.inventory_store import InventoryStore
from rail_reservation.services.ticket_issuer import TicketIssuer

logger = get_logger(__name__)


class CancellationService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ticket_issuer: Optional[TicketIssuer] = None,
    ):
        self.session_factory = session_factory
        self.ticket_issuer = ticket_issuer or TicketIssuer()

    async def cancel(self, owner: str, ticket_id: str) -> Booking:
        """
        Cancel `ticket_id` on behalf of `owner` and return the removed booking.

        Raises InvalidInputError for a malformed ticket id,
        NotFoundOrNotOwnedError if `owner` holds no such ticket, and
        TransactionFailedError if the store could not commit.
        """
        normalized = self.ticket_issuer.normalize(ticket_id)
        if normalized is None:
            record_cancellation_attempt("rejected")
            raise InvalidInputError(f"Malformed ticket id: {ticket_id!r}")
        ticket_id = normalized

        try:
            booking, snapshot = await self._cancel_once(owner, ticket_id)
        except NotFoundOrNotOwnedError:
            record_cancellation_attempt("not_found_or_not_owned")
            logger.info("cancellation_not_found", ticket_id=ticket_id, owner=owner)
            raise
        except TransactionFailedError:
            record_cancellation_attempt("failed")
            raise
        except BookingError:
            record_cancellation_attempt("rejected")
            raise

        record_cancellation_attempt("success")
        logger.info(
            "booking_cancelled",
            ticket_id=ticket_id,
            owner=owner,
            schedule_id=booking.schedule_id,
            train_number=snapshot.train_number,
            departure_date=str(snapshot.departure_date),
            seat_class=booking.seat_class,
            seats_restored=booking.seat_count,
        )
        return booking

    async def _cancel_once(self, owner: str, ticket_id: str) -> tuple[Booking, catalog_service.ScheduleSnapshot]:
        async with unit_of_work(self.session_factory) as session:
            result = await session.execute(
                select(Booking)
                .where(Booking.ticket_id == ticket_id, Booking.owner == owner)
                .with_for_update()
            )
            booking = result.scalar_one_or_none()
            if booking is None:
                raise NotFoundOrNotOwnedError(ticket_id)

            deleted = await session.execute(
                delete(Booking)
                .where(Booking.ticket_id == ticket_id)
                .execution_options(synchronize_session=False)
            )
            if deleted.rowcount != 1:
                # Lost a race with a concurrent cancellation of the same ticket
                raise NotFoundOrNotOwnedError(ticket_id)

            await InventoryStore(session).increment(
                booking.schedule_id,
                SeatClass.parse(booking.seat_class),
                booking.seat_count,
            )
            snapshot = await catalog_service.get_schedule_snapshot(session, booking.schedule_id)
            session.expunge(booking)
        return booking, snapshot
