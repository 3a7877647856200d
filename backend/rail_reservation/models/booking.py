"""
Booking model and the ticket ledger.

Key design decisions:
- ticket_id is the primary key and the only handle a customer uses to cancel
- A booking is never updated: it is inserted by a booking and deleted by a
  cancellation, so there is no status column
- Every ticket id ever handed out is kept in issued_tickets, which is never
  pruned; a cancelled booking's id can therefore never be issued again
"""

from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, CheckConstraint, Index, func
from sqlalchemy.orm import relationship

from rail_reservation.db.base import Base, TimestampMixin, utcnow


class IssuedTicket(Base):
    __tablename__ = "issued_tickets"

    ticket_id = Column(String(32), primary_key=True)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    def __repr__(self) -> str:
        return f"<IssuedTicket(ticket_id={self.ticket_id})>"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    ticket_id = Column(String(32), ForeignKey("issued_tickets.ticket_id"), primary_key=True)
    owner = Column(String(100), nullable=False)
    schedule_id = Column(Integer, ForeignKey("schedules.id"), nullable=False)
    seat_class = Column(String(10), nullable=False)
    seat_count = Column(Integer, nullable=False)
    total_fare = Column(Numeric(10, 2), nullable=False)

    schedule = relationship("Schedule", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("seat_count > 0", name="check_booking_seat_count_positive"),
        CheckConstraint("total_fare >= 0", name="check_booking_total_fare_non_negative"),
        CheckConstraint("seat_class IN ('AC', 'Sleeper')", name="check_booking_seat_class"),
        Index("ix_bookings_owner_created_at", "owner", "created_at"),
        Index("ix_bookings_schedule_id", "schedule_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(ticket={self.ticket_id}, owner={self.owner}, schedule={self.schedule_id}, "
            f"class={self.seat_class}, seats={self.seat_count})>"
        )
