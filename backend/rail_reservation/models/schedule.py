"""
Schedule model: one train running on one date, owning the seat counters.

Key design decisions:
- Capacities are copied from the train when the schedule is opened, so a later
  change to the route never resizes a pool that already has bookings against it
- `ac_available` / `sleeper_available` are only changed through the inventory
  store's conditional UPDATEs; CHECK constraints keep them within [0, capacity]
- Unique (train_number, departure_date): one capacity pool per train per day
- `version` is bumped on every counter change
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from rail_reservation.db.base import Base, TimestampMixin, utcnow
from rail_reservation.models.enums import SeatClass

_AVAILABLE_COLUMNS = {SeatClass.AC: "ac_available", SeatClass.SLEEPER: "sleeper_available"}
_CAPACITY_COLUMNS = {SeatClass.AC: "ac_capacity", SeatClass.SLEEPER: "sleeper_capacity"}


class Schedule(Base, TimestampMixin):
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    train_number = Column(String(20), ForeignKey("trains.train_number"), nullable=False)
    departure_date = Column(Date, nullable=False)
    ac_capacity = Column(Integer, nullable=False)
    sleeper_capacity = Column(Integer, nullable=False)
    ac_available = Column(Integer, nullable=False)
    sleeper_available = Column(Integer, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    train = relationship("Train", back_populates="schedules")
    bookings = relationship("Booking", back_populates="schedule")

    __table_args__ = (
        UniqueConstraint("train_number", "departure_date", name="uq_schedule_train_date"),
        CheckConstraint("ac_available >= 0", name="check_ac_available_non_negative"),
        CheckConstraint("sleeper_available >= 0", name="check_sleeper_available_non_negative"),
        CheckConstraint("ac_available <= ac_capacity", name="check_ac_available_lte_capacity"),
        CheckConstraint("sleeper_available <= sleeper_capacity", name="check_sleeper_available_lte_capacity"),
        Index("ix_schedules_departure_date", "departure_date"),
    )

    @staticmethod
    def available_column(seat_class: SeatClass):
        return getattr(Schedule, _AVAILABLE_COLUMNS[seat_class])

    @staticmethod
    def capacity_column(seat_class: SeatClass):
        return getattr(Schedule, _CAPACITY_COLUMNS[seat_class])

    def available(self, seat_class: SeatClass) -> int:
        return getattr(self, _AVAILABLE_COLUMNS[seat_class])

    def capacity(self, seat_class: SeatClass) -> int:
        return getattr(self, _CAPACITY_COLUMNS[seat_class])

    def __repr__(self) -> str:
        return (
            f"<Schedule(id={self.id}, train={self.train_number}, date={self.departure_date}, "
            f"ac={self.ac_available}/{self.ac_capacity}, sleeper={self.sleeper_available}/{self.sleeper_capacity})>"
        )
