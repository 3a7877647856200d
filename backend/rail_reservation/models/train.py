"""
Train route metadata.

Rows are owned by the catalog: the reservation engine only reads capacities
and per-seat fares from here when a schedule is opened or a fare is priced.
"""

from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint
from sqlalchemy.orm import relationship

from rail_reservation.db.base import Base, TimestampMixin


class Train(Base, TimestampMixin):
    __tablename__ = "trains"

    train_number = Column(String(20), primary_key=True)
    train_name = Column(String(255), nullable=False)
    source = Column(String(100), nullable=False)
    destination = Column(String(100), nullable=False)
    departure_time = Column(String(5), nullable=False)  # HH:MM
    journey_duration = Column(String(5), nullable=False)  # HH:MM
    total_ac_seats = Column(Integer, nullable=False)
    total_sleeper_seats = Column(Integer, nullable=False)
    ac_fare = Column(Numeric(10, 2), nullable=False)
    sleeper_fare = Column(Numeric(10, 2), nullable=False)

    schedules = relationship("Schedule", back_populates="train")

    __table_args__ = (
        CheckConstraint("total_ac_seats >= 0", name="check_train_ac_seats_non_negative"),
        CheckConstraint("total_sleeper_seats >= 0", name="check_train_sleeper_seats_non_negative"),
        CheckConstraint("ac_fare >= 0", name="check_train_ac_fare_non_negative"),
        CheckConstraint("sleeper_fare >= 0", name="check_train_sleeper_fare_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Train(number={self.train_number}, name={self.train_name})>"
