"""
Fare pricing. Pure functions, no I/O.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from rail_reservation.core.exceptions import InvalidInputError
from rail_reservation.models.enums import SeatClass

Money = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


def to_money(amount: Money) -> Decimal:
    # str() first so floats like 0.1 keep their printed value
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_fare(
    seat_class: SeatClass,
    seat_count: int,
    per_seat_fare_ac: Money,
    per_seat_fare_sleeper: Money,
) -> Decimal:
    """Total fare for `seat_count` seats of `seat_class`, rounded to the cent."""
    if isinstance(seat_count, bool) or not isinstance(seat_count, int) or seat_count <= 0:
        raise InvalidInputError(f"Seat count must be a positive integer, got {seat_count!r}")

    per_seat = per_seat_fare_ac if seat_class is SeatClass.AC else per_seat_fare_sleeper
    per_seat = to_money(per_seat)
    if per_seat < 0:
        raise InvalidInputError(f"Per-seat fare must not be negative, got {per_seat}")

    return (per_seat * seat_count).quantize(CENT, rounding=ROUND_HALF_UP)
