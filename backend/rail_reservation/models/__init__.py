from rail_reservation.models.enums import SeatClass
from rail_reservation.models.train import Train
from rail_reservation.models.schedule import Schedule
from rail_reservation.models.booking import Booking, IssuedTicket

__all__ = ["SeatClass", "Train", "Schedule", "Booking", "IssuedTicket"]
