"""
Domain errors raised by the reservation engine.

Every failure the engine reports is a BookingError carrying a stable `code`
for programmatic callers and an HTTP `status_code` for the API layer. None of
them is fatal: the engine never ends the process, it raises to its caller.
"""


class BookingError(Exception):
    code = "booking_error"
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInputError(BookingError):
    """Non-positive seat count, unknown seat class, malformed identifier."""

    code = "invalid_input"
    status_code = 422


class ScheduleNotFoundError(BookingError):
    code = "schedule_not_found"
    status_code = 404

    def __init__(self, schedule_id: int):
        self.schedule_id = schedule_id
        super().__init__(f"Schedule {schedule_id} not found")


class TrainNotFoundError(BookingError):
    code = "train_not_found"
    status_code = 404

    def __init__(self, train_number: str):
        self.train_number = train_number
        super().__init__(f"Train {train_number} not found")


class ScheduleInPastError(BookingError):
    code = "schedule_in_past"
    status_code = 400


class DuplicateScheduleError(BookingError):
    code = "duplicate_schedule"
    status_code = 409


class InsufficientSeatsError(BookingError):
    """Not enough seats left in the requested class. Nothing was changed."""

    code = "insufficient_seats"
    status_code = 409

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough seats. Requested: {requested}, Available: {available}"
        )


class NotFoundOrNotOwnedError(BookingError):
    """
    Raised for a cancellation of a ticket that does not exist or belongs to
    someone else. The two cases are deliberately indistinguishable.
    """

    code = "not_found_or_not_owned"
    status_code = 404

    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket {ticket_id} not found")


class DuplicateTicketError(BookingError):
    """A freshly issued ticket id was already in the ledger."""

    code = "duplicate_ticket"
    status_code = 409

    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket id {ticket_id} already issued")


class TransactionFailedError(BookingError):
    """The atomic unit could not commit; nothing was persisted."""

    code = "transaction_failed"
    status_code = 503


class InventoryIntegrityError(TransactionFailedError):
    """Restoring seats would push a counter above the schedule's capacity."""

    code = "inventory_integrity"
