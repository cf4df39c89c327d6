"""Exceptions raised by the booking service and mapped to HTTP codes by the router"""


class BookingError(Exception):
    status_code = 400


class BookingValidationError(BookingError):
    status_code = 400


class BookingNotFoundError(BookingError):
    status_code = 404

    def __init__(self, booking_id: str):
        super().__init__("Booking not found")
        self.booking_id = booking_id


class BookingConflictError(BookingError):
    status_code = 409

    def __init__(self, conflicts: list):
        super().__init__(
            "The selected dates overlap with an existing booking. "
            "Please choose different dates."
        )
        self.conflicts = conflicts
