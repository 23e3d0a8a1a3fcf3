"""Domain Errors

Every booking failure carries a BookingErrorCode so the application layer can
turn it into a result value and the API layer into an HTTP status.
"""
from datetime import date
from typing import Optional
from uuid import UUID

from nekoha_booking.domain.enums import BookingErrorCode


class BookingError(ValueError):
    """Base class for failures of a booking operation"""

    code: BookingErrorCode = BookingErrorCode.INVARIANT_VIOLATION

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidDateRangeError(BookingError):
    code = BookingErrorCode.INVALID_DATE_RANGE

    def __init__(self, message: str = "Invalid date range: check-out must be after check-in"):
        super().__init__(message)


class InvalidRoomNumberError(BookingError):
    code = BookingErrorCode.INVALID_ROOM


class NoAvailabilityError(BookingError):
    code = BookingErrorCode.NO_AVAILABILITY

    def __init__(
        self,
        conflict_date: Optional[date] = None,
        message: str = "No rooms available for the selected dates and room type"
    ):
        self.conflict_date = conflict_date
        if conflict_date is not None:
            message = f"{message} (first unavailable night: {conflict_date.isoformat()})"
        super().__init__(message)


class RoomConflictError(BookingError):
    code = BookingErrorCode.ROOM_CONFLICT

    def __init__(self, room_number: str, conflicting_reservation_id: Optional[UUID] = None):
        self.room_number = room_number
        self.conflicting_reservation_id = conflicting_reservation_id
        super().__init__(f"Room {room_number} is already booked for the selected dates")


class ReservationNotFoundError(BookingError):
    code = BookingErrorCode.NOT_FOUND

    def __init__(self, reservation_id: UUID):
        self.reservation_id = reservation_id
        super().__init__(f"Reservation {reservation_id} no longer exists")


class PersistenceError(BookingError):
    """Raised by repositories when the backing store fails"""
    code = BookingErrorCode.PERSISTENCE_FAILURE


class InvariantViolationError(BookingError):
    """Booking state is inconsistent; the operation must not proceed"""
    code = BookingErrorCode.INVARIANT_VIOLATION
