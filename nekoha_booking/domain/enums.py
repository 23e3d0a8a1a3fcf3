"""Domain Enums"""
from enum import Enum


class RoomType(str, Enum):
    STANDARD = "standard"
    STANDARD_CONNECTING = "standard-connecting"
    DELUX = "delux"
    SUITE = "suite"


class RoomCategory(str, Enum):
    """Physical room categories that hold inventory"""
    STANDARD = "standard"
    DELUX = "delux"
    SUITE = "suite"


class ReservationStatus(str, Enum):
    ACTIVE = "active"
    CONFIRMED = "confirmed"


class HistoryAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class OccupancyLevel(str, Enum):
    AVAILABLE = "available"
    PARTIAL = "partial"
    FULL = "full"


class StayFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    UPCOMING = "upcoming"
    PAST = "past"


class BookingErrorCode(str, Enum):
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    INVALID_ROOM = "INVALID_ROOM"
    NO_AVAILABILITY = "NO_AVAILABILITY"
    ROOM_CONFLICT = "ROOM_CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"
