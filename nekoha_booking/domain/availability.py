"""Room availability: per-night unit counts and whole-stay checks.

Everything here is a pure function of a reservation collection. A night
``d`` is occupied by a reservation when ``check_in <= d < check_out``; the
guest leaves on the check-out morning, so that night is free again.

Edit-mode self-exclusion is expressed once, through ``exclude_id``: the
reservation being edited is simply left out of the count. Create and edit
paths both go through :func:`check_availability`, with ``exclude_id`` set to
the candidate's own ID (``None`` for a new booking).
"""
from datetime import date
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from pydantic import BaseModel

from nekoha_booking.domain.entities import ReservationDetails, ReservationDraft
from nekoha_booking.domain.enums import OccupancyLevel, RoomCategory, RoomType
from nekoha_booking.domain.errors import InvariantViolationError
from nekoha_booking.domain.inventory import (
    CATEGORY_TOTALS,
    TOTAL_ROOM_UNITS,
    category_for,
    units_for,
)
from nekoha_booking.domain.value_objects import DateRange


class CategoryAvailability(BaseModel):
    total: int
    booked: int
    available: int


class DayAvailability(BaseModel):
    """Unit counts per room category for one night"""
    day: date
    standard: CategoryAvailability
    delux: CategoryAvailability
    suite: CategoryAvailability

    def for_category(self, category: RoomCategory) -> CategoryAvailability:
        return getattr(self, RoomCategory(category).value)

    @property
    def total_booked(self) -> int:
        return self.standard.booked + self.delux.booked + self.suite.booked

    @property
    def total_available(self) -> int:
        return TOTAL_ROOM_UNITS - self.total_booked


class AvailabilityCheck(BaseModel):
    available: bool
    conflict_date: Optional[date] = None


def day_availability(
    day: date,
    reservations: Iterable[ReservationDetails],
    exclude_id: Optional[UUID] = None
) -> DayAvailability:
    """Count booked units per category for the night of `day`"""
    booked: Dict[RoomCategory, int] = {category: 0 for category in CATEGORY_TOTALS}
    for reservation in reservations:
        if exclude_id is not None and getattr(reservation, "reservation_id", None) == exclude_id:
            continue
        if reservation.stays_on(day):
            booked[category_for(reservation.room_type)] += units_for(reservation.room_type)

    counts = {
        category.value: CategoryAvailability(
            total=total,
            booked=booked[category],
            available=total - booked[category]
        )
        for category, total in CATEGORY_TOTALS.items()
    }
    return DayAvailability(day=day, **counts)


def occupancy_level(availability: DayAvailability) -> OccupancyLevel:
    if availability.total_booked == 0:
        return OccupancyLevel.AVAILABLE
    if availability.total_available <= 0:
        return OccupancyLevel.FULL
    return OccupancyLevel.PARTIAL


def _ensure_consistent(availability: DayAvailability) -> None:
    for category in CATEGORY_TOTALS:
        counts = availability.for_category(category)
        if counts.available < 0:
            raise InvariantViolationError(
                f"{category.value} rooms overbooked on {availability.day.isoformat()}: "
                f"{counts.booked} booked of {counts.total}"
            )


def has_room_for(room_type: RoomType, availability: DayAvailability) -> bool:
    counts = availability.for_category(category_for(room_type))
    return counts.available >= units_for(room_type)


def check_stay(
    room_type: RoomType,
    stay: DateRange,
    reservations: List[ReservationDetails],
    exclude_id: Optional[UUID] = None
) -> AvailabilityCheck:
    """Walk every night of the stay; the first night without room wins"""
    for night in stay.iter_nights():
        availability = day_availability(night, reservations, exclude_id)
        _ensure_consistent(availability)
        if not has_room_for(room_type, availability):
            return AvailabilityCheck(available=False, conflict_date=night)
    return AvailabilityCheck(available=True)


def check_availability(
    candidate: ReservationDraft,
    reservations: Iterable[ReservationDetails]
) -> AvailabilityCheck:
    """Check a booking request against the current reservation set.

    The caller must have rejected ``check_out <= check_in`` already.
    Raises InvariantViolationError if the stored set is already overbooked
    on any night of the stay.
    """
    return check_stay(
        candidate.room_type,
        candidate.date_range(),
        list(reservations),
        exclude_id=candidate.reservation_id
    )


def can_book(candidate: ReservationDraft, reservations: Iterable[ReservationDetails]) -> bool:
    return check_availability(candidate, reservations).available
