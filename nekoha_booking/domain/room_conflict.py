"""Room-number conflict detection.

Aggregate unit counts say whether *some* room of a category is free; this
module checks that a *specific* room assignment is not already taken.

Overlap formula: ``(new_check_in < existing_check_out) AND (existing_check_in < new_check_out)``.
Strict inequality allows check-out day == check-in day for the same room.

Connecting pairs clash with either of their halves and vice versa. Clashes
are found by intersecting the physical rooms of the two assignments, so
``Std1`` never matches a room named ``Std1X``.
"""
from datetime import date
from typing import Iterable, List, Optional
from uuid import UUID

from nekoha_booking.domain.entities import Reservation
from nekoha_booking.domain.enums import RoomType
from nekoha_booking.domain.inventory import room_numbers_for
from nekoha_booking.domain.value_objects import RoomNumber


def find_room_conflict(
    room_number: RoomNumber,
    check_in: date,
    check_out: date,
    reservations: Iterable[Reservation],
    exclude_id: Optional[UUID] = None
) -> Optional[Reservation]:
    """Return the first reservation holding any room of `room_number` in the period"""
    for reservation in reservations:
        if exclude_id is not None and reservation.reservation_id == exclude_id:
            continue
        if not reservation.overlaps(check_in, check_out):
            continue
        if room_number.conflicts_with(reservation.room_number):
            return reservation
    return None


def is_room_number_free(
    room_number: RoomNumber,
    check_in: date,
    check_out: date,
    reservations: Iterable[Reservation],
    exclude_id: Optional[UUID] = None
) -> bool:
    return find_room_conflict(room_number, check_in, check_out, reservations, exclude_id) is None


def free_room_numbers(
    room_type: RoomType,
    check_in: date,
    check_out: date,
    reservations: Iterable[Reservation],
    exclude_id: Optional[UUID] = None
) -> List[RoomNumber]:
    """Room assignments of `room_type` that are free for the whole period"""
    reservations = list(reservations)
    return [
        room_number
        for room_number in room_numbers_for(room_type)
        if is_room_number_free(room_number, check_in, check_out, reservations, exclude_id)
    ]


def first_free_room_number(
    room_type: RoomType,
    check_in: date,
    check_out: date,
    reservations: Iterable[Reservation]
) -> Optional[RoomNumber]:
    free = free_room_numbers(room_type, check_in, check_out, reservations)
    return free[0] if free else None
