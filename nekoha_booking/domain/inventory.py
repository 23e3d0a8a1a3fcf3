"""Room inventory and unit accounting rules

The hotel has a fixed set of physical rooms. Room types map onto categories;
a standard-connecting booking occupies two standard rooms at once. Changing
capacity only means editing the tables below.
"""
from typing import Dict, List

from nekoha_booking.domain.enums import RoomCategory, RoomType
from nekoha_booking.domain.value_objects import RoomNumber

CATEGORY_TOTALS: Dict[RoomCategory, int] = {
    RoomCategory.STANDARD: 4,
    RoomCategory.DELUX: 2,
    RoomCategory.SUITE: 2,
}

TOTAL_ROOM_UNITS = sum(CATEGORY_TOTALS.values())

ROOM_TYPE_CATEGORY: Dict[RoomType, RoomCategory] = {
    RoomType.STANDARD: RoomCategory.STANDARD,
    RoomType.STANDARD_CONNECTING: RoomCategory.STANDARD,
    RoomType.DELUX: RoomCategory.DELUX,
    RoomType.SUITE: RoomCategory.SUITE,
}

UNIT_CONSUMPTION: Dict[RoomType, int] = {
    RoomType.STANDARD: 1,
    RoomType.STANDARD_CONNECTING: 2,
    RoomType.DELUX: 1,
    RoomType.SUITE: 1,
}

# Offered in this order by the room picker and by public auto-assignment
ROOM_NUMBERS: Dict[RoomType, List[str]] = {
    RoomType.STANDARD: ["Std1", "Std2", "Std3", "Std4"],
    RoomType.STANDARD_CONNECTING: ["Std1+Std2", "Std3+Std4"],
    RoomType.DELUX: ["Delx1", "Delx2"],
    RoomType.SUITE: ["Suite1", "Suite2"],
}

ROOM_TYPE_LABELS: Dict[RoomType, str] = {
    RoomType.STANDARD: "Standard Room",
    RoomType.STANDARD_CONNECTING: "Standard Connecting (2 rooms)",
    RoomType.DELUX: "Private Delux",
    RoomType.SUITE: "Suite",
}


def category_for(room_type: RoomType) -> RoomCategory:
    return ROOM_TYPE_CATEGORY[RoomType(room_type)]


def units_for(room_type: RoomType) -> int:
    """Number of physical room units one booking of this type consumes"""
    return UNIT_CONSUMPTION[RoomType(room_type)]


def room_numbers_for(room_type: RoomType) -> List[RoomNumber]:
    return [RoomNumber.parse(number) for number in ROOM_NUMBERS[RoomType(room_type)]]


def is_room_of_type(room_number: RoomNumber, room_type: RoomType) -> bool:
    return room_number in room_numbers_for(room_type)


def room_type_label(room_type: RoomType) -> str:
    return ROOM_TYPE_LABELS[RoomType(room_type)]
