"""Domain Value Objects"""
from pydantic import BaseModel, Field, validator
from datetime import date, timedelta
from decimal import Decimal
from typing import FrozenSet, Iterator, Tuple

from nekoha_booking.domain.errors import InvalidRoomNumberError

ROOM_SEPARATOR = "+"


class DateRange(BaseModel):
    """Value Object for a stay window; check-out day is not occupied"""
    check_in: date
    check_out: date

    @validator('check_out')
    def check_out_after_check_in(cls, v, values):
        if 'check_in' in values and v <= values['check_in']:
            raise ValueError('Check-out must be after check-in')
        return v

    def iter_nights(self) -> Iterator[date]:
        day = self.check_in
        while day < self.check_out:
            yield day
            day += timedelta(days=1)

    class Config:
        frozen = True


class RoomNumber(BaseModel):
    """Physical room assignment: a single room or a connecting pair"""
    rooms: Tuple[str, ...]

    @validator('rooms')
    def one_or_two_distinct_rooms(cls, v):
        if len(v) not in (1, 2):
            raise ValueError('A room assignment holds one room or a connecting pair')
        if any(not room or room != room.strip() or ROOM_SEPARATOR in room for room in v):
            raise ValueError('Room identifiers must be non-empty and unpadded')
        if len(set(v)) != len(v):
            raise ValueError('A connecting pair needs two different rooms')
        return v

    @staticmethod
    def parse(value: str) -> "RoomNumber":
        """Parse "Std1" or "Std1+Std2" into a RoomNumber"""
        if not isinstance(value, str) or not value.strip():
            raise InvalidRoomNumberError(f"Malformed room number: {value!r}")
        parts = tuple(part.strip() for part in value.strip().split(ROOM_SEPARATOR))
        try:
            return RoomNumber(rooms=parts)
        except ValueError:
            raise InvalidRoomNumberError(f"Malformed room number: {value!r}")

    @property
    def constituents(self) -> FrozenSet[str]:
        return frozenset(self.rooms)

    def conflicts_with(self, other: "RoomNumber") -> bool:
        """Two assignments clash when they share any physical room"""
        return not self.constituents.isdisjoint(other.constituents)

    def __str__(self) -> str:
        return ROOM_SEPARATOR.join(self.rooms)

    class Config:
        frozen = True


class Money(BaseModel):
    """Value Object for monetary amounts"""
    amount: Decimal = Field(ge=0)
    currency: str = "THB"

    class Config:
        frozen = True
