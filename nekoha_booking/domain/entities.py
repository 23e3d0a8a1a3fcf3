"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field, validator
from uuid import UUID, uuid4
from datetime import datetime, date, timezone
from typing import Optional, Dict, Any
from decimal import Decimal

from nekoha_booking.domain.enums import RoomType, ReservationStatus, HistoryAction
from nekoha_booking.domain.inventory import is_room_of_type
from nekoha_booking.domain.value_objects import DateRange, RoomNumber


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReservationDetails(BaseModel):
    """Editable fields shared by a booking request and a stored reservation"""

    # Guest/owner
    booker_name: str
    booker_contact: str = ""
    cat_name: str
    cat_details: str = ""
    notes: str = ""

    # Stay; date order is checked by the booking service, not here
    check_in: date
    check_out: date

    # Room
    room_type: RoomType
    room_number: RoomNumber

    status: ReservationStatus = ReservationStatus.CONFIRMED

    # Links to other records, not enforced
    customer_id: Optional[UUID] = None
    cat_id: Optional[UUID] = None

    @validator('booker_name', 'cat_name')
    def required_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Booker name and cat name are required')
        return v.strip()

    @validator('room_number', pre=True)
    def parse_room_number(cls, v):
        if isinstance(v, str):
            return RoomNumber.parse(v)
        return v

    @validator('room_number')
    def room_matches_type(cls, v, values):
        room_type = values.get('room_type')
        if room_type is not None and not is_room_of_type(v, room_type):
            raise ValueError(f"Room {v} is not a {RoomType(room_type).value} room")
        return v

    # ==================== QUERY METHODS ====================
    def stays_on(self, day: date) -> bool:
        """Night of `day` is occupied (check-out day is free)"""
        return self.check_in <= day < self.check_out

    def overlaps(self, check_in: date, check_out: date) -> bool:
        """Stay overlaps [check_in, check_out); touching ends do not count"""
        return check_in < self.check_out and self.check_in < check_out

    def date_range(self) -> DateRange:
        return DateRange(check_in=self.check_in, check_out=self.check_out)

    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def editable_fields(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in ReservationDetails.model_fields}


class ReservationDraft(ReservationDetails):
    """Validated booking request; without an ID it is a new booking"""
    reservation_id: Optional[UUID] = None

    @property
    def is_new(self) -> bool:
        return self.reservation_id is None


class Reservation(ReservationDetails):
    """Reservation Aggregate Root Entity"""

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)

    # Derived from nights x nightly rate; recomputed on every commit
    total_price: Decimal = Decimal("0")

    # Metadata
    created_at: datetime = Field(default_factory=utcnow)
    modified_at: datetime = Field(default_factory=utcnow)
    created_by: str = "SYSTEM"

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        draft: ReservationDraft,
        total_price: Decimal,
        created_by: str = "SYSTEM"
    ) -> "Reservation":
        """Create a new reservation from a validated draft"""
        now = utcnow()
        return Reservation(
            **draft.editable_fields(),
            total_price=total_price,
            created_at=now,
            modified_at=now,
            created_by=created_by
        )

    # ==================== MODIFICATION METHODS ====================
    def replaced_with(self, draft: ReservationDraft, total_price: Decimal) -> "Reservation":
        """Return the edited reservation; identity and creation data are kept"""
        return self.model_copy(update={
            **draft.editable_fields(),
            "total_price": total_price,
            "modified_at": utcnow(),
        })

    def snapshot(self) -> Dict[str, Any]:
        """Plain, JSON-friendly copy for the history log"""
        data = self.model_dump(mode="json")
        data["room_number"] = str(self.room_number)
        return data


class HistoryEntry(BaseModel):
    """Immutable audit record for one committed reservation mutation"""
    history_id: UUID = Field(default_factory=uuid4)
    action: HistoryAction
    reservation_id: UUID
    timestamp: datetime = Field(default_factory=utcnow)
    performed_by: Optional[str] = None
    details: Dict[str, Any]

    class Config:
        frozen = True

    @staticmethod
    def created(reservation: Reservation, performed_by: Optional[str] = None) -> "HistoryEntry":
        return HistoryEntry(
            action=HistoryAction.CREATED,
            reservation_id=reservation.reservation_id,
            performed_by=performed_by,
            details=reservation.snapshot()
        )

    @staticmethod
    def updated(
        before: Reservation,
        after: Reservation,
        performed_by: Optional[str] = None
    ) -> "HistoryEntry":
        return HistoryEntry(
            action=HistoryAction.UPDATED,
            reservation_id=after.reservation_id,
            performed_by=performed_by,
            details={"before": before.snapshot(), "after": after.snapshot()}
        )

    @staticmethod
    def deleted(reservation: Reservation, performed_by: Optional[str] = None) -> "HistoryEntry":
        return HistoryEntry(
            action=HistoryAction.DELETED,
            reservation_id=reservation.reservation_id,
            performed_by=performed_by,
            details=reservation.snapshot()
        )


class Customer(BaseModel):
    """Cat owner record"""
    customer_id: UUID = Field(default_factory=uuid4)
    full_name: str
    phone: str = ""
    email: Optional[str] = None
    line_id: str = ""
    address: str = ""
    created_at: datetime = Field(default_factory=utcnow)

    class Config:
        from_attributes = True


class Cat(BaseModel):
    cat_id: UUID = Field(default_factory=uuid4)
    owner_id: UUID
    name: str
    breed: str = ""
    color: str = ""
    gender: str = "Male"

    class Config:
        from_attributes = True


class RoomRate(BaseModel):
    """Nightly price for a room type"""
    room_type: RoomType
    price: Decimal = Field(ge=0)
    updated_at: datetime = Field(default_factory=utcnow)

    class Config:
        from_attributes = True
