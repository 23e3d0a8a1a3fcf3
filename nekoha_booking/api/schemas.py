"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import Any, Dict, List, Optional

from nekoha_booking.domain.enums import RoomType, ReservationStatus, OccupancyLevel


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class ReservationRequest(BaseModel):
    """Create/replace reservation request DTO"""
    booker_name: str = Field(min_length=1)
    booker_contact: str = ""
    cat_name: str = Field(min_length=1)
    cat_details: str = ""
    notes: str = ""
    check_in: date
    check_out: date
    room_type: RoomType
    room_number: str
    status: ReservationStatus = ReservationStatus.CONFIRMED
    customer_id: Optional[UUID] = None
    cat_id: Optional[UUID] = None


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    reservation_id: UUID
    booker_name: str
    booker_contact: str
    cat_name: str
    cat_details: str
    notes: str
    check_in: date
    check_out: date
    nights: int
    room_type: str
    room_number: str
    status: str
    customer_id: Optional[UUID] = None
    cat_id: Optional[UUID] = None
    total_price: Decimal
    created_at: datetime
    modified_at: datetime
    created_by: str


class MoneyResponse(BaseModel):
    """Money response DTO"""
    amount: Decimal
    currency: str


# ============================================================================
# AVAILABILITY SCHEMAS
# ============================================================================

class CheckAvailabilityRequest(BaseModel):
    """Check availability request DTO"""
    room_type: RoomType
    check_in: date
    check_out: date
    exclude_id: Optional[UUID] = None


class CheckAvailabilityResponse(BaseModel):
    available: bool
    conflict_date: Optional[date] = None


class CategoryAvailabilityResponse(BaseModel):
    total: int
    booked: int
    available: int


class DayAvailabilityResponse(BaseModel):
    """Availability response DTO"""
    day: date
    level: OccupancyLevel
    standard: CategoryAvailabilityResponse
    delux: CategoryAvailabilityResponse
    suite: CategoryAvailabilityResponse


class CalendarDayResponse(BaseModel):
    day: date
    level: OccupancyLevel
    standard: CategoryAvailabilityResponse
    delux: CategoryAvailabilityResponse
    suite: CategoryAvailabilityResponse
    reservations: List[ReservationResponse]


class FreeRoomsResponse(BaseModel):
    room_type: str
    check_in: date
    check_out: date
    room_numbers: List[str]


class RoomTypeResponse(BaseModel):
    room_type: str
    label: str
    units_per_booking: int
    room_numbers: List[str]


class DashboardSummaryResponse(BaseModel):
    day: date
    total_rooms: int
    booked: int
    available: int
    occupancy_rate: int
    upcoming_check_ins: int
    active_stays: int


# ============================================================================
# HISTORY SCHEMAS
# ============================================================================

class HistoryEntryResponse(BaseModel):
    history_id: UUID
    action: str
    reservation_id: UUID
    timestamp: datetime
    performed_by: Optional[str] = None
    details: Dict[str, Any]


# ============================================================================
# CUSTOMER SCHEMAS
# ============================================================================

class CatRequest(BaseModel):
    name: str = Field(min_length=1)
    breed: str = ""
    color: str = ""
    gender: str = "Male"


class CatResponse(BaseModel):
    cat_id: UUID
    owner_id: UUID
    name: str
    breed: str
    color: str
    gender: str


class CreateCustomerRequest(BaseModel):
    full_name: str = Field(min_length=1)
    phone: str = ""
    email: Optional[str] = None
    line_id: str = ""
    address: str = ""
    cats: List[CatRequest] = []


class UpdateCustomerRequest(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    line_id: Optional[str] = None
    address: Optional[str] = None


class CustomerResponse(BaseModel):
    customer_id: UUID
    full_name: str
    phone: str
    email: Optional[str] = None
    line_id: str
    address: str
    created_at: datetime
    cats: List[CatResponse] = []


# ============================================================================
# ROOM RATE SCHEMAS
# ============================================================================

class UpdateRoomRateRequest(BaseModel):
    price: Decimal


class RoomRateResponse(BaseModel):
    room_type: str
    label: str
    price: Decimal
    currency: str
    updated_at: datetime


# ============================================================================
# PUBLIC BOOKING SCHEMAS
# ============================================================================

class PublicBookingRequest(BaseModel):
    """Guest self-booking request DTO"""
    check_in: date
    check_out: date
    room_type: RoomType = RoomType.STANDARD
    guest_name: str = Field(min_length=1)
    guest_email: str = Field(min_length=3)
    guest_phone: str = ""
    cat_name: str = Field(min_length=1)
    cat_details: str = ""
    notes: str = ""


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str


class TokenData(BaseModel):
    """Token payload DTO"""
    username: Optional[str] = None


class UserResponse(BaseModel):
    """User response DTO"""
    user_id: UUID
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    disabled: bool
