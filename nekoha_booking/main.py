from fastapi import FastAPI, HTTPException, Depends, Path, Query
from uuid import UUID
from datetime import date
from typing import List, Optional
from fastapi.security import OAuth2PasswordRequestForm

from nekoha_booking.api.schemas import (
    # Reservation
    ReservationRequest, ReservationResponse, MoneyResponse,
    # Availability
    CheckAvailabilityRequest, CheckAvailabilityResponse, CategoryAvailabilityResponse,
    DayAvailabilityResponse, CalendarDayResponse, FreeRoomsResponse, RoomTypeResponse,
    DashboardSummaryResponse,
    # History
    HistoryEntryResponse,
    # Customers
    CreateCustomerRequest, UpdateCustomerRequest, CustomerResponse, CatRequest, CatResponse,
    # Rates
    UpdateRoomRateRequest, RoomRateResponse,
    # Public
    PublicBookingRequest,
    # Auth
    Token, UserResponse
)

from nekoha_booking.api.dependencies import get_current_active_user, get_user
from nekoha_booking.infrastructure.config import get_settings
from nekoha_booking.infrastructure.logger import configure_logging, get_logger
from nekoha_booking.infrastructure.security import verify_password, create_access_token
from nekoha_booking.domain.auth import User

from nekoha_booking.application.services import (
    BookingResult, BookingService, AvailabilityService, HistoryService, CustomerService,
    RoomRateService, PublicBookingService
)
from nekoha_booking.infrastructure.repositories.in_memory_repositories import (
    InMemoryReservationRepository, InMemoryHistoryRepository, InMemoryCustomerRepository,
    InMemoryCatRepository, InMemoryRoomRateRepository
)
from nekoha_booking.domain.availability import DayAvailability, occupancy_level
from nekoha_booking.domain.entities import ReservationDraft, RoomRate
from nekoha_booking.domain.enums import BookingErrorCode, HistoryAction, RoomType, StayFilter
from nekoha_booking.domain.errors import BookingError
from nekoha_booking.domain.inventory import ROOM_NUMBERS, room_type_label, units_for

configure_logging()
logger = get_logger(__name__)
settings = get_settings()

app = FastAPI(
    title="Nekoha Cat Hotel Booking API",
    description="Room availability and booking management for a cat boarding hotel",
    version="1.0.0"
)

# Initialize repositories
reservation_repo = InMemoryReservationRepository()
history_repo = InMemoryHistoryRepository()
customer_repo = InMemoryCustomerRepository()
cat_repo = InMemoryCatRepository()
room_rate_repo = InMemoryRoomRateRepository(
    RoomRate(room_type=room_type, price=price) for room_type, price in settings.default_rates.items()
)

# Dependency injection
def get_room_rate_service() -> RoomRateService:
    return RoomRateService(room_rate_repo, currency=settings.currency)

def get_booking_service() -> BookingService:
    return BookingService(reservation_repo, history_repo, get_room_rate_service())

def get_availability_service() -> AvailabilityService:
    return AvailabilityService(reservation_repo)

def get_history_service() -> HistoryService:
    return HistoryService(history_repo, default_limit=settings.history_limit)

def get_customer_service() -> CustomerService:
    return CustomerService(customer_repo, cat_repo)

def get_public_booking_service() -> PublicBookingService:
    return PublicBookingService(get_booking_service(), get_customer_service(), reservation_repo)

_ERROR_STATUS = {
    BookingErrorCode.INVALID_DATE_RANGE: 400,
    BookingErrorCode.INVALID_ROOM: 400,
    BookingErrorCode.NO_AVAILABILITY: 409,
    BookingErrorCode.ROOM_CONFLICT: 409,
    BookingErrorCode.NOT_FOUND: 404,
    BookingErrorCode.PERSISTENCE_FAILURE: 503,
    BookingErrorCode.INVARIANT_VIOLATION: 500,
}

# ============================================================================
# HEALTH & REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

@app.get("/api/enums/room-type", tags=["Enum Reference"])
async def get_room_types_enum():
    """Get all RoomType enum values"""
    return {
        "values": [item.value for item in RoomType],
        "description": "Room types: standard, standard-connecting (2 standard rooms), delux, suite"
    }

@app.get("/api/enums/history-action", tags=["Enum Reference"])
async def get_history_actions():
    """Get all HistoryAction enum values"""
    return {
        "values": [item.value for item in HistoryAction],
        "description": "History actions: created, updated, deleted"
    }

@app.get("/api/rooms", response_model=List[RoomTypeResponse], tags=["Enum Reference"])
async def get_room_inventory():
    """Room types with their physical room numbers"""
    return [
        RoomTypeResponse(
            room_type=room_type.value,
            label=room_type_label(room_type),
            units_per_booking=units_for(room_type),
            room_numbers=ROOM_NUMBERS[room_type]
        )
        for room_type in RoomType
    ]

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()):
    user = get_user(form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        logger.warning("Failed staff login for %s", form_data.username)
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token(data={"sub": user.username})
    return {"access_token": access_token, "token_type": "bearer"}

@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    return current_user

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.post("/api/reservations", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
async def create_reservation(
    request: ReservationRequest,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Create new reservation"""
    try:
        draft = ReservationDraft(**request.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    result = await service.create_reservation(draft, performed_by=current_user.username)
    return _reservation_to_response(_unwrap(result))

@app.get("/api/reservations", response_model=List[ReservationResponse], tags=["Reservations"])
async def list_reservations(
    search: Optional[str] = None,
    room_type: Optional[RoomType] = None,
    stay: StayFilter = StayFilter.ALL,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """List reservations, optionally filtered"""
    reservations = await service.list_reservations(
        search=search,
        room_type=room_type,
        stay_filter=stay,
        window_start=start_date,
        window_end=end_date
    )
    return [_reservation_to_response(r) for r in reservations]

@app.get("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def get_reservation(
    reservation_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get reservation by ID"""
    reservation = await service.get_reservation(reservation_id)
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

@app.put("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def update_reservation(
    reservation_id: UUID,
    request: ReservationRequest,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Replace the editable fields of a reservation"""
    try:
        draft = ReservationDraft(**request.model_dump(), reservation_id=reservation_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    result = await service.update_reservation(draft, performed_by=current_user.username)
    return _reservation_to_response(_unwrap(result))

@app.delete("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def delete_reservation(
    reservation_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Delete reservation; returns its last state"""
    result = await service.delete_reservation(reservation_id, performed_by=current_user.username)
    return _reservation_to_response(_unwrap(result))

@app.get("/api/reservations/{reservation_id}/history", response_model=List[HistoryEntryResponse], tags=["History"])
async def get_reservation_history(
    reservation_id: UUID,
    service: HistoryService = Depends(get_history_service),
    current_user: User = Depends(get_current_active_user)
):
    """History entries of one reservation, oldest first"""
    entries = await service.get_reservation_history(reservation_id)
    return [_history_to_response(e) for e in entries]

# ============================================================================
# AVAILABILITY ENDPOINTS
# ============================================================================

@app.post("/api/availability/check", response_model=CheckAvailabilityResponse, tags=["Availability"])
async def check_availability(
    request: CheckAvailabilityRequest,
    service: AvailabilityService = Depends(get_availability_service),
    current_user: User = Depends(get_current_active_user)
):
    """Check if a room type is free for every night of a stay"""
    try:
        check = await service.check_availability(
            room_type=request.room_type,
            check_in=request.check_in,
            check_out=request.check_out,
            exclude_id=request.exclude_id
        )
    except BookingError as e:
        raise _booking_error(e)
    return CheckAvailabilityResponse(available=check.available, conflict_date=check.conflict_date)

@app.get("/api/availability/rooms", response_model=FreeRoomsResponse, tags=["Availability"])
async def get_free_rooms(
    room_type: RoomType,
    check_in: date,
    check_out: date,
    exclude_id: Optional[UUID] = None,
    service: AvailabilityService = Depends(get_availability_service),
    current_user: User = Depends(get_current_active_user)
):
    """Room numbers that can still be assigned for a stay"""
    try:
        room_numbers = await service.get_free_room_numbers(room_type, check_in, check_out, exclude_id)
    except BookingError as e:
        raise _booking_error(e)
    return FreeRoomsResponse(
        room_type=room_type.value, check_in=check_in, check_out=check_out, room_numbers=room_numbers
    )

@app.get("/api/availability/calendar/{year}/{month}", response_model=List[CalendarDayResponse], tags=["Availability"])
async def get_month_calendar(
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=1, le=12),
    room_type: Optional[List[RoomType]] = Query(None),
    service: AvailabilityService = Depends(get_availability_service),
    current_user: User = Depends(get_current_active_user)
):
    """Occupancy for each day of a month"""
    days = await service.get_month_calendar(year, month, room_types=room_type)
    return [
        CalendarDayResponse(
            **_counts(d.availability),
            day=d.day,
            level=d.level,
            reservations=[_reservation_to_response(r) for r in d.reservations]
        )
        for d in days
    ]

@app.get("/api/availability/{day}", response_model=DayAvailabilityResponse, tags=["Availability"])
async def get_day_availability(
    day: date,
    service: AvailabilityService = Depends(get_availability_service),
    current_user: User = Depends(get_current_active_user)
):
    """Booked and available units per room category for one night"""
    availability = await service.get_day_availability(day)
    return DayAvailabilityResponse(**_counts(availability), day=day, level=occupancy_level(availability))

@app.get("/api/dashboard/summary", response_model=DashboardSummaryResponse, tags=["Availability"])
async def get_dashboard_summary(
    day: Optional[date] = None,
    service: AvailabilityService = Depends(get_availability_service),
    current_user: User = Depends(get_current_active_user)
):
    """Occupancy figures for the dashboard"""
    summary = await service.get_dashboard_summary(day)
    return DashboardSummaryResponse(**summary.model_dump())

# ============================================================================
# HISTORY ENDPOINTS
# ============================================================================

@app.get("/api/history", response_model=List[HistoryEntryResponse], tags=["History"])
async def list_history(
    action: Optional[HistoryAction] = None,
    limit: Optional[int] = Query(None, ge=1, le=500),
    service: HistoryService = Depends(get_history_service),
    current_user: User = Depends(get_current_active_user)
):
    """Booking history, newest first"""
    entries = await service.list_history(action=action, limit=limit)
    return [_history_to_response(e) for e in entries]

# ============================================================================
# CUSTOMER ENDPOINTS
# ============================================================================

@app.post("/api/customers", response_model=CustomerResponse, status_code=201, tags=["Customers"])
async def create_customer(
    request: CreateCustomerRequest,
    service: CustomerService = Depends(get_customer_service),
    current_user: User = Depends(get_current_active_user)
):
    """Create customer with their cats"""
    try:
        customer = await service.create_customer(
            full_name=request.full_name,
            phone=request.phone,
            email=request.email,
            line_id=request.line_id,
            address=request.address,
            cats=[cat.model_dump() for cat in request.cats]
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await _customer_to_response(customer, service)

@app.get("/api/customers", response_model=List[CustomerResponse], tags=["Customers"])
async def get_all_customers(
    service: CustomerService = Depends(get_customer_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get all customers"""
    customers = await service.get_all_customers()
    return [await _customer_to_response(c, service) for c in customers]

@app.get("/api/customers/{customer_id}", response_model=CustomerResponse, tags=["Customers"])
async def get_customer(
    customer_id: UUID,
    service: CustomerService = Depends(get_customer_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get customer by ID"""
    customer = await service.get_customer(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return await _customer_to_response(customer, service)

@app.put("/api/customers/{customer_id}", response_model=CustomerResponse, tags=["Customers"])
async def update_customer(
    customer_id: UUID,
    request: UpdateCustomerRequest,
    service: CustomerService = Depends(get_customer_service),
    current_user: User = Depends(get_current_active_user)
):
    """Update customer details"""
    try:
        customer = await service.update_customer(customer_id, **request.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return await _customer_to_response(customer, service)

@app.delete("/api/customers/{customer_id}", status_code=204, tags=["Customers"])
async def delete_customer(
    customer_id: UUID,
    service: CustomerService = Depends(get_customer_service),
    current_user: User = Depends(get_current_active_user)
):
    """Delete customer and their cats"""
    if not await service.delete_customer(customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")

@app.post("/api/customers/{customer_id}/cats", response_model=CatResponse, status_code=201, tags=["Customers"])
async def add_cat(
    customer_id: UUID,
    request: CatRequest,
    service: CustomerService = Depends(get_customer_service),
    current_user: User = Depends(get_current_active_user)
):
    """Add a cat to a customer"""
    try:
        cat = await service.add_cat(customer_id, **request.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not cat:
        raise HTTPException(status_code=404, detail="Customer not found")
    return CatResponse(**cat.model_dump())

@app.delete("/api/cats/{cat_id}", status_code=204, tags=["Customers"])
async def remove_cat(
    cat_id: UUID,
    service: CustomerService = Depends(get_customer_service),
    current_user: User = Depends(get_current_active_user)
):
    """Remove a cat record"""
    if not await service.remove_cat(cat_id):
        raise HTTPException(status_code=404, detail="Cat not found")

# ============================================================================
# ROOM RATE ENDPOINTS
# ============================================================================

@app.get("/api/room-rates", response_model=List[RoomRateResponse], tags=["Room Rates"])
async def get_room_rates(
    service: RoomRateService = Depends(get_room_rate_service),
    current_user: User = Depends(get_current_active_user)
):
    """Nightly price per room type"""
    return [_rate_to_response(r, service.currency) for r in await service.get_rates()]

@app.put("/api/room-rates/{room_type}", response_model=RoomRateResponse, tags=["Room Rates"])
async def update_room_rate(
    room_type: RoomType,
    request: UpdateRoomRateRequest,
    service: RoomRateService = Depends(get_room_rate_service),
    current_user: User = Depends(get_current_active_user)
):
    """Set the nightly price of a room type"""
    try:
        rate = await service.set_rate(room_type, request.price)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _rate_to_response(rate, service.currency)

@app.get("/api/room-rates/quote", response_model=MoneyResponse, tags=["Room Rates"])
async def quote_stay(
    room_type: RoomType,
    check_in: date,
    check_out: date,
    service: RoomRateService = Depends(get_room_rate_service),
    current_user: User = Depends(get_current_active_user)
):
    """Total price of a stay"""
    money = await service.quote(room_type, check_in, check_out)
    return {"amount": money.amount, "currency": money.currency}

# ============================================================================
# PUBLIC ENDPOINTS (no login)
# ============================================================================

@app.get("/api/public/room-rates", response_model=List[RoomRateResponse], tags=["Public"])
async def get_public_room_rates(service: RoomRateService = Depends(get_room_rate_service)):
    """Room prices shown on the booking page"""
    return [_rate_to_response(r, service.currency) for r in await service.get_rates()]

@app.post("/api/public/bookings", response_model=ReservationResponse, status_code=201, tags=["Public"])
async def create_public_booking(
    request: PublicBookingRequest,
    service: PublicBookingService = Depends(get_public_booking_service)
):
    """Guest self-booking; a free room of the requested type is assigned"""
    try:
        result = await service.book(
            guest_name=request.guest_name,
            guest_email=request.guest_email,
            guest_phone=request.guest_phone,
            cat_name=request.cat_name,
            check_in=request.check_in,
            check_out=request.check_out,
            room_type=request.room_type,
            cat_details=request.cat_details,
            notes=request.notes
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _reservation_to_response(_unwrap(result))

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _unwrap(result: BookingResult):
    """Return the reservation of a successful result or raise the mapped HTTP error"""
    if not result.success:
        raise HTTPException(status_code=_ERROR_STATUS.get(result.error, 400), detail=result.reason)
    return result.reservation

def _booking_error(error: BookingError) -> HTTPException:
    return HTTPException(status_code=_ERROR_STATUS.get(error.code, 400), detail=error.message)

def _counts(availability: DayAvailability) -> dict:
    return {
        category: CategoryAvailabilityResponse(**getattr(availability, category).model_dump())
        for category in ("standard", "delux", "suite")
    }

def _reservation_to_response(reservation) -> ReservationResponse:
    """Convert Reservation entity to ReservationResponse"""
    return ReservationResponse(
        reservation_id=reservation.reservation_id,
        booker_name=reservation.booker_name,
        booker_contact=reservation.booker_contact,
        cat_name=reservation.cat_name,
        cat_details=reservation.cat_details,
        notes=reservation.notes,
        check_in=reservation.check_in,
        check_out=reservation.check_out,
        nights=reservation.nights(),
        room_type=reservation.room_type.value,
        room_number=str(reservation.room_number),
        status=reservation.status.value,
        customer_id=reservation.customer_id,
        cat_id=reservation.cat_id,
        total_price=reservation.total_price,
        created_at=reservation.created_at,
        modified_at=reservation.modified_at,
        created_by=reservation.created_by
    )

def _history_to_response(entry) -> HistoryEntryResponse:
    return HistoryEntryResponse(
        history_id=entry.history_id,
        action=entry.action.value,
        reservation_id=entry.reservation_id,
        timestamp=entry.timestamp,
        performed_by=entry.performed_by,
        details=entry.details
    )

async def _customer_to_response(customer, service: CustomerService) -> CustomerResponse:
    cats = await service.get_cats(customer.customer_id)
    return CustomerResponse(
        **customer.model_dump(),
        cats=[CatResponse(**cat.model_dump()) for cat in cats]
    )

def _rate_to_response(rate, currency: str) -> RoomRateResponse:
    return RoomRateResponse(
        room_type=rate.room_type.value,
        label=room_type_label(rate.room_type),
        price=rate.price,
        currency=currency,
        updated_at=rate.updated_at
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
