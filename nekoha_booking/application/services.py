"""Application Services - Business use cases"""
from uuid import UUID
from calendar import monthrange
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Awaitable, Callable, List, Optional, Tuple

from pydantic import BaseModel

from nekoha_booking.domain.availability import (
    AvailabilityCheck, DayAvailability, check_availability, check_stay, day_availability, occupancy_level
)
from nekoha_booking.domain.entities import Reservation, ReservationDraft, HistoryEntry, Customer, Cat, RoomRate
from nekoha_booking.domain.enums import (
    BookingErrorCode, HistoryAction, OccupancyLevel, ReservationStatus, RoomType, StayFilter
)
from nekoha_booking.domain.errors import (
    BookingError, InvalidDateRangeError, InvariantViolationError, NoAvailabilityError,
    PersistenceError, ReservationNotFoundError, RoomConflictError
)
from nekoha_booking.domain.inventory import TOTAL_ROOM_UNITS
from nekoha_booking.domain.repositories import (
    ReservationRepository, HistoryRepository, CustomerRepository, CatRepository, RoomRateRepository
)
from nekoha_booking.domain.room_conflict import find_room_conflict, first_free_room_number, free_room_numbers
from nekoha_booking.domain.value_objects import DateRange, Money
from nekoha_booking.infrastructure.logger import get_logger

logger = get_logger(__name__)

PUBLIC_BOOKER = "PUBLIC"
ONLINE_BOOKING_NOTE = "(Booked Online)"


class BookingResult(BaseModel):
    """Outcome of a reservation create/update/delete"""
    success: bool
    reservation: Optional[Reservation] = None
    error: Optional[BookingErrorCode] = None
    reason: Optional[str] = None
    conflict_date: Optional[date] = None

    @staticmethod
    def ok(reservation: Reservation) -> "BookingResult":
        return BookingResult(success=True, reservation=reservation)

    @staticmethod
    def failed(error: BookingError) -> "BookingResult":
        return BookingResult(
            success=False,
            error=error.code,
            reason=error.message,
            conflict_date=getattr(error, "conflict_date", None)
        )


def _ensure_date_order(check_in: date, check_out: date) -> None:
    if check_out <= check_in:
        raise InvalidDateRangeError()


class RoomRateService:
    """Service for nightly room prices"""

    def __init__(self, repository: RoomRateRepository, currency: str = "THB"):
        self.repository = repository
        self.currency = currency

    async def get_rates(self) -> List[RoomRate]:
        return await self.repository.find_all()

    async def get_rate(self, room_type: RoomType) -> Optional[RoomRate]:
        return await self.repository.find_by_room_type(room_type)

    async def set_rate(self, room_type: RoomType, price) -> RoomRate:
        """Update the nightly price; price must be a non-negative number"""
        try:
            amount = Decimal(str(price))
        except (InvalidOperation, ValueError):
            raise ValueError("Invalid price value")
        if not amount.is_finite() or amount < 0:
            raise ValueError("Invalid price value")

        rate = await self.repository.save(RoomRate(room_type=room_type, price=amount))
        logger.info("Rate for %s set to %s %s", RoomType(room_type).value, amount, self.currency)
        return rate

    async def nightly_rate(self, room_type: RoomType) -> Decimal:
        rate = await self.repository.find_by_room_type(room_type)
        return rate.price if rate else Decimal("0")

    async def quote(self, room_type: RoomType, check_in: date, check_out: date) -> Money:
        """Price of a stay: nights x nightly rate (zero for an empty range)"""
        nights = (check_out - check_in).days
        if nights <= 0:
            return Money(amount=Decimal("0"), currency=self.currency)
        rate = await self.nightly_rate(room_type)
        return Money(amount=rate * nights, currency=self.currency)


class BookingService:
    """Validates and commits reservation changes.

    Every operation runs: existence check (edits/deletes), date order,
    aggregate availability, room-number re-check, then commit plus exactly
    one history entry. Failures come back as a BookingResult; nothing is
    written for a rejected request.
    """

    def __init__(self,
                 repository: ReservationRepository,
                 history_repo: HistoryRepository,
                 rate_service: Optional[RoomRateService] = None):
        self.repository = repository
        self.history_repo = history_repo
        self.rate_service = rate_service

    # ==================== QUERIES ====================
    async def get_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        """Get reservation by ID"""
        return await self.repository.find_by_id(reservation_id)

    async def get_all_reservations(self) -> List[Reservation]:
        """Get all reservations"""
        return await self.repository.find_all()

    async def list_reservations(
        self,
        search: Optional[str] = None,
        room_type: Optional[RoomType] = None,
        stay_filter: StayFilter = StayFilter.ALL,
        window_start: Optional[date] = None,
        window_end: Optional[date] = None,
        today: Optional[date] = None
    ) -> List[Reservation]:
        """Filtered reservation list, earliest check-in first"""
        today = today or date.today()
        term = (search or "").strip().lower()

        def matches(reservation: Reservation) -> bool:
            if term and not any(
                term in text.lower()
                for text in (reservation.cat_name, reservation.booker_name, str(reservation.room_number))
            ):
                return False
            if room_type is not None and reservation.room_type != room_type:
                return False
            if stay_filter == StayFilter.ACTIVE and not (reservation.check_in <= today <= reservation.check_out):
                return False
            if stay_filter == StayFilter.UPCOMING and not reservation.check_in > today:
                return False
            if stay_filter == StayFilter.PAST and not reservation.check_out < today:
                return False
            if window_start and window_end and not (
                reservation.check_in <= window_end and reservation.check_out >= window_start
            ):
                return False
            return True

        reservations = await self.repository.find_all()
        return sorted(filter(matches, reservations), key=lambda r: r.check_in)

    # ==================== COMMANDS ====================
    async def save_reservation(self, draft: ReservationDraft, performed_by: Optional[str] = None) -> BookingResult:
        """Create when the draft has no ID, otherwise edit that reservation"""
        if draft.is_new:
            return await self.create_reservation(draft, performed_by)
        return await self.update_reservation(draft, performed_by)

    async def create_reservation(self, draft: ReservationDraft, performed_by: Optional[str] = None) -> BookingResult:
        """Create new reservation with full validation"""
        if not draft.is_new:
            draft = draft.model_copy(update={"reservation_id": None})
        try:
            reservations = await self.repository.find_all()
            self.validate_draft(draft, reservations)

            reservation = Reservation.create(
                draft,
                total_price=await self._total_price(draft),
                created_by=performed_by or "SYSTEM"
            )
            await self.repository.save(reservation)
            await self._append_history(
                HistoryEntry.created(reservation, performed_by),
                undo=lambda: self.repository.delete(reservation.reservation_id)
            )
        except BookingError as e:
            return self._rejected("create", draft, e)

        logger.info(
            "Reservation %s created: %s %s, %s to %s",
            reservation.reservation_id, reservation.room_type.value, reservation.room_number,
            reservation.check_in, reservation.check_out
        )
        return BookingResult.ok(reservation)

    async def update_reservation(self, draft: ReservationDraft, performed_by: Optional[str] = None) -> BookingResult:
        """Replace the editable fields of an existing reservation"""
        try:
            if draft.reservation_id is None:
                raise InvariantViolationError("An edit needs the ID of the reservation to change")
            reservations = await self.repository.find_all()
            existing = next((r for r in reservations if r.reservation_id == draft.reservation_id), None)
            if existing is None:
                raise ReservationNotFoundError(draft.reservation_id)
            self.validate_draft(draft, reservations)

            updated = existing.replaced_with(draft, await self._total_price(draft))
            await self.repository.update(updated)
            await self._append_history(
                HistoryEntry.updated(existing, updated, performed_by),
                undo=lambda: self.repository.update(existing)
            )
        except BookingError as e:
            return self._rejected("update", draft, e)

        logger.info("Reservation %s updated", updated.reservation_id)
        return BookingResult.ok(updated)

    async def delete_reservation(self, reservation_id: UUID, performed_by: Optional[str] = None) -> BookingResult:
        """Delete a reservation; its last state survives only in history"""
        try:
            existing = await self.repository.find_by_id(reservation_id)
            if existing is None or not await self.repository.delete(reservation_id):
                raise ReservationNotFoundError(reservation_id)
            await self._append_history(
                HistoryEntry.deleted(existing, performed_by),
                undo=lambda: self.repository.save(existing)
            )
        except BookingError as e:
            logger.warning("Delete of reservation %s rejected: %s", reservation_id, e.message)
            return BookingResult.failed(e)

        logger.info("Reservation %s deleted", reservation_id)
        return BookingResult.ok(existing)

    # ==================== INTERNALS ====================
    @staticmethod
    def validate_draft(draft: ReservationDraft, reservations: List[Reservation]) -> None:
        """Date order, availability, then room number; raises the first BookingError found"""
        _ensure_date_order(draft.check_in, draft.check_out)

        check = check_availability(draft, reservations)
        if not check.available:
            raise NoAvailabilityError(check.conflict_date)

        conflict = find_room_conflict(
            draft.room_number, draft.check_in, draft.check_out, reservations,
            exclude_id=draft.reservation_id
        )
        if conflict is not None:
            raise RoomConflictError(str(draft.room_number), conflict.reservation_id)

    async def _total_price(self, draft: ReservationDraft) -> Decimal:
        if self.rate_service is None:
            return Decimal("0")
        return await self.rate_service.nightly_rate(draft.room_type) * draft.nights()

    async def _append_history(self, entry: HistoryEntry, undo: Callable[[], Awaitable]) -> None:
        """Write the history entry or undo the reservation change"""
        try:
            await self.history_repo.append(entry)
        except PersistenceError as e:
            logger.error(
                "History write failed for reservation %s (%s); rolling back",
                entry.reservation_id, entry.action.value
            )
            try:
                await undo()
            except PersistenceError as undo_error:
                logger.error("Rollback failed for reservation %s: %s", entry.reservation_id, undo_error.message)
                raise PersistenceError(
                    f"History write failed and the change could not be rolled back: {undo_error.message}"
                )
            raise PersistenceError(f"History write failed; change was rolled back: {e.message}")

    @staticmethod
    def _rejected(operation: str, draft: ReservationDraft, error: BookingError) -> BookingResult:
        if isinstance(error, (InvariantViolationError, PersistenceError)):
            logger.error("Reservation %s failed (%s): %s", operation, error.code.value, error.message)
        else:
            logger.warning(
                "Reservation %s rejected for %s %s: %s",
                operation, draft.room_type.value, draft.room_number, error.message
            )
        return BookingResult.failed(error)


class CalendarDay(BaseModel):
    day: date
    availability: DayAvailability
    level: OccupancyLevel
    reservations: List[Reservation]


class DashboardSummary(BaseModel):
    day: date
    total_rooms: int
    booked: int
    available: int
    occupancy_rate: int
    upcoming_check_ins: int
    active_stays: int


class AvailabilityService:
    """Read-only occupancy views over the current reservation set"""

    def __init__(self, repository: ReservationRepository):
        self.repository = repository

    async def get_day_availability(self, day: date) -> DayAvailability:
        return day_availability(day, await self.repository.find_all())

    async def check_availability(
        self,
        room_type: RoomType,
        check_in: date,
        check_out: date,
        exclude_id: Optional[UUID] = None
    ) -> AvailabilityCheck:
        """Check if a room type can be booked for every night of a stay"""
        _ensure_date_order(check_in, check_out)
        stay = DateRange(check_in=check_in, check_out=check_out)
        return check_stay(room_type, stay, await self.repository.find_all(), exclude_id)

    async def get_free_room_numbers(
        self,
        room_type: RoomType,
        check_in: date,
        check_out: date,
        exclude_id: Optional[UUID] = None
    ) -> List[str]:
        """Room numbers to offer for a stay; re-checked again on commit"""
        _ensure_date_order(check_in, check_out)
        reservations = await self.repository.find_all()
        return [str(n) for n in free_room_numbers(room_type, check_in, check_out, reservations, exclude_id)]

    async def get_month_calendar(
        self,
        year: int,
        month: int,
        room_types: Optional[List[RoomType]] = None
    ) -> List[CalendarDay]:
        """One entry per day of the month with counts and staying guests"""
        reservations = await self.repository.find_all()
        days_in_month = monthrange(year, month)[1]
        calendar_days = []
        for offset in range(days_in_month):
            day = date(year, month, 1) + timedelta(days=offset)
            availability = day_availability(day, reservations)
            staying = sorted(
                (r for r in reservations
                 if r.stays_on(day) and (not room_types or r.room_type in room_types)),
                key=lambda r: r.room_type.value
            )
            calendar_days.append(CalendarDay(
                day=day,
                availability=availability,
                level=occupancy_level(availability),
                reservations=staying
            ))
        return calendar_days

    async def get_dashboard_summary(self, today: Optional[date] = None) -> DashboardSummary:
        today = today or date.today()
        reservations = await self.repository.find_all()
        availability = day_availability(today, reservations)
        booked = availability.total_booked
        rate = (Decimal(booked * 100) / Decimal(TOTAL_ROOM_UNITS)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        next_week = today + timedelta(days=7)

        return DashboardSummary(
            day=today,
            total_rooms=TOTAL_ROOM_UNITS,
            booked=booked,
            available=TOTAL_ROOM_UNITS - booked,
            occupancy_rate=int(rate),
            upcoming_check_ins=sum(1 for r in reservations if today <= r.check_in <= next_week),
            active_stays=sum(1 for r in reservations if r.check_in <= today <= r.check_out)
        )


class HistoryService:
    """Read access to the booking history log"""

    def __init__(self, repository: HistoryRepository, default_limit: int = 50):
        self.repository = repository
        self.default_limit = default_limit

    async def list_history(self, action: Optional[HistoryAction] = None, limit: Optional[int] = None) -> List[HistoryEntry]:
        return await self.repository.find_recent(action=action, limit=limit or self.default_limit)

    async def get_reservation_history(self, reservation_id: UUID) -> List[HistoryEntry]:
        return await self.repository.find_by_reservation(reservation_id)


class CustomerService:
    """Service for customer and cat records"""

    def __init__(self, repository: CustomerRepository, cat_repo: CatRepository):
        self.repository = repository
        self.cat_repo = cat_repo

    async def create_customer(
        self,
        full_name: str,
        phone: str = "",
        email: Optional[str] = None,
        line_id: str = "",
        address: str = "",
        cats: Optional[List[dict]] = None
    ) -> Customer:
        """Create a customer and, optionally, their cats"""
        if not full_name or not full_name.strip():
            raise ValueError("Customer name is required")
        customer = await self.repository.save(Customer(
            full_name=full_name.strip(),
            phone=phone,
            email=email or None,
            line_id=line_id,
            address=address
        ))
        for cat in cats or []:
            await self.add_cat(customer.customer_id, **cat)
        return customer

    async def get_customer(self, customer_id: UUID) -> Optional[Customer]:
        return await self.repository.find_by_id(customer_id)

    async def get_all_customers(self) -> List[Customer]:
        return await self.repository.find_all()

    async def update_customer(self, customer_id: UUID, **changes) -> Optional[Customer]:
        customer = await self.repository.find_by_id(customer_id)
        if not customer:
            return None
        changes = {k: v for k, v in changes.items() if v is not None}
        if "full_name" in changes and not changes["full_name"].strip():
            raise ValueError("Customer name is required")
        return await self.repository.update(customer.model_copy(update=changes))

    async def delete_customer(self, customer_id: UUID) -> bool:
        """Delete a customer and their cats"""
        for cat in await self.cat_repo.find_by_owner(customer_id):
            await self.cat_repo.delete(cat.cat_id)
        return await self.repository.delete(customer_id)

    async def upsert_by_email(self, full_name: str, email: str, phone: str = "") -> Tuple[Customer, bool]:
        """Reuse the customer with this email or create one; the flag is True when created"""
        existing = await self.repository.find_by_email(email)
        if existing:
            return existing, False
        return await self.create_customer(full_name=full_name, phone=phone, email=email), True

    async def add_cat(
        self,
        owner_id: UUID,
        name: str,
        breed: str = "",
        color: str = "",
        gender: str = "Male"
    ) -> Optional[Cat]:
        if not await self.repository.find_by_id(owner_id):
            return None
        if not name or not name.strip():
            raise ValueError("Cat name is required")
        return await self.cat_repo.save(Cat(
            owner_id=owner_id, name=name.strip(), breed=breed, color=color, gender=gender
        ))

    async def get_cats(self, owner_id: UUID) -> List[Cat]:
        return await self.cat_repo.find_by_owner(owner_id)

    async def remove_cat(self, cat_id: UUID) -> bool:
        return await self.cat_repo.delete(cat_id)


class PublicBookingService:
    """Guest self-booking: customer upsert, cat record, room auto-assignment"""

    def __init__(self,
                 booking_service: BookingService,
                 customer_service: CustomerService,
                 reservation_repo: ReservationRepository):
        self.booking_service = booking_service
        self.customer_service = customer_service
        self.reservation_repo = reservation_repo

    async def book(
        self,
        guest_name: str,
        guest_email: str,
        guest_phone: str,
        cat_name: str,
        check_in: date,
        check_out: date,
        room_type: RoomType,
        cat_details: str = "",
        notes: str = ""
    ) -> BookingResult:
        try:
            _ensure_date_order(check_in, check_out)
            reservations = await self.reservation_repo.find_all()
            room_number = first_free_room_number(room_type, check_in, check_out, reservations)
            if room_number is None:
                raise NoAvailabilityError()

            # Nothing is written until the request passes every commit check
            draft = ReservationDraft(
                booker_name=guest_name,
                booker_contact=guest_phone,
                cat_name=cat_name,
                cat_details=cat_details,
                notes=f"{notes} {ONLINE_BOOKING_NOTE}".strip(),
                check_in=check_in,
                check_out=check_out,
                room_type=room_type,
                room_number=room_number,
                status=ReservationStatus.CONFIRMED
            )
            BookingService.validate_draft(draft, reservations)
        except BookingError as e:
            logger.warning("Online booking rejected for %s: %s", RoomType(room_type).value, e.message)
            return BookingResult.failed(e)

        customer, created = await self.customer_service.upsert_by_email(guest_name, guest_email, guest_phone)
        cat = await self.customer_service.add_cat(customer.customer_id, name=cat_name, breed=cat_details)

        draft = draft.model_copy(update={
            "customer_id": customer.customer_id,
            "cat_id": cat.cat_id if cat else None,
        })
        result = await self.booking_service.create_reservation(draft, performed_by=PUBLIC_BOOKER)
        if not result.success:
            # Rejected at commit; the guest records written above go too
            if cat:
                await self.customer_service.remove_cat(cat.cat_id)
            if created:
                await self.customer_service.delete_customer(customer.customer_id)
            logger.warning("Online booking for %s discarded: %s", guest_email, result.reason)
        return result
