"""In-Memory Repository Implementations"""
from typing import Optional, List, Dict, Iterable
from uuid import UUID

from nekoha_booking.domain.repositories import (
    ReservationRepository, HistoryRepository, CustomerRepository, CatRepository, RoomRateRepository
)
from nekoha_booking.domain.entities import Reservation, HistoryEntry, Customer, Cat, RoomRate
from nekoha_booking.domain.enums import HistoryAction, RoomType
from nekoha_booking.domain.errors import PersistenceError


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Reservation] = {}

    async def save(self, reservation: Reservation) -> Reservation:
        """Save reservation to memory"""
        self._storage[reservation.reservation_id] = reservation
        return reservation

    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        return self._storage.get(reservation_id)

    async def find_all(self) -> List[Reservation]:
        """Find all reservations"""
        return list(self._storage.values())

    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        if reservation.reservation_id in self._storage:
            self._storage[reservation.reservation_id] = reservation
            return reservation
        raise PersistenceError("Reservation not found")

    async def delete(self, reservation_id: UUID) -> bool:
        """Delete reservation"""
        if reservation_id in self._storage:
            del self._storage[reservation_id]
            return True
        return False


class InMemoryHistoryRepository(HistoryRepository):
    """In-memory implementation of HistoryRepository"""

    def __init__(self):
        self._entries: List[HistoryEntry] = []

    async def append(self, entry: HistoryEntry) -> HistoryEntry:
        self._entries.append(entry)
        return entry

    async def find_recent(self, action: Optional[HistoryAction] = None, limit: int = 50) -> List[HistoryEntry]:
        entries = [e for e in reversed(self._entries) if action is None or e.action == action]
        return entries[:limit]

    async def find_by_reservation(self, reservation_id: UUID) -> List[HistoryEntry]:
        return [e for e in self._entries if e.reservation_id == reservation_id]


class InMemoryCustomerRepository(CustomerRepository):
    """In-memory implementation of CustomerRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Customer] = {}

    async def save(self, customer: Customer) -> Customer:
        self._storage[customer.customer_id] = customer
        return customer

    async def find_by_id(self, customer_id: UUID) -> Optional[Customer]:
        return self._storage.get(customer_id)

    async def find_by_email(self, email: str) -> Optional[Customer]:
        wanted = email.strip().lower()
        for customer in self._storage.values():
            if customer.email and customer.email.strip().lower() == wanted:
                return customer
        return None

    async def find_all(self) -> List[Customer]:
        return sorted(self._storage.values(), key=lambda c: c.full_name.lower())

    async def update(self, customer: Customer) -> Customer:
        if customer.customer_id in self._storage:
            self._storage[customer.customer_id] = customer
            return customer
        raise PersistenceError("Customer not found")

    async def delete(self, customer_id: UUID) -> bool:
        if customer_id in self._storage:
            del self._storage[customer_id]
            return True
        return False


class InMemoryCatRepository(CatRepository):
    """In-memory implementation of CatRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Cat] = {}

    async def save(self, cat: Cat) -> Cat:
        self._storage[cat.cat_id] = cat
        return cat

    async def find_by_id(self, cat_id: UUID) -> Optional[Cat]:
        return self._storage.get(cat_id)

    async def find_by_owner(self, owner_id: UUID) -> List[Cat]:
        return [cat for cat in self._storage.values() if cat.owner_id == owner_id]

    async def delete(self, cat_id: UUID) -> bool:
        if cat_id in self._storage:
            del self._storage[cat_id]
            return True
        return False


class InMemoryRoomRateRepository(RoomRateRepository):
    """In-memory implementation of RoomRateRepository"""

    def __init__(self, initial_rates: Optional[Iterable[RoomRate]] = None):
        self._storage: Dict[RoomType, RoomRate] = {}
        for rate in initial_rates or []:
            self._storage[RoomType(rate.room_type)] = rate

    async def save(self, rate: RoomRate) -> RoomRate:
        self._storage[RoomType(rate.room_type)] = rate
        return rate

    async def find_by_room_type(self, room_type: RoomType) -> Optional[RoomRate]:
        return self._storage.get(RoomType(room_type))

    async def find_all(self) -> List[RoomRate]:
        return [self._storage[rt] for rt in RoomType if rt in self._storage]
