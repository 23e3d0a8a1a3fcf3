"""Domain Repository Interfaces

Implementations raise PersistenceError when the backing store fails.
"""
from abc import ABC, abstractmethod
from typing import Optional, List
from uuid import UUID

from nekoha_booking.domain.entities import Reservation, HistoryEntry, Customer, Cat, RoomRate
from nekoha_booking.domain.enums import HistoryAction, RoomType


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate"""

    @abstractmethod
    async def save(self, reservation: Reservation) -> Reservation:
        """Save reservation"""
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Reservation]:
        """Find all reservations"""
        pass

    @abstractmethod
    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        pass

    @abstractmethod
    async def delete(self, reservation_id: UUID) -> bool:
        """Delete reservation"""
        pass


class HistoryRepository(ABC):
    """Append-only sink for HistoryEntry records"""

    @abstractmethod
    async def append(self, entry: HistoryEntry) -> HistoryEntry:
        """Append history entry"""
        pass

    @abstractmethod
    async def find_recent(self, action: Optional[HistoryAction] = None, limit: int = 50) -> List[HistoryEntry]:
        """Find newest entries first, optionally for one action"""
        pass

    @abstractmethod
    async def find_by_reservation(self, reservation_id: UUID) -> List[HistoryEntry]:
        """Find entries for a reservation in the order they were written"""
        pass


class CustomerRepository(ABC):

    @abstractmethod
    async def save(self, customer: Customer) -> Customer:
        pass

    @abstractmethod
    async def find_by_id(self, customer_id: UUID) -> Optional[Customer]:
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Customer]:
        pass

    @abstractmethod
    async def find_all(self) -> List[Customer]:
        pass

    @abstractmethod
    async def update(self, customer: Customer) -> Customer:
        pass

    @abstractmethod
    async def delete(self, customer_id: UUID) -> bool:
        pass


class CatRepository(ABC):

    @abstractmethod
    async def save(self, cat: Cat) -> Cat:
        pass

    @abstractmethod
    async def find_by_id(self, cat_id: UUID) -> Optional[Cat]:
        pass

    @abstractmethod
    async def find_by_owner(self, owner_id: UUID) -> List[Cat]:
        pass

    @abstractmethod
    async def delete(self, cat_id: UUID) -> bool:
        pass


class RoomRateRepository(ABC):

    @abstractmethod
    async def save(self, rate: RoomRate) -> RoomRate:
        pass

    @abstractmethod
    async def find_by_room_type(self, room_type: RoomType) -> Optional[RoomRate]:
        pass

    @abstractmethod
    async def find_all(self) -> List[RoomRate]:
        pass
