from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.service.box_office.domain.entity.reservation_entity import Reservation


class IReservationCommandRepo(ABC):
    """
    Repository interface for seat holds.

    `deactivate_if_active` is the compare-and-swap that makes checkout and
    cancellation mutually exclusive for one reservation.
    """

    @abstractmethod
    async def create(self, *, reservation: Reservation) -> Reservation:
        """Insert the reservation row only; seat links are added separately."""
        pass

    @abstractmethod
    async def add_seats(self, *, reservation_id: UUID, show_seat_ids: List[UUID]) -> None:
        pass

    @abstractmethod
    async def delete(self, *, reservation_id: UUID) -> None:
        """Compensating delete for a hold that never took effect (links included)."""
        pass

    @abstractmethod
    async def get_by_token(self, *, token: str) -> Optional[Reservation]:
        """
        Returns:
            Reservation with `show_seat_ids` populated, or None
        """
        pass

    @abstractmethod
    async def get_by_id(self, *, reservation_id: UUID) -> Optional[Reservation]:
        pass

    @abstractmethod
    async def deactivate_if_active(
        self, *, reservation_id: UUID, unexpired_at: Optional[datetime] = None
    ) -> bool:
        """
        is_active true -> false.

        Args:
            reservation_id: Reservation to deactivate
            unexpired_at: When given, also require expires_at >= this instant (checkout)

        Returns:
            True only for the single caller that flipped the flag
        """
        pass

    @abstractmethod
    async def reactivate(self, *, reservation_id: UUID) -> bool:
        """Undo `deactivate_if_active` when checkout has to be compensated."""
        pass

    @abstractmethod
    async def extend_if_active(
        self,
        *,
        reservation_id: UUID,
        expected_extension_count: int,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        """
        Push expiry forward if still active, unexpired and not extended concurrently.
        """
        pass

    @abstractmethod
    async def list_expired_active(self, *, now: datetime, limit: int) -> List[Reservation]:
        pass
