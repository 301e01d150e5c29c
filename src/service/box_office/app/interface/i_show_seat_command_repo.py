"""
Show Seat Command Repository Interface

Every state change on a show seat is a conditional update keyed on the seat's
expected prior state. Implementations return the number of rows actually
changed so callers can detect lost races; they never overwrite unconditionally.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List
from uuid import UUID

from src.service.box_office.domain.entity.show_seat_entity import ShowSeat


class IShowSeatCommandRepo(ABC):
    @abstractmethod
    async def get_by_ids(self, *, show_seat_ids: List[UUID]) -> List[ShowSeat]:
        """
        Load show seats (with venue seat attached). Missing ids are simply absent.
        """
        pass

    @abstractmethod
    async def reserve_seats(
        self,
        *,
        show_id: UUID,
        show_seat_ids: List[UUID],
        reservation_id: UUID,
        reserved_until: datetime,
        now: datetime,
    ) -> int:
        """
        available -> reserved (a lapsed hold counts as available), in one statement.

        Returns:
            Number of seats claimed. Fewer than requested means another hold won the
            race; the caller must release whatever this reservation did claim.
        """
        pass

    @abstractmethod
    async def release_reserved_seats(self, *, reservation_id: UUID) -> int:
        """reserved -> available for seats still held by this reservation"""
        pass

    @abstractmethod
    async def extend_reserved_seats(
        self, *, reservation_id: UUID, reserved_until: datetime
    ) -> int:
        pass

    @abstractmethod
    async def mark_seats_sold(
        self, *, reservation_id: UUID, show_seat_ids: List[UUID]
    ) -> List[UUID]:
        """
        reserved (by this reservation) -> sold

        Returns:
            Ids of the seats actually sold. A short list means some seat is no
            longer held by this reservation.
        """
        pass

    @abstractmethod
    async def revert_sold_seats(
        self, *, show_seat_ids: List[UUID], reservation_id: UUID, reserved_until: datetime
    ) -> int:
        """sold -> reserved again, undoing a sale whose order could not be written"""
        pass

    @abstractmethod
    async def release_sold_seats(self, *, show_seat_ids: List[UUID]) -> int:
        """sold -> available (full refund only)"""
        pass

    @abstractmethod
    async def release_lapsed_holds(self, *, now: datetime) -> int:
        """reserved with reserved_until < now -> available (housekeeping)"""
        pass
