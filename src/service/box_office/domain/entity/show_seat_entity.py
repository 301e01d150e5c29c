from datetime import date, datetime
from enum import StrEnum
from typing import Iterable, List, Optional
from uuid import UUID

import attrs


class SeatStatus(StrEnum):
    AVAILABLE = 'available'
    RESERVED = 'reserved'
    SOLD = 'sold'


@attrs.define(frozen=True)
class Seat:
    """Venue seat, fixed once a show is scheduled."""

    id: UUID
    section: str
    row: str
    number: int
    seat_type: str = 'standard'
    is_handicap_accessible: bool = False
    base_price_in_cents: int = 0

    @property
    def label(self) -> str:
        return f'{self.section} Row {self.row} Seat {self.number}'


@attrs.define(frozen=True)
class Show:
    id: UUID
    name: str
    show_date: date
    start_time: Optional[str] = None  # 'HH:MM', venue local time
    venue_name: Optional[str] = None
    venue_address: Optional[str] = None


@attrs.define
class ShowSeat:
    """
    Per-show state of one seat.

    reserved  => reserved_until and reserved_by are set
    available => both are None
    sold      => both are None and a valid Ticket references this row
    """

    id: UUID
    show_id: UUID
    seat_id: UUID
    price_in_cents: int
    status: SeatStatus = SeatStatus.AVAILABLE
    reserved_until: Optional[datetime] = None
    reserved_by: Optional[UUID] = None
    seat: Optional[Seat] = None

    def is_hold_expired(self, *, now: datetime) -> bool:
        return (
            self.status == SeatStatus.RESERVED
            and self.reserved_until is not None
            and self.reserved_until < now
        )

    def is_held_by(self, *, reservation_id: UUID, now: datetime) -> bool:
        return (
            self.status == SeatStatus.RESERVED
            and self.reserved_by == reservation_id
            and self.reserved_until is not None
            and self.reserved_until >= now
        )

    def is_free(self, *, now: datetime) -> bool:
        return self.status == SeatStatus.AVAILABLE or self.is_hold_expired(now=now)

    def effective_status(self, *, now: datetime) -> SeatStatus:
        """Lapsed holds read as available even before the sweeper has released them."""
        return SeatStatus.AVAILABLE if self.is_hold_expired(now=now) else self.status


def unheld_seat_ids(
    show_seats: Iterable[ShowSeat], *, reservation_id: UUID, now: datetime
) -> List[UUID]:
    """Seats that are no longer reserved by this reservation (lapsed or taken since)."""
    return [
        show_seat.id
        for show_seat in show_seats
        if not show_seat.is_held_by(reservation_id=reservation_id, now=now)
    ]
