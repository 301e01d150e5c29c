"""Read models handed from use cases to controllers and to the artifact renderers."""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

import attrs

from src.service.box_office.domain.entity.order_entity import Order
from src.service.box_office.domain.entity.reservation_entity import Reservation
from src.service.box_office.domain.entity.show_seat_entity import SeatStatus, Show, ShowSeat
from src.service.box_office.domain.entity.ticket_entity import Ticket


@attrs.define(frozen=True)
class SeatLine:
    show_seat_id: UUID
    section: str
    row: str
    number: int
    price_in_cents: int
    seat_type: str = 'standard'

    @classmethod
    def from_show_seat(cls, show_seat: ShowSeat) -> 'SeatLine':
        seat = show_seat.seat
        return cls(
            show_seat_id=show_seat.id,
            section=seat.section if seat else '',
            row=seat.row if seat else '',
            number=seat.number if seat else 0,
            price_in_cents=show_seat.price_in_cents,
            seat_type=seat.seat_type if seat else 'standard',
        )


@attrs.define(frozen=True)
class ReservationSummary:
    reservation: Reservation
    seats: List[SeatLine]
    total_amount_in_cents: int
    time_remaining_seconds: int


@attrs.define(frozen=True)
class TicketDocument:
    """Everything printed on one ticket PDF."""

    ticket: Ticket
    seat: SeatLine
    show: Show
    order_number: str
    customer_name: str


@attrs.define(frozen=True)
class OrderDocument:
    order: Order
    show: Show
    tickets: List[TicketDocument]


@attrs.define(frozen=True)
class RefundOutcome:
    order: Order
    refund_id: str
    refund_status: str
    amount_in_cents: int
    is_full_refund: bool
    seats_released: int


@attrs.define(frozen=True)
class TicketVerification:
    ticket: Ticket
    order_number: str
    customer_name: str
    show_name: str
    seat: SeatLine
    scanned_now: bool


@attrs.define(frozen=True)
class SeatMapEntry:
    show_seat_id: UUID
    seat: SeatLine
    status: SeatStatus
    is_handicap_accessible: bool


@attrs.define(frozen=True)
class SectionStats:
    available: int = 0
    reserved: int = 0
    sold: int = 0

    @property
    def total(self) -> int:
        return self.available + self.reserved + self.sold


@attrs.define(frozen=True)
class SeatMap:
    show: Show
    seats: List[SeatMapEntry]
    sections: Dict[str, SectionStats]
    generated_at: Optional[datetime] = None
