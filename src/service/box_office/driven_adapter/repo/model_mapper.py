"""ORM row <-> domain entity conversion shared by the box office repositories."""

from typing import List, Optional
from uuid import UUID

from src.service.box_office.domain.entity.order_entity import Order, OrderStatus
from src.service.box_office.domain.entity.reservation_entity import Reservation
from src.service.box_office.domain.entity.show_seat_entity import Seat, SeatStatus, Show, ShowSeat
from src.service.box_office.domain.entity.ticket_entity import Ticket
from src.service.box_office.driven_adapter.model.order_model import TicketModel, TicketOrderModel
from src.service.box_office.driven_adapter.model.reservation_model import SeatReservationModel
from src.service.box_office.driven_adapter.model.show_model import (
    ShowModel,
    ShowSeatModel,
    VenueSeatModel,
)


def to_seat(db_seat: VenueSeatModel) -> Seat:
    return Seat(
        id=db_seat.id,
        section=db_seat.section,
        row=db_seat.row_label,
        number=db_seat.seat_number,
        seat_type=db_seat.seat_type,
        is_handicap_accessible=db_seat.is_handicap_accessible,
        base_price_in_cents=db_seat.base_price_in_cents,
    )


def to_show_seat(db_show_seat: ShowSeatModel, db_seat: Optional[VenueSeatModel]) -> ShowSeat:
    return ShowSeat(
        id=db_show_seat.id,
        show_id=db_show_seat.show_id,
        seat_id=db_show_seat.seat_id,
        price_in_cents=db_show_seat.price_in_cents,
        status=SeatStatus(db_show_seat.status),
        reserved_until=db_show_seat.reserved_until,
        reserved_by=db_show_seat.reserved_by,
        seat=to_seat(db_seat) if db_seat is not None else None,
    )


def to_show(db_show: ShowModel) -> Show:
    return Show(
        id=db_show.id,
        name=db_show.name,
        show_date=db_show.show_date,
        start_time=db_show.start_time,
        venue_name=db_show.venue_name,
        venue_address=db_show.venue_address,
    )


def to_reservation(
    db_reservation: SeatReservationModel, show_seat_ids: Optional[List[UUID]] = None
) -> Reservation:
    return Reservation(
        id=db_reservation.id,
        token=db_reservation.reservation_token,
        session_id=db_reservation.session_id,
        show_id=db_reservation.show_id,
        email=db_reservation.email,
        phone=db_reservation.phone,
        expires_at=db_reservation.expires_at,
        is_active=db_reservation.is_active,
        extension_count=db_reservation.extension_count,
        created_at=db_reservation.created_at,
        show_seat_ids=list(show_seat_ids or []),
    )


def to_reservation_model(reservation: Reservation) -> SeatReservationModel:
    return SeatReservationModel(
        id=reservation.id,
        reservation_token=reservation.token,
        session_id=reservation.session_id,
        show_id=reservation.show_id,
        email=reservation.email,
        phone=reservation.phone,
        expires_at=reservation.expires_at,
        is_active=reservation.is_active,
        extension_count=reservation.extension_count,
        created_at=reservation.created_at,
    )


def to_order(db_order: TicketOrderModel) -> Order:
    return Order(
        id=db_order.id,
        order_number=db_order.order_number,
        show_id=db_order.show_id,
        customer_name=db_order.customer_name,
        customer_email=db_order.customer_email,
        customer_phone=db_order.customer_phone,
        payment_intent_id=db_order.payment_intent_id,
        status=OrderStatus(db_order.status),
        total_amount_in_cents=db_order.total_amount_in_cents,
        refunded_amount_in_cents=db_order.refunded_amount_in_cents,
        session_id=db_order.session_id,
        user_id=db_order.user_id,
        notes=db_order.notes,
        created_at=db_order.created_at,
        updated_at=db_order.updated_at,
    )


def to_order_model(order: Order) -> TicketOrderModel:
    return TicketOrderModel(
        id=order.id,
        order_number=order.order_number,
        show_id=order.show_id,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        customer_phone=order.customer_phone,
        payment_intent_id=order.payment_intent_id,
        status=order.status.value,
        total_amount_in_cents=order.total_amount_in_cents,
        refunded_amount_in_cents=order.refunded_amount_in_cents,
        session_id=order.session_id,
        user_id=order.user_id,
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def to_ticket(db_ticket: TicketModel) -> Ticket:
    return Ticket(
        id=db_ticket.id,
        order_id=db_ticket.order_id,
        show_seat_id=db_ticket.show_seat_id,
        ticket_code=db_ticket.ticket_code,
        is_valid=db_ticket.is_valid,
        pdf_url=db_ticket.pdf_url,
        pdf_generated_at=db_ticket.pdf_generated_at,
        scanned_at=db_ticket.scanned_at,
        scan_count=db_ticket.scan_count,
        created_at=db_ticket.created_at,
    )


def to_ticket_model(ticket: Ticket) -> TicketModel:
    return TicketModel(
        id=ticket.id,
        order_id=ticket.order_id,
        show_seat_id=ticket.show_seat_id,
        ticket_code=ticket.ticket_code,
        is_valid=ticket.is_valid,
        pdf_url=ticket.pdf_url,
        pdf_generated_at=ticket.pdf_generated_at,
        scanned_at=ticket.scanned_at,
        scan_count=ticket.scan_count,
        created_at=ticket.created_at,
    )
