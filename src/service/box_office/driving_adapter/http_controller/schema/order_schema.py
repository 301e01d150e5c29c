from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.service.box_office.app.dto.box_office_dto import OrderDocument, RefundOutcome
from src.service.box_office.domain.entity.order_entity import Order
from src.service.box_office.driving_adapter.http_controller.schema.reservation_schema import (
    SeatLineResponse,
)


class OrderCreateRequest(BaseModel):
    reservation_token: str
    payment_intent_id: str
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'reservation_token': '9f2c...64 hex chars',
                'payment_intent_id': 'pi_3PzXYZ',
                'customer_name': 'Jamie Rivera',
                'customer_email': 'parent@example.com',
            }
        }


class OrderResponse(BaseModel):
    id: UUID
    order_number: str
    show_id: UUID
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    status: str
    total_amount_in_cents: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, order: Order) -> 'OrderResponse':
        return cls(
            id=order.id,
            order_number=order.order_number,
            show_id=order.show_id,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            customer_phone=order.customer_phone,
            status=order.status.value,
            total_amount_in_cents=order.total_amount_in_cents,
            created_at=order.created_at,
        )


class ShowSummaryResponse(BaseModel):
    id: UUID
    name: str
    show_date: date
    start_time: Optional[str] = None
    venue_name: Optional[str] = None
    venue_address: Optional[str] = None


class TicketResponse(BaseModel):
    id: UUID
    ticket_code: str
    is_valid: bool
    pdf_url: Optional[str] = None
    scanned_at: Optional[datetime] = None
    scan_count: int = 0
    seat: SeatLineResponse


class OrderDetailResponse(BaseModel):
    order: OrderResponse
    show: ShowSummaryResponse
    tickets: List[TicketResponse]
    notes: Optional[str] = None  # staff only

    @classmethod
    def from_dto(cls, document: OrderDocument, *, include_notes: bool = False) -> 'OrderDetailResponse':
        show = document.show
        return cls(
            order=OrderResponse.from_entity(document.order),
            show=ShowSummaryResponse(
                id=show.id,
                name=show.name,
                show_date=show.show_date,
                start_time=show.start_time,
                venue_name=show.venue_name,
                venue_address=show.venue_address,
            ),
            tickets=[
                TicketResponse(
                    id=item.ticket.id,
                    ticket_code=item.ticket.ticket_code,
                    is_valid=item.ticket.is_valid,
                    pdf_url=item.ticket.pdf_url,
                    scanned_at=item.ticket.scanned_at,
                    scan_count=item.ticket.scan_count,
                    seat=SeatLineResponse.from_dto(item.seat),
                )
                for item in document.tickets
            ],
            notes=document.order.notes if include_notes else None,
        )


class RefundRequest(BaseModel):
    amount_in_cents: int
    reason: str = Field(default='Refund requested by studio', max_length=500)

    class Config:
        json_schema_extra = {'example': {'amount_in_cents': 3000, 'reason': 'Family emergency'}}


class RefundResponse(BaseModel):
    order_id: UUID
    order_number: str
    status: str
    refund_id: str
    refund_status: str
    amount_in_cents: int
    is_full_refund: bool
    seats_released: int

    @classmethod
    def from_dto(cls, outcome: RefundOutcome) -> 'RefundResponse':
        return cls(
            order_id=outcome.order.id,
            order_number=outcome.order.order_number,
            status=outcome.order.status.value,
            refund_id=outcome.refund_id,
            refund_status=outcome.refund_status,
            amount_in_cents=outcome.amount_in_cents,
            is_full_refund=outcome.is_full_refund,
            seats_released=outcome.seats_released,
        )
