from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from src.service.box_office.app.dto.box_office_dto import ReservationSummary, SeatLine


class SeatLineResponse(BaseModel):
    show_seat_id: UUID
    section: str
    row: str
    number: int
    seat_type: str
    price_in_cents: int

    @classmethod
    def from_dto(cls, seat: SeatLine) -> 'SeatLineResponse':
        return cls(
            show_seat_id=seat.show_seat_id,
            section=seat.section,
            row=seat.row,
            number=seat.number,
            seat_type=seat.seat_type,
            price_in_cents=seat.price_in_cents,
        )


class ReservationCreateRequest(BaseModel):
    show_id: UUID
    seat_ids: List[UUID]
    email: str
    phone: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'show_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'seat_ids': [
                    '01936d8f-6a10-7d2e-8f00-000000000001',
                    '01936d8f-6a10-7d2e-8f00-000000000002',
                ],
                'email': 'parent@example.com',
                'phone': '555-0100',
            }
        }


class ReservationResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'token': '9f2c...64 hex chars',
                'show_id': '01936d8f-5e73-7c4e-a9c5-0000000000aa',
                'expires_at': '2025-05-10T18:30:00Z',
                'time_remaining_seconds': 1800,
                'total_amount_in_cents': 3000,
            }
        },
    }

    id: UUID
    token: str
    show_id: UUID
    email: str
    expires_at: datetime
    is_active: bool
    extension_count: int
    time_remaining_seconds: int
    total_amount_in_cents: int
    seats: List[SeatLineResponse]

    @classmethod
    def from_dto(cls, summary: ReservationSummary) -> 'ReservationResponse':
        reservation = summary.reservation
        return cls(
            id=reservation.id,
            token=reservation.token,
            show_id=reservation.show_id,
            email=reservation.email,
            expires_at=reservation.expires_at,
            is_active=reservation.is_active,
            extension_count=reservation.extension_count,
            time_remaining_seconds=summary.time_remaining_seconds,
            total_amount_in_cents=summary.total_amount_in_cents,
            seats=[SeatLineResponse.from_dto(seat) for seat in summary.seats],
        )


class CancelReservationResponse(BaseModel):
    canceled: bool


class ExtendReservationResponse(BaseModel):
    id: UUID
    expires_at: datetime
    extension_count: int
    extensions_remaining: int
    message: str


class PaymentIntentRequest(BaseModel):
    idempotency_key: Optional[str] = None


class PaymentIntentResponse(BaseModel):
    payment_intent_id: str
    client_secret: str
    amount_in_cents: int
    currency: str
    publishable_key: str
