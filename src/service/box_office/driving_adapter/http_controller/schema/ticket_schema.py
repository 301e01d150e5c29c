from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from src.service.box_office.app.dto.box_office_dto import TicketVerification
from src.service.box_office.driving_adapter.http_controller.schema.reservation_schema import (
    SeatLineResponse,
)


class GeneratePdfRequest(BaseModel):
    ticket_id: UUID


class GeneratePdfResponse(BaseModel):
    pdf_url: str


class ResendEmailRequest(BaseModel):
    order_id: UUID
    email: Optional[str] = None


class ResendEmailResponse(BaseModel):
    success: bool
    message: str


class VerifyTicketRequest(BaseModel):
    ticket_code: str
    mark_scanned: bool = False

    class Config:
        json_schema_extra = {
            'example': {'ticket_code': 'TKT-7G2KQ9X0ZP4M-1767225600000', 'mark_scanned': True}
        }


class VerifyTicketResponse(BaseModel):
    valid: bool
    message: str
    ticket_id: UUID
    ticket_code: str
    order_number: str
    customer_name: str
    show_name: str
    seat: SeatLineResponse
    scanned_at: Optional[datetime] = None
    scan_count: int

    @classmethod
    def from_dto(cls, verification: TicketVerification) -> 'VerifyTicketResponse':
        ticket = verification.ticket
        if not ticket.is_valid:
            message = 'Ticket has been invalidated'
        elif verification.scanned_now and ticket.scan_count > 1:
            message = f'Valid ticket, already scanned {ticket.scan_count - 1} time(s) before'
        elif verification.scanned_now:
            message = 'Valid ticket, admitted'
        else:
            message = 'Valid ticket'
        return cls(
            valid=ticket.is_valid,
            message=message,
            ticket_id=ticket.id,
            ticket_code=ticket.ticket_code,
            order_number=verification.order_number,
            customer_name=verification.customer_name,
            show_name=verification.show_name,
            seat=SeatLineResponse.from_dto(verification.seat),
            scanned_at=ticket.scanned_at,
            scan_count=ticket.scan_count,
        )
