from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.service.box_office.domain.value_object.ticket_code import generate_ticket_code


@attrs.define(kw_only=True)
class Ticket:
    id: UUID
    order_id: UUID
    show_seat_id: UUID
    ticket_code: str
    is_valid: bool = True
    pdf_url: Optional[str] = None
    pdf_generated_at: Optional[datetime] = None
    scanned_at: Optional[datetime] = None
    scan_count: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def create(cls, *, order_id: UUID, show_seat_id: UUID, now: datetime) -> 'Ticket':
        return cls(
            id=uuid7(),
            order_id=order_id,
            show_seat_id=show_seat_id,
            ticket_code=generate_ticket_code(now=now),
            created_at=now,
        )

    def has_fresh_pdf(self, *, now: datetime, max_age: timedelta) -> bool:
        if not self.pdf_url or self.pdf_generated_at is None:
            return False
        return now - self.pdf_generated_at < max_age

    def validate_scannable(self) -> None:
        if not self.is_valid:
            raise DomainError('Ticket is no longer valid')
