from datetime import datetime
from enum import StrEnum
import secrets
import string
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.service.box_office.domain.exception.box_office_errors import OrderAlreadyRefundedError
from src.service.box_office.domain.value_object.contact import normalize_email, normalize_phone


class OrderStatus(StrEnum):
    PENDING = 'pending'
    PAID = 'paid'
    CONFIRMED = 'confirmed'
    REFUNDED = 'refunded'
    CANCELLED = 'cancelled'


_ORDER_NUMBER_ALPHABET = string.digits + string.ascii_uppercase


def generate_order_number(*, now: datetime) -> str:
    suffix = ''.join(secrets.choice(_ORDER_NUMBER_ALPHABET) for _ in range(6))
    return f'ORD-{now:%Y%m%d}-{suffix}'


@attrs.define(kw_only=True)
class Order:
    id: UUID
    order_number: str
    show_id: UUID
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    payment_intent_id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    total_amount_in_cents: int = 0
    refunded_amount_in_cents: int = 0
    session_id: Optional[str] = attrs.field(default=None, repr=False)
    user_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create_paid(
        cls,
        *,
        show_id: UUID,
        customer_name: str,
        customer_email: str,
        customer_phone: Optional[str],
        payment_intent_id: str,
        total_amount_in_cents: int,
        session_id: str,
        user_id: Optional[str],
        notes: Optional[str],
        now: datetime,
    ) -> 'Order':
        customer_name = (customer_name or '').strip()
        if not customer_name:
            raise DomainError('Customer name is required')
        if not payment_intent_id:
            raise DomainError('Payment reference is required')

        return cls(
            id=uuid7(),
            order_number=generate_order_number(now=now),
            show_id=show_id,
            customer_name=customer_name,
            customer_email=normalize_email(customer_email),
            customer_phone=normalize_phone(customer_phone),
            payment_intent_id=payment_intent_id,
            status=OrderStatus.PAID,
            total_amount_in_cents=total_amount_in_cents,
            session_id=session_id,
            user_id=user_id,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

    def validate_refund(self, *, amount_in_cents: int) -> None:
        """
        All refund preconditions; checked before the payment provider is contacted.

        Raises:
            OrderAlreadyRefundedError: status is already refunded (409)
            DomainError: not paid, non-positive / excessive amount, or no payment reference (400)
        """
        if self.status == OrderStatus.REFUNDED:
            raise OrderAlreadyRefundedError()
        if self.status != OrderStatus.PAID:
            raise DomainError(f'Only paid orders can be refunded (current status: {self.status})')
        if amount_in_cents <= 0:
            raise DomainError('Refund amount must be positive')
        if amount_in_cents > self.total_amount_in_cents:
            raise DomainError(
                f'Refund amount ({amount_in_cents} cents) exceeds order total '
                f'({self.total_amount_in_cents} cents)'
            )
        if amount_in_cents > self.refundable_amount_in_cents:
            raise DomainError(
                f'Refund amount ({amount_in_cents} cents) exceeds the remaining refundable '
                f'balance ({self.refundable_amount_in_cents} cents)'
            )
        if not self.payment_intent_id:
            raise DomainError('Order has no payment reference to refund')

    @property
    def refundable_amount_in_cents(self) -> int:
        return self.total_amount_in_cents - self.refunded_amount_in_cents

    def is_full_refund(self, *, amount_in_cents: int) -> bool:
        """True when this refund brings the refunded total up to the order total."""
        return self.refunded_amount_in_cents + amount_in_cents >= self.total_amount_in_cents

    def refund_note(
        self, *, amount_in_cents: int, reason: str, refund_id: str, now: datetime
    ) -> str:
        full = self.is_full_refund(amount_in_cents=amount_in_cents)
        return (
            f'[{now:%Y-%m-%d %H:%M} UTC] {"Full" if full else "Partial"} refund of '
            f'{amount_in_cents} cents ({refund_id}): {reason}'
        )

    def apply_refund(
        self, *, amount_in_cents: int, reason: str, refund_id: str, now: datetime
    ) -> 'Order':
        full = self.is_full_refund(amount_in_cents=amount_in_cents)
        entry = self.refund_note(
            amount_in_cents=amount_in_cents, reason=reason, refund_id=refund_id, now=now
        )
        return attrs.evolve(
            self,
            status=OrderStatus.REFUNDED if full else self.status,
            refunded_amount_in_cents=self.refunded_amount_in_cents + amount_in_cents,
            notes=f'{self.notes}\n{entry}' if self.notes else entry,
            updated_at=now,
        )

    def matches_email(self, email: str) -> bool:
        return self.customer_email.strip().lower() == (email or '').strip().lower()
