"""Unit tests for the Order entity: creation, refund preconditions and refund bookkeeping."""

from datetime import datetime, timezone
import re

import attrs
import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.service.box_office.domain.entity.order_entity import Order, OrderStatus
from src.service.box_office.domain.exception.box_office_errors import OrderAlreadyRefundedError


NOW = datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc)


def _make_paid_order(**overrides) -> Order:
    params = dict(
        show_id=uuid7(),
        customer_name='  Jamie Rivera ',
        customer_email='Parent@Example.com',
        customer_phone=None,
        payment_intent_id='pi_123',
        total_amount_in_cents=3000,
        session_id='session-a',
        user_id=None,
        notes=None,
        now=NOW,
    )
    params.update(overrides)
    return Order.create_paid(**params)


@pytest.mark.unit
class TestOrderCreate:
    def test_create_paid_order(self) -> None:
        order = _make_paid_order()

        assert order.status == OrderStatus.PAID
        assert order.customer_name == 'Jamie Rivera'
        assert re.fullmatch(r'ORD-20260501-[0-9A-Z]{6}', order.order_number)

    def test_blank_customer_name_is_rejected(self) -> None:
        with pytest.raises(DomainError, match='Customer name is required'):
            _make_paid_order(customer_name='   ')

    def test_matches_email_ignores_case_and_whitespace(self) -> None:
        order = _make_paid_order()

        assert order.matches_email(' parent@example.COM ')
        assert not order.matches_email('other@example.com')


@pytest.mark.unit
class TestOrderRefund:
    @pytest.mark.parametrize('amount', [0, -100, 3001])
    def test_out_of_range_amount_is_rejected(self, amount: int) -> None:
        with pytest.raises(DomainError):
            _make_paid_order().validate_refund(amount_in_cents=amount)

    def test_refunded_order_cannot_be_refunded_again(self) -> None:
        order = _make_paid_order()
        refunded = order.apply_refund(
            amount_in_cents=3000, reason='Sick', refund_id='re_1', now=NOW
        )

        with pytest.raises(OrderAlreadyRefundedError) as exc_info:
            refunded.validate_refund(amount_in_cents=100)
        assert exc_info.value.status_code == 409

    def test_non_paid_order_cannot_be_refunded(self) -> None:
        order = _make_paid_order()
        order.status = OrderStatus.PENDING

        with pytest.raises(DomainError, match='Only paid orders'):
            order.validate_refund(amount_in_cents=100)

    def test_full_refund_flips_status_and_appends_note(self) -> None:
        """
        Given: A paid order with existing notes
        When: Applying a refund of the full total
        Then: Status becomes refunded and a timestamped entry is appended
        """
        order = _make_paid_order(notes='Front row please')

        refunded = order.apply_refund(
            amount_in_cents=3000, reason='Show conflict', refund_id='re_1', now=NOW
        )

        assert refunded.status == OrderStatus.REFUNDED
        assert refunded.notes.startswith('Front row please\n')
        assert '[2026-05-01 18:00 UTC] Full refund of 3000 cents (re_1): Show conflict' in (
            refunded.notes
        )

    def test_partial_refund_keeps_paid_status(self) -> None:
        order = _make_paid_order()

        refunded = order.apply_refund(
            amount_in_cents=1000, reason='Seat swap', refund_id='re_2', now=NOW
        )

        assert refunded.status == OrderStatus.PAID
        assert refunded.notes.startswith('[2026-05-01 18:00 UTC] Partial refund')
        assert order.is_full_refund(amount_in_cents=3000)
        assert not order.is_full_refund(amount_in_cents=1000)
        assert refunded.refunded_amount_in_cents == 1000
        assert refunded.refundable_amount_in_cents == 2000

    def test_partials_cannot_exceed_the_remaining_balance(self) -> None:
        order = attrs.evolve(_make_paid_order(), refunded_amount_in_cents=2500)

        with pytest.raises(DomainError) as exc_info:
            order.validate_refund(amount_in_cents=1000)
        assert 'remaining refundable balance (500 cents)' in exc_info.value.message
        order.validate_refund(amount_in_cents=500)

    def test_partial_completing_the_total_is_full_refund(self) -> None:
        """
        Given: 2000 of a 3000-cent order was already refunded
        When: Applying the last 1000 cents
        Then: The order becomes refunded and the entry reads as a full refund
        """
        order = attrs.evolve(_make_paid_order(), refunded_amount_in_cents=2000)

        refunded = order.apply_refund(
            amount_in_cents=1000, reason='Balance', refund_id='re_3', now=NOW
        )

        assert order.is_full_refund(amount_in_cents=1000)
        assert refunded.status == OrderStatus.REFUNDED
        assert refunded.refunded_amount_in_cents == 3000
        assert 'Full refund of 1000 cents (re_3)' in refunded.notes
