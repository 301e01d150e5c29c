from typing import Iterable
from uuid import UUID

from src.platform.exception.exceptions import (
    ConflictError,
    CustomBaseError,
    DomainError,
    InternalInconsistencyError,
    TooManyRequestsError,
    UpstreamServiceError,
)


class SeatUnavailableError(ConflictError):
    def __init__(self, show_seat_ids: Iterable[UUID] = ()) -> None:
        super().__init__(
            'One or more selected seats were just taken by another customer. '
            'Please choose different seats.'
        )
        self.show_seat_ids = list(show_seat_ids)


class ReservationExpiredError(CustomBaseError):
    """Hold timed out. 400 at checkout, 410 when reading/extending the hold."""

    def __init__(self, status_code: int = 400) -> None:
        super().__init__(
            'Your seat hold has expired. Please select your seats again.', status_code
        )


class ReservationInactiveError(DomainError):
    def __init__(self) -> None:
        super().__init__('This reservation has already been completed or cancelled')


class ReservationCreateFailedError(InternalInconsistencyError):
    def __init__(self) -> None:
        super().__init__('Failed to create reservation. Please try again.')


class MaxExtensionsReachedError(TooManyRequestsError):
    def __init__(self, max_extensions: int) -> None:
        super().__init__(f'Maximum of {max_extensions} extensions reached for this reservation')


class PaymentNotSucceededError(DomainError):
    def __init__(self, payment_status: str) -> None:
        super().__init__(f'Payment has not succeeded (status: {payment_status})')
        self.payment_status = payment_status


class AmountMismatchError(DomainError):
    def __init__(self, *, paid_in_cents: int, expected_in_cents: int) -> None:
        super().__init__(
            f'Payment amount ({paid_in_cents} cents) does not match '
            f'the current price of the reserved seats ({expected_in_cents} cents)'
        )
        self.paid_in_cents = paid_in_cents
        self.expected_in_cents = expected_in_cents


class OrderAlreadyRefundedError(ConflictError):
    def __init__(self) -> None:
        super().__init__('Order has already been refunded')


class RefundFailedError(UpstreamServiceError):
    def __init__(self, refund_status: str) -> None:
        super().__init__(f'Refund processing failed (status: {refund_status})')
        self.refund_status = refund_status


class PaymentAlreadyUsedError(ConflictError):
    def __init__(self) -> None:
        super().__init__(
            'This payment has already been used for another order. '
            'Please start a new checkout.'
        )


class SeatHoldLostError(ConflictError):
    """A seat slipped out of this reservation's hold (lapsed and re-claimed by someone else)."""

    def __init__(self, show_seat_ids: Iterable[UUID] = ()) -> None:
        super().__init__(
            'Your hold on one or more seats has lapsed and they are no longer available. '
            'Please select your seats again.'
        )
        self.show_seat_ids = list(show_seat_ids)


class RefundInProgressError(ConflictError):
    def __init__(self) -> None:
        super().__init__('Another refund for this order is being processed. Please try again.')
