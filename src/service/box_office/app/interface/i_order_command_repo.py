from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.service.box_office.domain.entity.order_entity import Order, OrderStatus


class IOrderCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, order: Order) -> Order:
        """
        Raises:
            PaymentAlreadyUsedError: another order already carries this payment reference
        """
        pass

    @abstractmethod
    async def delete(self, *, order_id: UUID) -> None:
        """Compensating delete used when ticket insertion fails (tickets removed too)."""
        pass

    @abstractmethod
    async def get_by_id(self, *, order_id: UUID) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_by_order_number(self, *, order_number: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_by_payment_intent_id(self, *, payment_intent_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def claim_refund_amount(
        self, *, order_id: UUID, expected_refunded_in_cents: int, amount_in_cents: int
    ) -> bool:
        """
        Add `amount_in_cents` to the refunded total before the provider is called.

        Only succeeds while the order is still paid, nobody else has refunded since
        `expected_refunded_in_cents` was read, and the total is not exceeded.
        """
        pass

    @abstractmethod
    async def release_refund_amount(self, *, order_id: UUID, amount_in_cents: int) -> bool:
        """Give back a claimed amount when the provider refund did not go through."""
        pass

    @abstractmethod
    async def update_refund_state(
        self, *, order: Order, note: str, expected_status: OrderStatus
    ) -> Optional[Order]:
        """
        Append the refund note; when the refund moves `order.status` away from
        `expected_status`, only do so if the row still has `expected_status`.

        Returns:
            The updated order, or None if the status changed underneath us
        """
        pass
