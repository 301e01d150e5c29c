from abc import ABC, abstractmethod
from typing import Dict, Optional

import attrs


PAYMENT_SUCCEEDED = 'succeeded'


@attrs.define(frozen=True)
class PaymentDetails:
    reference: str
    status: str
    amount_in_cents: int
    currency: str = 'usd'

    @property
    def is_succeeded(self) -> bool:
        return self.status == PAYMENT_SUCCEEDED


@attrs.define(frozen=True)
class RefundResult:
    id: str
    status: str
    amount_in_cents: int

    @property
    def is_succeeded(self) -> bool:
        return self.status == PAYMENT_SUCCEEDED


@attrs.define(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str
    status: str
    amount_in_cents: int
    currency: str = 'usd'


class IPaymentGateway(ABC):
    """
    Payment provider boundary.

    Provider failures (network, auth, unknown reference) surface as
    UpstreamServiceError, never as provider SDK exceptions.
    """

    @abstractmethod
    async def retrieve_payment(self, *, reference: str) -> PaymentDetails:
        pass

    @abstractmethod
    async def create_refund(
        self,
        *,
        reference: str,
        amount_in_cents: int,
        reason: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> RefundResult:
        pass

    @abstractmethod
    async def create_payment_intent(
        self,
        *,
        amount_in_cents: int,
        currency: str,
        metadata: Optional[Dict[str, str]] = None,
        idempotency_key: Optional[str] = None,
        receipt_email: Optional[str] = None,
    ) -> PaymentIntent:
        """
        Create a charge the client confirms out of band.

        The same idempotency key returns the same intent instead of a second charge.
        """
        pass
