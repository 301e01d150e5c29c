from typing import Dict, Optional

import anyio.to_thread
import stripe

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import UpstreamServiceError
from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.interface.i_payment_gateway import (
    IPaymentGateway,
    PaymentDetails,
    PaymentIntent,
    RefundResult,
)


class StripePaymentGateway(IPaymentGateway):
    """
    Stripe PaymentIntents / Refunds.

    The SDK is blocking, so each call runs on a worker thread; the API key is
    passed per request instead of mutating the global `stripe.api_key`.
    """

    def __init__(self, *, api_key: Optional[str] = None) -> None:
        self._api_key = api_key or settings.STRIPE_SECRET_KEY.get_secret_value()

    @Logger.io
    async def retrieve_payment(self, *, reference: str) -> PaymentDetails:
        try:
            intent = await anyio.to_thread.run_sync(
                lambda: stripe.PaymentIntent.retrieve(reference, api_key=self._api_key)
            )
        except stripe.StripeError as e:
            Logger.base.error(f'💳 [STRIPE] Failed to retrieve payment {reference}: {e}')
            raise UpstreamServiceError(
                getattr(e, 'user_message', None) or 'Failed to verify payment with provider'
            ) from e

        return PaymentDetails(
            reference=intent['id'],
            status=intent['status'],
            amount_in_cents=int(intent['amount']),
            currency=intent.get('currency') or 'usd',
        )

    @Logger.io
    async def create_refund(
        self,
        *,
        reference: str,
        amount_in_cents: int,
        reason: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> RefundResult:
        try:
            refund = await anyio.to_thread.run_sync(
                lambda: stripe.Refund.create(
                    payment_intent=reference,
                    amount=amount_in_cents,
                    # Stripe only accepts an enum here; the free-text reason travels as metadata
                    reason='requested_by_customer',
                    metadata={**(metadata or {}), 'refund_reason': reason[:500]},
                    api_key=self._api_key,
                )
            )
        except stripe.StripeError as e:
            Logger.base.error(f'💳 [STRIPE] Refund failed for {reference}: {e}')
            raise UpstreamServiceError(
                getattr(e, 'user_message', None) or 'Refund processing failed'
            ) from e

        return RefundResult(
            id=refund['id'],
            status=refund['status'],
            amount_in_cents=int(refund['amount']),
        )

    @Logger.io
    async def create_payment_intent(
        self,
        *,
        amount_in_cents: int,
        currency: str,
        metadata: Optional[Dict[str, str]] = None,
        idempotency_key: Optional[str] = None,
        receipt_email: Optional[str] = None,
    ) -> PaymentIntent:
        try:
            intent = await anyio.to_thread.run_sync(
                lambda: stripe.PaymentIntent.create(
                    amount=amount_in_cents,
                    currency=currency,
                    metadata=metadata or {},
                    receipt_email=receipt_email,
                    automatic_payment_methods={'enabled': True},
                    idempotency_key=idempotency_key,
                    api_key=self._api_key,
                )
            )
        except stripe.StripeError as e:
            Logger.base.error(f'💳 [STRIPE] Failed to create payment intent: {e}')
            raise UpstreamServiceError(
                getattr(e, 'user_message', None) or 'Failed to start payment with provider'
            ) from e

        return PaymentIntent(
            id=intent['id'],
            client_secret=intent['client_secret'],
            status=intent['status'],
            amount_in_cents=int(intent['amount']),
            currency=intent.get('currency') or currency,
        )
