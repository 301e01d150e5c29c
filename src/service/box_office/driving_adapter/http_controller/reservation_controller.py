from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.command.cancel_reservation_use_case import (
    CancelReservationUseCase,
)
from src.service.box_office.app.command.create_payment_intent_use_case import (
    CreatePaymentIntentUseCase,
)
from src.service.box_office.app.command.create_reservation_use_case import (
    CreateReservationUseCase,
)
from src.service.box_office.app.command.extend_reservation_use_case import (
    ExtendReservationUseCase,
)
from src.service.box_office.app.query.get_reservation_use_case import GetReservationUseCase
from src.service.box_office.driving_adapter.http_controller.auth.role_auth import get_session_id
from src.service.box_office.driving_adapter.http_controller.schema.reservation_schema import (
    CancelReservationResponse,
    ExtendReservationResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    ReservationCreateRequest,
    ReservationResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_reservation(
    request: ReservationCreateRequest,
    session_id: str = Depends(get_session_id),
    use_case: CreateReservationUseCase = Depends(CreateReservationUseCase.depends),
) -> ReservationResponse:
    with tracer.start_as_current_span('controller.create_reservation') as span:
        span.set_attribute('show_id', str(request.show_id))
        span.set_attribute('seat_count', len(request.seat_ids))

        summary = await use_case.create_reservation(
            session_id=session_id,
            show_id=request.show_id,
            show_seat_ids=request.seat_ids,
            email=request.email,
            phone=request.phone,
        )
        return ReservationResponse.from_dto(summary)


@router.get('/{token}')
@Logger.io
async def get_reservation(
    token: str,
    use_case: GetReservationUseCase = Depends(GetReservationUseCase.depends),
) -> ReservationResponse:
    return ReservationResponse.from_dto(await use_case.get_reservation(token=token))


@router.delete('/{token}')
@Logger.io
async def cancel_reservation(
    token: str,
    use_case: CancelReservationUseCase = Depends(CancelReservationUseCase.depends),
) -> CancelReservationResponse:
    return CancelReservationResponse(canceled=await use_case.cancel_reservation(token=token))


@router.post('/{token}/extend')
@Logger.io
async def extend_reservation(
    token: str,
    session_id: str = Depends(get_session_id),
    use_case: ExtendReservationUseCase = Depends(ExtendReservationUseCase.depends),
) -> ExtendReservationResponse:
    reservation = await use_case.extend_reservation(token=token, session_id=session_id)
    remaining = use_case.extensions_remaining(reservation)
    return ExtendReservationResponse(
        id=reservation.id,
        expires_at=reservation.expires_at,
        extension_count=reservation.extension_count,
        extensions_remaining=remaining,
        message=(
            f'Reservation extended by {use_case.extension_minutes} minutes. '
            f'{remaining} extension(s) remaining.'
            if remaining
            else f'Reservation extended by {use_case.extension_minutes} minutes. '
            f'This was your last extension.'
        ),
    )


@router.delete('/session/{reservation_id}')
@Logger.io
async def cancel_session_reservation(
    reservation_id: UUID,
    session_id: str = Depends(get_session_id),
    use_case: CancelReservationUseCase = Depends(CancelReservationUseCase.depends),
) -> CancelReservationResponse:
    canceled = await use_case.cancel_session_reservation(
        reservation_id=reservation_id, session_id=session_id
    )
    return CancelReservationResponse(canceled=canceled)


@router.post('/{token}/payment-intent', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_payment_intent(
    token: str,
    request: Optional[PaymentIntentRequest] = None,
    session_id: str = Depends(get_session_id),
    use_case: CreatePaymentIntentUseCase = Depends(CreatePaymentIntentUseCase.depends),
) -> PaymentIntentResponse:
    with tracer.start_as_current_span('controller.create_payment_intent'):
        intent = await use_case.create_payment_intent(
            token=token,
            session_id=session_id,
            idempotency_key=request.idempotency_key if request else None,
        )
        return PaymentIntentResponse(
            payment_intent_id=intent.id,
            client_secret=intent.client_secret,
            amount_in_cents=intent.amount_in_cents,
            currency=intent.currency,
            publishable_key=settings.STRIPE_PUBLISHABLE_KEY,
        )
