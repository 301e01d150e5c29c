from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.command.create_order_use_case import CreateOrderUseCase
from src.service.box_office.app.command.refund_order_use_case import RefundOrderUseCase
from src.service.box_office.app.query.lookup_order_use_case import LookupOrderUseCase
from src.service.box_office.driving_adapter.http_controller.auth.jwt_auth import CurrentUser
from src.service.box_office.driving_adapter.http_controller.auth.role_auth import (
    get_optional_user,
    get_session_id,
    require_admin,
    require_admin_or_staff,
)
from src.service.box_office.driving_adapter.http_controller.schema.order_schema import (
    OrderCreateRequest,
    OrderDetailResponse,
    OrderResponse,
    RefundRequest,
    RefundResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_order(
    request: OrderCreateRequest,
    session_id: str = Depends(get_session_id),
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    use_case: CreateOrderUseCase = Depends(CreateOrderUseCase.depends),
) -> OrderResponse:
    with tracer.start_as_current_span('controller.create_order') as span:
        span.set_attribute('payment_intent_id', request.payment_intent_id)

        order = await use_case.create_order(
            token=request.reservation_token,
            session_id=session_id,
            payment_reference=request.payment_intent_id,
            customer_name=request.customer_name,
            customer_email=request.customer_email,
            customer_phone=request.customer_phone,
            notes=request.notes,
            user_id=current_user.id if current_user else None,
        )
        span.set_attribute('order.id', str(order.id))
        return OrderResponse.from_entity(order)


# Must stay above '/{order_id}'
@router.get('/lookup')
@Logger.io
async def lookup_order(
    order_number: str = Query(..., min_length=1),
    email: str = Query(..., min_length=1),
    use_case: LookupOrderUseCase = Depends(LookupOrderUseCase.depends),
) -> OrderDetailResponse:
    document = await use_case.lookup_order(order_number=order_number, email=email)
    return OrderDetailResponse.from_dto(document)


@router.get('/{order_id}')
@Logger.io
async def get_order_detail(
    order_id: UUID,
    current_user: CurrentUser = Depends(require_admin_or_staff),
    use_case: LookupOrderUseCase = Depends(LookupOrderUseCase.depends),
) -> OrderDetailResponse:
    document = await use_case.get_order_detail(order_id=order_id)
    return OrderDetailResponse.from_dto(document, include_notes=True)


@router.post('/{order_id}/refund')
@Logger.io
async def refund_order(
    order_id: UUID,
    request: RefundRequest,
    current_user: CurrentUser = Depends(require_admin),
    use_case: RefundOrderUseCase = Depends(RefundOrderUseCase.depends),
) -> RefundResponse:
    outcome = await use_case.refund_order(
        order_id=order_id,
        amount_in_cents=request.amount_in_cents,
        reason=f'{request.reason} (by {current_user.email or current_user.id})',
    )
    return RefundResponse.from_dto(outcome)
