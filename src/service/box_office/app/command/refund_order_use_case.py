from datetime import datetime, timezone
from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import InternalInconsistencyError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.box_office.app.command.send_refund_notification_use_case import (
    SendRefundNotificationUseCase,
)
from src.service.box_office.app.dto.box_office_dto import RefundOutcome
from src.service.box_office.app.interface.i_background_task_runner import IBackgroundTaskRunner
from src.service.box_office.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.box_office.app.interface.i_payment_gateway import IPaymentGateway
from src.service.box_office.app.interface.i_show_seat_command_repo import IShowSeatCommandRepo
from src.service.box_office.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.box_office.domain.entity.order_entity import Order, OrderStatus
from src.service.box_office.domain.exception.box_office_errors import (
    RefundFailedError,
    RefundInProgressError,
)


class RefundOrderUseCase:
    """
    Admin refund, full or partial.

    Every precondition is checked before the provider is called, so a rejected
    request never moves money. A full refund invalidates the tickets and returns
    their seats to sale; a partial refund leaves tickets and seats untouched.
    """

    def __init__(
        self,
        *,
        order_command_repo: IOrderCommandRepo,
        ticket_command_repo: ITicketCommandRepo,
        show_seat_command_repo: IShowSeatCommandRepo,
        payment_gateway: IPaymentGateway,
        task_runner: IBackgroundTaskRunner,
        refund_notification_use_case: SendRefundNotificationUseCase,
    ) -> None:
        self.order_command_repo = order_command_repo
        self.ticket_command_repo = ticket_command_repo
        self.show_seat_command_repo = show_seat_command_repo
        self.payment_gateway = payment_gateway
        self.task_runner = task_runner
        self.refund_notification_use_case = refund_notification_use_case

    @classmethod
    @inject
    def depends(
        cls,
        order_command_repo: IOrderCommandRepo = Depends(Provide[Container.order_command_repo]),
        ticket_command_repo: ITicketCommandRepo = Depends(Provide[Container.ticket_command_repo]),
        show_seat_command_repo: IShowSeatCommandRepo = Depends(
            Provide[Container.show_seat_command_repo]
        ),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        task_runner: IBackgroundTaskRunner = Depends(Provide[Container.task_runner]),
        refund_notification_use_case: SendRefundNotificationUseCase = Depends(
            SendRefundNotificationUseCase.depends
        ),
    ) -> Self:
        return cls(
            order_command_repo=order_command_repo,
            ticket_command_repo=ticket_command_repo,
            show_seat_command_repo=show_seat_command_repo,
            payment_gateway=payment_gateway,
            task_runner=task_runner,
            refund_notification_use_case=refund_notification_use_case,
        )

    @Logger.io
    async def refund_order(
        self, *, order_id: UUID, amount_in_cents: int, reason: str
    ) -> RefundOutcome:
        order = await self.order_command_repo.get_by_id(order_id=order_id)
        if not order:
            raise NotFoundError('Order not found')
        order.validate_refund(amount_in_cents=amount_in_cents)

        # Claim the amount first: two concurrent refunds cannot both reach the provider
        if not await self.order_command_repo.claim_refund_amount(
            order_id=order.id,
            expected_refunded_in_cents=order.refunded_amount_in_cents,
            amount_in_cents=amount_in_cents,
        ):
            current = await self.order_command_repo.get_by_id(order_id=order.id)
            if current and current.status != OrderStatus.PAID:
                current.validate_refund(amount_in_cents=amount_in_cents)
            raise RefundInProgressError()

        try:
            refund = await self.payment_gateway.create_refund(
                reference=order.payment_intent_id,  # type: ignore[arg-type]
                amount_in_cents=amount_in_cents,
                reason=reason,
                metadata={'order_id': str(order.id), 'order_number': order.order_number},
            )
            if not refund.is_succeeded:
                raise RefundFailedError(refund.status)
        except Exception:
            await self._release_claim(order=order, amount_in_cents=amount_in_cents)
            raise

        is_full_refund = order.is_full_refund(amount_in_cents=amount_in_cents)
        now = datetime.now(timezone.utc)
        updated = await self.order_command_repo.update_refund_state(
            order=order.apply_refund(
                amount_in_cents=amount_in_cents, reason=reason, refund_id=refund.id, now=now
            ),
            note=order.refund_note(
                amount_in_cents=amount_in_cents, reason=reason, refund_id=refund.id, now=now
            ),
            expected_status=OrderStatus.PAID,
        )
        if updated is None:
            Logger.base.critical(
                f'🚨 [REFUND] {refund.id} issued for {order.order_number} but the order '
                f'changed concurrently; manual review required'
            )
            raise InternalInconsistencyError(
                'Refund was issued but the order could not be updated. Please review manually.'
            )

        seats_released = await self._release_inventory(order=updated) if is_full_refund else 0

        metrics.refunds.labels(kind='full' if is_full_refund else 'partial').inc()
        Logger.base.info(
            f'💰 [REFUND] {"Full" if is_full_refund else "Partial"} refund {refund.id} of '
            f'{amount_in_cents} cents on {order.order_number} ({seats_released} seat(s) released)'
        )

        self._queue_notification(
            order=updated, amount_in_cents=amount_in_cents, is_full_refund=is_full_refund
        )
        return RefundOutcome(
            order=updated,
            refund_id=refund.id,
            refund_status=refund.status,
            amount_in_cents=refund.amount_in_cents,
            is_full_refund=is_full_refund,
            seats_released=seats_released,
        )

    async def _release_claim(self, *, order: Order, amount_in_cents: int) -> None:
        try:
            await self.order_command_repo.release_refund_amount(
                order_id=order.id, amount_in_cents=amount_in_cents
            )
        except Exception as e:
            Logger.base.opt(exception=e).error(
                f'🚨 [REFUND] Could not release the claimed {amount_in_cents} cents on '
                f'{order.order_number}; refunded total needs review'
            )

    async def _release_inventory(self, *, order: Order) -> int:
        try:
            tickets = await self.ticket_command_repo.list_by_order(order_id=order.id)
            await self.ticket_command_repo.invalidate_by_order(order_id=order.id)
            return await self.show_seat_command_repo.release_sold_seats(
                show_seat_ids=[ticket.show_seat_id for ticket in tickets if ticket.is_valid]
            )
        except Exception as e:
            # Money is already back with the customer; inventory can be fixed by hand
            Logger.base.opt(exception=e).error(
                f'🚨 [REFUND] {order.order_number} refunded but tickets/seats were not released'
            )
            return 0

    def _queue_notification(
        self, *, order: Order, amount_in_cents: int, is_full_refund: bool
    ) -> None:
        try:
            self.task_runner.submit(
                job_name=f'refund-email:{order.order_number}',
                func=self.refund_notification_use_case.send_refund_notification,
                order_id=order.id,
                amount_in_cents=amount_in_cents,
                is_full_refund=is_full_refund,
            )
        except Exception as e:
            Logger.base.opt(exception=e).warning(
                f'⚠️ [REFUND] Could not queue refund email for {order.order_number}'
            )
