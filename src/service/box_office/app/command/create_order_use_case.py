from datetime import datetime, timezone
from typing import List, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import CustomBaseError, InternalInconsistencyError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.box_office.app.command.send_confirmation_email_use_case import (
    SendConfirmationEmailUseCase,
)
from src.service.box_office.app.interface.i_background_task_runner import IBackgroundTaskRunner
from src.service.box_office.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.box_office.app.interface.i_payment_gateway import IPaymentGateway
from src.service.box_office.app.interface.i_reservation_command_repo import (
    IReservationCommandRepo,
)
from src.service.box_office.app.interface.i_show_seat_command_repo import IShowSeatCommandRepo
from src.service.box_office.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.box_office.app.query.validate_reservation_ownership_use_case import (
    ValidateReservationOwnershipUseCase,
)
from src.service.box_office.domain.entity.order_entity import Order
from src.service.box_office.domain.entity.reservation_entity import Reservation
from src.service.box_office.domain.entity.show_seat_entity import unheld_seat_ids
from src.service.box_office.domain.entity.ticket_entity import Ticket
from src.service.box_office.domain.exception.box_office_errors import (
    AmountMismatchError,
    PaymentAlreadyUsedError,
    PaymentNotSucceededError,
    ReservationInactiveError,
    SeatHoldLostError,
    SeatUnavailableError,
)


class CreateOrderUseCase:
    """
    Turn a paid reservation into an order with tickets.

    Gates (no writes until all pass):
    1. Caller's session owns the reservation (404 / 403)
    2. Hold not expired (400), still active (400)
    3. The payment has not already settled another order (409)
    4. Payment provider says `succeeded` (400)
    5. Every seat is still reserved by this reservation (409)
    6. Paid amount == live price of the held seats (400)

    Writes:
    7. Deactivate the reservation with a compare-and-swap; only one checkout
       (or cancel) can win it
    8. Reserved -> sold for every held seat; a short count puts the sold seats
       back on sale and fails with 409
    9. Insert order + tickets; on failure delete them, put the seats back on hold
       and reactivate the reservation (409 for a reused payment, 500 otherwise)
    10. Queue the confirmation email (best effort)
    """

    def __init__(
        self,
        *,
        reservation_command_repo: IReservationCommandRepo,
        show_seat_command_repo: IShowSeatCommandRepo,
        order_command_repo: IOrderCommandRepo,
        ticket_command_repo: ITicketCommandRepo,
        payment_gateway: IPaymentGateway,
        task_runner: IBackgroundTaskRunner,
        ownership_use_case: ValidateReservationOwnershipUseCase,
        confirmation_email_use_case: SendConfirmationEmailUseCase,
    ) -> None:
        self.reservation_command_repo = reservation_command_repo
        self.show_seat_command_repo = show_seat_command_repo
        self.order_command_repo = order_command_repo
        self.ticket_command_repo = ticket_command_repo
        self.payment_gateway = payment_gateway
        self.task_runner = task_runner
        self.ownership_use_case = ownership_use_case
        self.confirmation_email_use_case = confirmation_email_use_case
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        reservation_command_repo: IReservationCommandRepo = Depends(
            Provide[Container.reservation_command_repo]
        ),
        show_seat_command_repo: IShowSeatCommandRepo = Depends(
            Provide[Container.show_seat_command_repo]
        ),
        order_command_repo: IOrderCommandRepo = Depends(Provide[Container.order_command_repo]),
        ticket_command_repo: ITicketCommandRepo = Depends(Provide[Container.ticket_command_repo]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        task_runner: IBackgroundTaskRunner = Depends(Provide[Container.task_runner]),
        ownership_use_case: ValidateReservationOwnershipUseCase = Depends(
            ValidateReservationOwnershipUseCase.depends
        ),
        confirmation_email_use_case: SendConfirmationEmailUseCase = Depends(
            SendConfirmationEmailUseCase.depends
        ),
    ) -> Self:
        return cls(
            reservation_command_repo=reservation_command_repo,
            show_seat_command_repo=show_seat_command_repo,
            order_command_repo=order_command_repo,
            ticket_command_repo=ticket_command_repo,
            payment_gateway=payment_gateway,
            task_runner=task_runner,
            ownership_use_case=ownership_use_case,
            confirmation_email_use_case=confirmation_email_use_case,
        )

    @Logger.io
    async def create_order(
        self,
        *,
        token: str,
        session_id: str,
        payment_reference: str,
        customer_name: str,
        customer_email: str,
        customer_phone: Optional[str] = None,
        notes: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Order:
        with self.tracer.start_as_current_span('use_case.create_order') as span:
            try:
                order = await self._create_order(
                    token=token,
                    session_id=session_id,
                    payment_reference=payment_reference,
                    customer_name=customer_name,
                    customer_email=customer_email,
                    customer_phone=customer_phone,
                    notes=notes,
                    user_id=user_id,
                )
            except CustomBaseError as e:
                metrics.order_requests.labels(result=type(e).__name__).inc()
                raise

            span.set_attribute('order.id', str(order.id))
            span.set_attribute('order.number', order.order_number)
            metrics.order_requests.labels(result='success').inc()
            metrics.order_amount_cents.observe(order.total_amount_in_cents)

        self._queue_confirmation_email(order=order)
        return order

    async def _create_order(
        self,
        *,
        token: str,
        session_id: str,
        payment_reference: str,
        customer_name: str,
        customer_email: str,
        customer_phone: Optional[str],
        notes: Optional[str],
        user_id: Optional[str],
    ) -> Order:
        # ---- gates ----
        reservation = await self.ownership_use_case.validate(token=token, session_id=session_id)
        now = datetime.now(timezone.utc)
        reservation.validate_purchasable(now=now)

        if await self.order_command_repo.get_by_payment_intent_id(
            payment_intent_id=payment_reference
        ):
            Logger.base.warning(
                f'💸 [ORDER] Payment {payment_reference} already settled another order; '
                f'rejecting checkout of reservation {reservation.id}'
            )
            raise PaymentAlreadyUsedError()

        payment = await self.payment_gateway.retrieve_payment(reference=payment_reference)
        if not payment.is_succeeded:
            raise PaymentNotSucceededError(payment.status)

        show_seats = await self.show_seat_command_repo.get_by_ids(
            show_seat_ids=reservation.show_seat_ids
        )
        if len(show_seats) != len(reservation.show_seat_ids):
            raise SeatUnavailableError(
                set(reservation.show_seat_ids) - {show_seat.id for show_seat in show_seats}
            )
        lost = unheld_seat_ids(show_seats, reservation_id=reservation.id, now=now)
        if lost:
            # A concurrent cancel or sweep also frees the seats: report that state first
            current = await self.reservation_command_repo.get_by_id(reservation_id=reservation.id)
            if current:
                current.validate_purchasable(now=now)
            Logger.base.warning(
                f'🪑 [ORDER] Reservation {reservation.id} no longer holds {len(lost)} seat(s)'
            )
            raise SeatHoldLostError(lost)

        expected_in_cents = sum(show_seat.price_in_cents for show_seat in show_seats)
        if payment.amount_in_cents != expected_in_cents:
            Logger.base.warning(
                f'💸 [ORDER] Amount mismatch for reservation {reservation.id}: '
                f'paid {payment.amount_in_cents}, expected {expected_in_cents}'
            )
            raise AmountMismatchError(
                paid_in_cents=payment.amount_in_cents, expected_in_cents=expected_in_cents
            )

        order = Order.create_paid(
            show_id=reservation.show_id,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            payment_intent_id=payment.reference,
            total_amount_in_cents=expected_in_cents,
            session_id=session_id,
            user_id=user_id,
            notes=notes,
            now=now,
        )
        tickets = [
            Ticket.create(order_id=order.id, show_seat_id=show_seat_id, now=now)
            for show_seat_id in reservation.show_seat_ids
        ]

        # ---- exclusivity gate ----
        await self._claim_reservation(reservation=reservation)

        # ---- writes ----
        sold_ids = await self._mark_sold(reservation=reservation, order=order)
        try:
            await self.order_command_repo.create(order=order)
            await self.ticket_command_repo.create_many(tickets=tickets)
        except PaymentAlreadyUsedError:
            # Same charge raced in through another reservation and won the insert
            await self._compensate(order=order, reservation=reservation, sold_ids=sold_ids)
            raise
        except Exception as e:
            Logger.base.opt(exception=e).error(
                f'❌ [ORDER] Persisting order {order.order_number} failed; compensating'
            )
            await self._compensate(order=order, reservation=reservation, sold_ids=sold_ids)
            raise InternalInconsistencyError(
                'Failed to create order. Your payment was received; please contact support.'
            ) from e

        Logger.base.info(
            f'🎉 [ORDER] {order.order_number} paid: {len(tickets)} ticket(s), '
            f'{order.total_amount_in_cents} cents (reservation {reservation.id})'
        )
        return order

    async def _claim_reservation(self, *, reservation: Reservation) -> None:
        now = datetime.now(timezone.utc)
        if await self.reservation_command_repo.deactivate_if_active(
            reservation_id=reservation.id, unexpired_at=now
        ):
            return

        # Lost the CAS: tell the caller which state beat us
        current = await self.reservation_command_repo.get_by_id(reservation_id=reservation.id)
        if current:
            current.validate_purchasable(now=now)
        raise ReservationInactiveError()

    async def _mark_sold(self, *, reservation: Reservation, order: Order) -> List[UUID]:
        """
        reserved -> sold for every held seat, before any order row exists.

        All or nothing: if some seat slipped out of the hold between the gate and
        here, the seats this call did sell are put back on sale, the reservation
        stays inactive and SeatHoldLostError is raised.
        """
        try:
            sold_ids = await self.show_seat_command_repo.mark_seats_sold(
                reservation_id=reservation.id, show_seat_ids=reservation.show_seat_ids
            )
        except Exception as e:
            Logger.base.opt(exception=e).error(
                f'❌ [ORDER] Selling seats for {order.order_number} failed; reactivating hold'
            )
            await self._reactivate(reservation=reservation)
            raise InternalInconsistencyError(
                'Failed to create order. Your payment was received; please contact support.'
            ) from e

        if len(sold_ids) == len(reservation.show_seat_ids):
            return sold_ids

        sold = set(sold_ids)
        lost = [
            show_seat_id for show_seat_id in reservation.show_seat_ids if show_seat_id not in sold
        ]
        Logger.base.error(
            f'🚨 [ORDER] Reservation {reservation.id} lost {len(lost)} seat(s) at checkout; '
            f'payment {order.payment_intent_id} needs a refund'
        )
        try:
            await self.show_seat_command_repo.release_sold_seats(show_seat_ids=sold_ids)
            await self.show_seat_command_repo.release_reserved_seats(
                reservation_id=reservation.id
            )
        except Exception as e:
            Logger.base.opt(exception=e).error(
                f'🚨 [ORDER] Could not return seats of reservation {reservation.id} to sale'
            )
        raise SeatHoldLostError(lost)

    async def _compensate(
        self, *, order: Order, reservation: Reservation, sold_ids: List[UUID]
    ) -> None:
        try:
            await self.order_command_repo.delete(order_id=order.id)
        except Exception as e:
            Logger.base.opt(exception=e).error(
                f'🚨 [ORDER] Could not delete partial order {order.order_number}'
            )
        try:
            await self.show_seat_command_repo.revert_sold_seats(
                show_seat_ids=sold_ids,
                reservation_id=reservation.id,
                reserved_until=reservation.expires_at,
            )
        except Exception as e:
            Logger.base.opt(exception=e).error(
                f'🚨 [ORDER] Could not put seats back on hold for reservation {reservation.id}'
            )
        await self._reactivate(reservation=reservation)

    async def _reactivate(self, *, reservation: Reservation) -> None:
        try:
            await self.reservation_command_repo.reactivate(reservation_id=reservation.id)
        except Exception as e:
            Logger.base.opt(exception=e).error(
                f'🚨 [ORDER] Could not reactivate reservation {reservation.id}'
            )

    def _queue_confirmation_email(self, *, order: Order) -> None:
        try:
            self.task_runner.submit(
                job_name=f'confirmation-email:{order.order_number}',
                func=self.confirmation_email_use_case.send_confirmation_email,
                order_id=order.id,
            )
        except Exception as e:
            Logger.base.opt(exception=e).warning(
                f'⚠️ [ORDER] Could not queue confirmation email for {order.order_number}; '
                f'staff can resend it'
            )

