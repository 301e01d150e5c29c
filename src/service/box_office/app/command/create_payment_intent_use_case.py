from datetime import datetime, timezone
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.interface.i_payment_gateway import IPaymentGateway, PaymentIntent
from src.service.box_office.app.interface.i_show_seat_command_repo import IShowSeatCommandRepo
from src.service.box_office.app.query.validate_reservation_ownership_use_case import (
    ValidateReservationOwnershipUseCase,
)
from src.service.box_office.domain.entity.show_seat_entity import unheld_seat_ids
from src.service.box_office.domain.exception.box_office_errors import (
    SeatHoldLostError,
    SeatUnavailableError,
)


class CreatePaymentIntentUseCase:
    """
    Price the caller's hold from the live seat rows and open a provider charge for it.

    The client never sends an amount. The idempotency key is derived from the
    reservation and the price, so a retried request gets the same intent back while
    a price change produces a new one.
    """

    def __init__(
        self,
        *,
        show_seat_command_repo: IShowSeatCommandRepo,
        payment_gateway: IPaymentGateway,
        ownership_use_case: ValidateReservationOwnershipUseCase,
        currency: Optional[str] = None,
    ) -> None:
        self.show_seat_command_repo = show_seat_command_repo
        self.payment_gateway = payment_gateway
        self.ownership_use_case = ownership_use_case
        self.currency = currency or settings.PAYMENT_CURRENCY

    @classmethod
    @inject
    def depends(
        cls,
        show_seat_command_repo: IShowSeatCommandRepo = Depends(
            Provide[Container.show_seat_command_repo]
        ),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        ownership_use_case: ValidateReservationOwnershipUseCase = Depends(
            ValidateReservationOwnershipUseCase.depends
        ),
    ) -> Self:
        return cls(
            show_seat_command_repo=show_seat_command_repo,
            payment_gateway=payment_gateway,
            ownership_use_case=ownership_use_case,
        )

    @Logger.io
    async def create_payment_intent(
        self, *, token: str, session_id: str, idempotency_key: Optional[str] = None
    ) -> PaymentIntent:
        """
        Raises:
            NotFoundError / ForbiddenError: unknown token, or another session's hold
            ReservationExpiredError / ReservationInactiveError: hold cannot be bought (400)
            SeatUnavailableError / SeatHoldLostError: a seat is no longer held (409)
        """
        reservation = await self.ownership_use_case.validate(token=token, session_id=session_id)
        now = datetime.now(timezone.utc)
        reservation.validate_purchasable(now=now)

        show_seats = await self.show_seat_command_repo.get_by_ids(
            show_seat_ids=reservation.show_seat_ids
        )
        if len(show_seats) != len(reservation.show_seat_ids):
            raise SeatUnavailableError(
                set(reservation.show_seat_ids) - {show_seat.id for show_seat in show_seats}
            )
        lost = unheld_seat_ids(show_seats, reservation_id=reservation.id, now=now)
        if lost:
            raise SeatHoldLostError(lost)

        amount_in_cents = sum(show_seat.price_in_cents for show_seat in show_seats)
        key = f'reservation-{reservation.id}-{amount_in_cents}'
        if idempotency_key:
            key = f'{key}-{idempotency_key}'

        intent = await self.payment_gateway.create_payment_intent(
            amount_in_cents=amount_in_cents,
            currency=self.currency,
            metadata={
                'reservation_id': str(reservation.id),
                'show_id': str(reservation.show_id),
                'seat_count': str(len(show_seats)),
            },
            idempotency_key=key,
            receipt_email=reservation.email,
        )
        Logger.base.info(
            f'💳 [PAYMENT] Intent {intent.id} for reservation {reservation.id}: '
            f'{amount_in_cents} {self.currency}'
        )
        return intent
