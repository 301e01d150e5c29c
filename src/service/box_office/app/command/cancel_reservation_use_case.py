from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.box_office.app.interface.i_reservation_command_repo import (
    IReservationCommandRepo,
)
from src.service.box_office.app.interface.i_show_seat_command_repo import IShowSeatCommandRepo
from src.service.box_office.domain.entity.reservation_entity import (
    Reservation,
    is_valid_reservation_token,
)


class CancelReservationUseCase:
    """
    Give held seats back.

    Cancelling is idempotent: an already completed / cancelled hold, or losing the
    is_active compare-and-swap to a concurrent checkout, simply reports False.
    """

    def __init__(
        self,
        *,
        show_seat_command_repo: IShowSeatCommandRepo,
        reservation_command_repo: IReservationCommandRepo,
    ) -> None:
        self.show_seat_command_repo = show_seat_command_repo
        self.reservation_command_repo = reservation_command_repo

    @classmethod
    @inject
    def depends(
        cls,
        show_seat_command_repo: IShowSeatCommandRepo = Depends(
            Provide[Container.show_seat_command_repo]
        ),
        reservation_command_repo: IReservationCommandRepo = Depends(
            Provide[Container.reservation_command_repo]
        ),
    ) -> Self:
        return cls(
            show_seat_command_repo=show_seat_command_repo,
            reservation_command_repo=reservation_command_repo,
        )

    @Logger.io
    async def cancel_reservation(self, *, token: str) -> bool:
        """The token itself is the capability; no session check."""
        reservation = None
        if is_valid_reservation_token(token):
            reservation = await self.reservation_command_repo.get_by_token(token=token)
        if not reservation:
            raise NotFoundError('Reservation not found')

        return await self._cancel(reservation=reservation)

    @Logger.io
    async def cancel_session_reservation(self, *, reservation_id: UUID, session_id: str) -> bool:
        reservation = await self.reservation_command_repo.get_by_id(reservation_id=reservation_id)
        if not reservation:
            raise NotFoundError('Reservation not found')
        reservation.validate_owned_by(session_id=session_id)

        return await self._cancel(reservation=reservation)

    async def _cancel(self, *, reservation: Reservation) -> bool:
        if not reservation.is_active:
            return False

        if not await self.reservation_command_repo.deactivate_if_active(
            reservation_id=reservation.id
        ):
            Logger.base.info(
                f'🔁 [CANCEL] Reservation {reservation.id} was completed or cancelled concurrently'
            )
            return False

        released = await self.show_seat_command_repo.release_reserved_seats(
            reservation_id=reservation.id
        )
        metrics.reservations_released.labels(reason='cancelled').inc()
        Logger.base.info(
            f'🗑️ [CANCEL] Cancelled reservation {reservation.id}, released {released} seat(s)'
        )
        return True
