from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.interface.i_reservation_command_repo import (
    IReservationCommandRepo,
)
from src.service.box_office.domain.entity.reservation_entity import (
    Reservation,
    is_valid_reservation_token,
)


class ValidateReservationOwnershipUseCase:
    """Token -> reservation, only if the calling session is the one that created it."""

    def __init__(self, *, reservation_command_repo: IReservationCommandRepo) -> None:
        self.reservation_command_repo = reservation_command_repo

    @classmethod
    @inject
    def depends(
        cls,
        reservation_command_repo: IReservationCommandRepo = Depends(
            Provide[Container.reservation_command_repo]
        ),
    ) -> Self:
        return cls(reservation_command_repo=reservation_command_repo)

    @Logger.io
    async def validate(self, *, token: str, session_id: str) -> Reservation:
        reservation = None
        if is_valid_reservation_token(token):
            reservation = await self.reservation_command_repo.get_by_token(token=token)
        if not reservation:
            raise NotFoundError('Reservation not found')

        if reservation.session_id != session_id:
            Logger.base.warning(
                f'🚫 [OWNERSHIP] Session mismatch on reservation {reservation.id}'
            )
        reservation.validate_owned_by(session_id=session_id)
        return reservation
