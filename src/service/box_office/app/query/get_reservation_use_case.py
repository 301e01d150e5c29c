from datetime import datetime, timezone
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.dto.box_office_dto import ReservationSummary, SeatLine
from src.service.box_office.app.interface.i_reservation_command_repo import (
    IReservationCommandRepo,
)
from src.service.box_office.app.interface.i_show_seat_command_repo import IShowSeatCommandRepo
from src.service.box_office.domain.entity.reservation_entity import is_valid_reservation_token


class GetReservationUseCase:
    def __init__(
        self,
        *,
        reservation_command_repo: IReservationCommandRepo,
        show_seat_command_repo: IShowSeatCommandRepo,
    ) -> None:
        self.reservation_command_repo = reservation_command_repo
        self.show_seat_command_repo = show_seat_command_repo

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
    ) -> Self:
        return cls(
            reservation_command_repo=reservation_command_repo,
            show_seat_command_repo=show_seat_command_repo,
        )

    @Logger.io
    async def get_reservation(self, *, token: str) -> ReservationSummary:
        """
        Raises:
            NotFoundError: unknown token
            GoneError / ReservationExpiredError: inactive or timed-out hold (410)
        """
        now = datetime.now(timezone.utc)
        reservation = None
        if is_valid_reservation_token(token):
            reservation = await self.reservation_command_repo.get_by_token(token=token)
        if not reservation:
            raise NotFoundError('Reservation not found')

        reservation.validate_readable(now=now)

        show_seats = await self.show_seat_command_repo.get_by_ids(
            show_seat_ids=reservation.show_seat_ids
        )
        seats = [SeatLine.from_show_seat(show_seat) for show_seat in show_seats]
        return ReservationSummary(
            reservation=reservation,
            seats=seats,
            total_amount_in_cents=sum(seat.price_in_cents for seat in seats),
            time_remaining_seconds=reservation.time_remaining_seconds(now=now),
        )
