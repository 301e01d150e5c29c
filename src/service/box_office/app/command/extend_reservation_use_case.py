from datetime import datetime, timezone
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.interface.i_reservation_command_repo import (
    IReservationCommandRepo,
)
from src.service.box_office.app.interface.i_show_seat_command_repo import IShowSeatCommandRepo
from src.service.box_office.domain.entity.reservation_entity import (
    Reservation,
    is_valid_reservation_token,
)
from src.service.box_office.domain.exception.box_office_errors import SeatHoldLostError


class ExtendReservationUseCase:
    def __init__(
        self,
        *,
        show_seat_command_repo: IShowSeatCommandRepo,
        reservation_command_repo: IReservationCommandRepo,
        extension_minutes: Optional[int] = None,
        max_extensions: Optional[int] = None,
    ) -> None:
        self.show_seat_command_repo = show_seat_command_repo
        self.reservation_command_repo = reservation_command_repo
        self.extension_minutes = extension_minutes or settings.RESERVATION_EXTENSION_MINUTES
        self.max_extensions = max_extensions or settings.MAX_RESERVATION_EXTENSIONS

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

    def extensions_remaining(self, reservation: Reservation) -> int:
        return max(0, self.max_extensions - reservation.extension_count)

    @Logger.io
    async def extend_reservation(self, *, token: str, session_id: str) -> Reservation:
        """
        Push the hold (reservation and every held seat) forward by a few minutes.

        Raises:
            NotFoundError: unknown token
            ForbiddenError: held by another session
            GoneError / ReservationExpiredError: hold no longer active (410)
            MaxExtensionsReachedError: extension budget used up (429)
            SeatHoldLostError: a seat already left the hold; the hold is released (409)
        """
        now = datetime.now(timezone.utc)
        reservation = None
        if is_valid_reservation_token(token):
            reservation = await self.reservation_command_repo.get_by_token(token=token)
        if not reservation:
            raise NotFoundError('Reservation not found')

        reservation.validate_owned_by(session_id=session_id)
        reservation.validate_extendable(now=now, max_extensions=self.max_extensions)

        extended = reservation.extend(minutes=self.extension_minutes)
        if not await self.reservation_command_repo.extend_if_active(
            reservation_id=reservation.id,
            expected_extension_count=reservation.extension_count,
            new_expires_at=extended.expires_at,
            now=now,
        ):
            # Lost to a concurrent checkout, cancel or extend: report the state that won
            current = await self.reservation_command_repo.get_by_id(reservation_id=reservation.id)
            if current:
                current.validate_extendable(
                    now=datetime.now(timezone.utc), max_extensions=self.max_extensions
                )
            raise ConflictError('Reservation changed while extending. Please try again.')

        seats = await self.show_seat_command_repo.extend_reserved_seats(
            reservation_id=reservation.id, reserved_until=extended.expires_at
        )
        if seats != len(reservation.show_seat_ids):
            await self._abandon(reservation=reservation, seats=seats)

        Logger.base.info(
            f'⏱️ [EXTEND] Reservation {reservation.id} extended to '
            f'{extended.expires_at:%H:%M:%S} UTC ({extended.extension_count}/'
            f'{self.max_extensions}, {seats} seat(s))'
        )
        return extended

    async def _abandon(self, *, reservation: Reservation, seats: int) -> None:
        """A seat already left this hold (lapsed and re-claimed); the hold cannot be bought."""
        Logger.base.warning(
            f'🪑 [EXTEND] Reservation {reservation.id} holds only {seats}/'
            f'{len(reservation.show_seat_ids)} seat(s); releasing it'
        )
        if await self.reservation_command_repo.deactivate_if_active(reservation_id=reservation.id):
            await self.show_seat_command_repo.release_reserved_seats(
                reservation_id=reservation.id
            )
        raise SeatHoldLostError(reservation.show_seat_ids)
