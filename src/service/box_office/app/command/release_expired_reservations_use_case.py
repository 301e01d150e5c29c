from datetime import datetime, timezone
from typing import Optional

import attrs

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.box_office.app.interface.i_reservation_command_repo import (
    IReservationCommandRepo,
)
from src.service.box_office.app.interface.i_show_seat_command_repo import IShowSeatCommandRepo


@attrs.define(frozen=True)
class SweepResult:
    reservations_expired: int = 0
    seats_released: int = 0


class ReleaseExpiredReservationsUseCase:
    """
    Housekeeping for holds nobody cancelled.

    Readers already treat a lapsed hold as available, so this only tidies rows;
    a slow or skipped sweep never lets a seat be sold twice.
    """

    def __init__(
        self,
        *,
        show_seat_command_repo: IShowSeatCommandRepo,
        reservation_command_repo: IReservationCommandRepo,
        batch_size: int = 200,
    ) -> None:
        self.show_seat_command_repo = show_seat_command_repo
        self.reservation_command_repo = reservation_command_repo
        self.batch_size = batch_size

    async def release_expired(self, *, now: Optional[datetime] = None) -> SweepResult:
        now = now or datetime.now(timezone.utc)
        expired = await self.reservation_command_repo.list_expired_active(
            now=now, limit=self.batch_size
        )

        reservations_expired = 0
        seats_released = 0
        for reservation in expired:
            # Same CAS as checkout / cancel: whoever flips is_active owns the seats
            if not await self.reservation_command_repo.deactivate_if_active(
                reservation_id=reservation.id
            ):
                continue
            reservations_expired += 1
            seats_released += await self.show_seat_command_repo.release_reserved_seats(
                reservation_id=reservation.id
            )
            metrics.reservations_released.labels(reason='expired').inc()

        seats_released += await self.show_seat_command_repo.release_lapsed_holds(now=now)

        if reservations_expired or seats_released:
            Logger.base.info(
                f'🧹 [SWEEP] Expired {reservations_expired} reservation(s), '
                f'released {seats_released} seat(s)'
            )
        return SweepResult(
            reservations_expired=reservations_expired, seats_released=seats_released
        )
