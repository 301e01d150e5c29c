from datetime import datetime, timezone
from typing import List, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.box_office.app.dto.box_office_dto import ReservationSummary, SeatLine
from src.service.box_office.app.interface.i_reservation_command_repo import (
    IReservationCommandRepo,
)
from src.service.box_office.app.interface.i_show_seat_command_repo import IShowSeatCommandRepo
from src.service.box_office.domain.entity.reservation_entity import Reservation
from src.service.box_office.domain.entity.show_seat_entity import ShowSeat
from src.service.box_office.domain.exception.box_office_errors import (
    ReservationCreateFailedError,
    SeatUnavailableError,
)


class CreateReservationUseCase:
    """
    Hold a set of show seats for one session.

    Flow:
    1. Insert the reservation row (token + expiry)
    2. Read the seats; any missing, foreign or taken seat -> 409
    3. Link seats to the reservation
    4. Claim all seats with ONE conditional update; a short rowcount means a
       concurrent hold won, so whatever this hold claimed is released again

    Every failure after step 1 undoes steps 1-4 before the error leaves here.
    """

    def __init__(
        self,
        *,
        show_seat_command_repo: IShowSeatCommandRepo,
        reservation_command_repo: IReservationCommandRepo,
        hold_minutes: Optional[int] = None,
        max_seats: Optional[int] = None,
    ) -> None:
        self.show_seat_command_repo = show_seat_command_repo
        self.reservation_command_repo = reservation_command_repo
        self.hold_minutes = hold_minutes or settings.RESERVATION_HOLD_MINUTES
        self.max_seats = max_seats or settings.MAX_SEATS_PER_RESERVATION
        self.tracer = trace.get_tracer(__name__)

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
    async def create_reservation(
        self,
        *,
        session_id: str,
        show_id: UUID,
        show_seat_ids: List[UUID],
        email: str,
        phone: Optional[str] = None,
    ) -> ReservationSummary:
        now = datetime.now(timezone.utc)

        with self.tracer.start_as_current_span(
            'use_case.create_reservation',
            attributes={'show.id': str(show_id), 'seat.count': len(show_seat_ids)},
        ) as span:
            reservation = Reservation.create(
                session_id=session_id,
                show_id=show_id,
                show_seat_ids=show_seat_ids,
                email=email,
                phone=phone,
                hold_minutes=self.hold_minutes,
                max_seats=self.max_seats,
                now=now,
            )
            span.set_attribute('reservation.id', str(reservation.id))

            await self.reservation_command_repo.create(reservation=reservation)

            try:
                show_seats = await self._claim_seats(reservation=reservation, now=now)
            except SeatUnavailableError:
                metrics.reservation_requests.labels(result='seat_unavailable').inc()
                await self._undo(reservation_id=reservation.id)
                raise
            except Exception as e:
                metrics.reservation_requests.labels(result='error').inc()
                Logger.base.opt(exception=e).error(
                    f'❌ [RESERVE] Hold {reservation.id} failed unexpectedly'
                )
                await self._undo(reservation_id=reservation.id)
                raise ReservationCreateFailedError() from e

            metrics.reservation_requests.labels(result='success').inc()
            metrics.reservation_seats.observe(len(show_seats))
            Logger.base.info(
                f'🎟️ [RESERVE] Held {len(show_seats)} seat(s) for show {show_id} '
                f'until {reservation.expires_at:%H:%M:%S} UTC (reservation {reservation.id})'
            )

            seats = [SeatLine.from_show_seat(show_seat) for show_seat in show_seats]
            return ReservationSummary(
                reservation=reservation,
                seats=seats,
                total_amount_in_cents=sum(seat.price_in_cents for seat in seats),
                time_remaining_seconds=reservation.time_remaining_seconds(now=now),
            )

    async def _claim_seats(self, *, reservation: Reservation, now: datetime) -> List[ShowSeat]:
        show_seat_ids = reservation.show_seat_ids
        by_id = {
            show_seat.id: show_seat
            for show_seat in await self.show_seat_command_repo.get_by_ids(
                show_seat_ids=show_seat_ids
            )
        }

        # Seats of another show count as unavailable, not as a validation error
        unavailable = [
            show_seat_id
            for show_seat_id in show_seat_ids
            if show_seat_id not in by_id
            or by_id[show_seat_id].show_id != reservation.show_id
            or not by_id[show_seat_id].is_free(now=now)
        ]
        if unavailable:
            Logger.base.warning(f'⚠️ [RESERVE] Seats not available: {unavailable}')
            raise SeatUnavailableError(unavailable)

        await self.reservation_command_repo.add_seats(
            reservation_id=reservation.id, show_seat_ids=show_seat_ids
        )

        claimed = await self.show_seat_command_repo.reserve_seats(
            show_id=reservation.show_id,
            show_seat_ids=show_seat_ids,
            reservation_id=reservation.id,
            reserved_until=reservation.expires_at,
            now=now,
        )
        if claimed != len(show_seat_ids):
            Logger.base.warning(
                f'⚔️ [RESERVE] Lost race for reservation {reservation.id}: '
                f'claimed {claimed}/{len(show_seat_ids)} seats'
            )
            raise SeatUnavailableError(show_seat_ids)

        return [by_id[show_seat_id] for show_seat_id in show_seat_ids]

    async def _undo(self, *, reservation_id: UUID) -> None:
        try:
            released = await self.show_seat_command_repo.release_reserved_seats(
                reservation_id=reservation_id
            )
            await self.reservation_command_repo.delete(reservation_id=reservation_id)
        except Exception as e:
            # Original error is re-raised by the caller; the sweeper frees lapsed holds
            Logger.base.opt(exception=e).error(
                f'❌ [RESERVE] Cleanup failed for reservation {reservation_id}'
            )
            return
        Logger.base.info(
            f'↩️ [RESERVE] Rolled back reservation {reservation_id} (released {released} seat(s))'
        )
