from datetime import datetime
from typing import AsyncContextManager, Callable, List, Optional
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.interface.i_reservation_command_repo import (
    IReservationCommandRepo,
)
from src.service.box_office.domain.entity.reservation_entity import Reservation
from src.service.box_office.driven_adapter.model.reservation_model import (
    ReservationSeatModel,
    SeatReservationModel,
)
from src.service.box_office.driven_adapter.repo.model_mapper import (
    to_reservation,
    to_reservation_model,
)


class ReservationCommandRepoImpl(IReservationCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, reservation: Reservation) -> Reservation:
        async with self.session_factory() as session:
            session.add(to_reservation_model(reservation))
            await session.commit()
        return reservation

    @Logger.io
    async def add_seats(self, *, reservation_id: UUID, show_seat_ids: List[UUID]) -> None:
        async with self.session_factory() as session:
            session.add_all(
                [
                    ReservationSeatModel(reservation_id=reservation_id, show_seat_id=show_seat_id)
                    for show_seat_id in show_seat_ids
                ]
            )
            await session.commit()

    @Logger.io
    async def delete(self, *, reservation_id: UUID) -> None:
        async with self.session_factory() as session:
            await session.execute(
                delete(ReservationSeatModel).where(
                    ReservationSeatModel.reservation_id == reservation_id
                )
            )
            await session.execute(
                delete(SeatReservationModel).where(SeatReservationModel.id == reservation_id)
            )
            await session.commit()

    async def _load(self, session: AsyncSession, db_reservation: SeatReservationModel) -> Reservation:
        result = await session.execute(
            select(ReservationSeatModel.show_seat_id)
            .where(ReservationSeatModel.reservation_id == db_reservation.id)
            .order_by(ReservationSeatModel.id)
        )
        return to_reservation(db_reservation, list(result.scalars().all()))

    @Logger.io
    async def get_by_token(self, *, token: str) -> Optional[Reservation]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(SeatReservationModel).where(SeatReservationModel.reservation_token == token)
            )
            db_reservation = result.scalar_one_or_none()
            if db_reservation is None:
                return None
            return await self._load(session, db_reservation)

    @Logger.io
    async def get_by_id(self, *, reservation_id: UUID) -> Optional[Reservation]:
        async with self.session_factory() as session:
            db_reservation = await session.get(SeatReservationModel, reservation_id)
            if db_reservation is None:
                return None
            return await self._load(session, db_reservation)

    @Logger.io
    async def deactivate_if_active(
        self, *, reservation_id: UUID, unexpired_at: Optional[datetime] = None
    ) -> bool:
        stmt = update(SeatReservationModel).where(
            SeatReservationModel.id == reservation_id,
            SeatReservationModel.is_active.is_(True),
        )
        if unexpired_at is not None:
            stmt = stmt.where(SeatReservationModel.expires_at >= unexpired_at)

        async with self.session_factory() as session:
            result = await session.execute(
                stmt.values(is_active=False).execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def reactivate(self, *, reservation_id: UUID) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                update(SeatReservationModel)
                .where(
                    SeatReservationModel.id == reservation_id,
                    SeatReservationModel.is_active.is_(False),
                )
                .values(is_active=True)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def extend_if_active(
        self,
        *,
        reservation_id: UUID,
        expected_extension_count: int,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                update(SeatReservationModel)
                .where(
                    SeatReservationModel.id == reservation_id,
                    SeatReservationModel.is_active.is_(True),
                    SeatReservationModel.expires_at >= now,
                    SeatReservationModel.extension_count == expected_extension_count,
                )
                .values(
                    expires_at=new_expires_at,
                    extension_count=expected_extension_count + 1,
                )
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def list_expired_active(self, *, now: datetime, limit: int) -> List[Reservation]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(SeatReservationModel)
                .where(
                    SeatReservationModel.is_active.is_(True),
                    SeatReservationModel.expires_at < now,
                )
                .order_by(SeatReservationModel.expires_at)
                .limit(limit)
            )
            return [to_reservation(db_reservation) for db_reservation in result.scalars().all()]
