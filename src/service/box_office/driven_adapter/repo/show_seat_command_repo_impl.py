from datetime import datetime, timezone
from typing import AsyncContextManager, Callable, List
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Update

from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.interface.i_show_seat_command_repo import IShowSeatCommandRepo
from src.service.box_office.domain.entity.show_seat_entity import SeatStatus, ShowSeat
from src.service.box_office.driven_adapter.model.show_model import ShowSeatModel, VenueSeatModel
from src.service.box_office.driven_adapter.repo.model_mapper import to_show_seat


class ShowSeatCommandRepoImpl(IShowSeatCommandRepo):
    """
    Seat inventory writes as single conditional UPDATE statements.

    Each method commits on its own; the affected row count is the only signal of
    whether this caller won the race for a seat.
    """

    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    async def _execute_update(self, stmt: Update) -> int:
        async with self.session_factory() as session:
            result = await session.execute(stmt.execution_options(synchronize_session=False))
            await session.commit()
            return result.rowcount  # type: ignore[attr-defined]

    @Logger.io
    async def get_by_ids(self, *, show_seat_ids: List[UUID]) -> List[ShowSeat]:
        if not show_seat_ids:
            return []
        async with self.session_factory() as session:
            result = await session.execute(
                select(ShowSeatModel, VenueSeatModel)
                .join(VenueSeatModel, VenueSeatModel.id == ShowSeatModel.seat_id)
                .where(ShowSeatModel.id.in_(show_seat_ids))
                .order_by(
                    VenueSeatModel.section, VenueSeatModel.row_label, VenueSeatModel.seat_number
                )
            )
            return [to_show_seat(show_seat, seat) for show_seat, seat in result.all()]

    @Logger.io
    async def reserve_seats(
        self,
        *,
        show_id: UUID,
        show_seat_ids: List[UUID],
        reservation_id: UUID,
        reserved_until: datetime,
        now: datetime,
    ) -> int:
        return await self._execute_update(
            update(ShowSeatModel)
            .where(
                ShowSeatModel.id.in_(show_seat_ids),
                ShowSeatModel.show_id == show_id,
                or_(
                    ShowSeatModel.status == SeatStatus.AVAILABLE.value,
                    and_(
                        ShowSeatModel.status == SeatStatus.RESERVED.value,
                        ShowSeatModel.reserved_until < now,
                    ),
                ),
            )
            .values(
                status=SeatStatus.RESERVED.value,
                reserved_until=reserved_until,
                reserved_by=reservation_id,
                updated_at=now,
            )
        )

    @Logger.io
    async def release_reserved_seats(self, *, reservation_id: UUID) -> int:
        return await self._execute_update(
            update(ShowSeatModel)
            .where(
                ShowSeatModel.reserved_by == reservation_id,
                ShowSeatModel.status == SeatStatus.RESERVED.value,
            )
            .values(
                status=SeatStatus.AVAILABLE.value,
                reserved_until=None,
                reserved_by=None,
                updated_at=datetime.now(timezone.utc),
            )
        )

    @Logger.io
    async def extend_reserved_seats(
        self, *, reservation_id: UUID, reserved_until: datetime
    ) -> int:
        return await self._execute_update(
            update(ShowSeatModel)
            .where(
                ShowSeatModel.reserved_by == reservation_id,
                ShowSeatModel.status == SeatStatus.RESERVED.value,
            )
            .values(reserved_until=reserved_until, updated_at=datetime.now(timezone.utc))
        )

    @Logger.io
    async def mark_seats_sold(
        self, *, reservation_id: UUID, show_seat_ids: List[UUID]
    ) -> List[UUID]:
        async with self.session_factory() as session:
            result = await session.execute(
                update(ShowSeatModel)
                .where(
                    ShowSeatModel.id.in_(show_seat_ids),
                    ShowSeatModel.reserved_by == reservation_id,
                    ShowSeatModel.status == SeatStatus.RESERVED.value,
                )
                .values(
                    status=SeatStatus.SOLD.value,
                    reserved_until=None,
                    reserved_by=None,
                    updated_at=datetime.now(timezone.utc),
                )
                .returning(ShowSeatModel.id)
                .execution_options(synchronize_session=False)
            )
            sold_ids = list(result.scalars().all())
            await session.commit()
            return sold_ids

    @Logger.io
    async def revert_sold_seats(
        self, *, show_seat_ids: List[UUID], reservation_id: UUID, reserved_until: datetime
    ) -> int:
        if not show_seat_ids:
            return 0
        return await self._execute_update(
            update(ShowSeatModel)
            .where(
                ShowSeatModel.id.in_(show_seat_ids),
                ShowSeatModel.status == SeatStatus.SOLD.value,
            )
            .values(
                status=SeatStatus.RESERVED.value,
                reserved_until=reserved_until,
                reserved_by=reservation_id,
                updated_at=datetime.now(timezone.utc),
            )
        )

    @Logger.io
    async def release_sold_seats(self, *, show_seat_ids: List[UUID]) -> int:
        if not show_seat_ids:
            return 0
        return await self._execute_update(
            update(ShowSeatModel)
            .where(
                ShowSeatModel.id.in_(show_seat_ids),
                ShowSeatModel.status == SeatStatus.SOLD.value,
            )
            .values(
                status=SeatStatus.AVAILABLE.value,
                reserved_until=None,
                reserved_by=None,
                updated_at=datetime.now(timezone.utc),
            )
        )

    @Logger.io
    async def release_lapsed_holds(self, *, now: datetime) -> int:
        return await self._execute_update(
            update(ShowSeatModel)
            .where(
                ShowSeatModel.status == SeatStatus.RESERVED.value,
                ShowSeatModel.reserved_until < now,
            )
            .values(
                status=SeatStatus.AVAILABLE.value,
                reserved_until=None,
                reserved_by=None,
                updated_at=now,
            )
        )
