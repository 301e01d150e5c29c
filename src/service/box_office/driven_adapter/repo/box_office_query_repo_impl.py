from typing import AsyncContextManager, Callable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.dto.box_office_dto import (
    OrderDocument,
    SeatLine,
    TicketDocument,
)
from src.service.box_office.app.interface.i_box_office_query_repo import IBoxOfficeQueryRepo
from src.service.box_office.domain.entity.show_seat_entity import Show, ShowSeat
from src.service.box_office.driven_adapter.model.order_model import TicketModel, TicketOrderModel
from src.service.box_office.driven_adapter.model.show_model import (
    ShowModel,
    ShowSeatModel,
    VenueSeatModel,
)
from src.service.box_office.driven_adapter.repo.model_mapper import (
    to_order,
    to_show,
    to_show_seat,
    to_ticket,
)


class BoxOfficeQueryRepoImpl(IBoxOfficeQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _ticket_rows_stmt():
        return (
            select(TicketModel, ShowSeatModel, VenueSeatModel)
            .join(ShowSeatModel, ShowSeatModel.id == TicketModel.show_seat_id)
            .join(VenueSeatModel, VenueSeatModel.id == ShowSeatModel.seat_id)
        )

    @Logger.io
    async def get_show(self, *, show_id: UUID) -> Optional[Show]:
        async with self.session_factory() as session:
            db_show = await session.get(ShowModel, show_id)
            return to_show(db_show) if db_show else None

    @Logger.io
    async def list_show_seats(self, *, show_id: UUID) -> List[ShowSeat]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ShowSeatModel, VenueSeatModel)
                .join(VenueSeatModel, VenueSeatModel.id == ShowSeatModel.seat_id)
                .where(ShowSeatModel.show_id == show_id)
                .order_by(
                    VenueSeatModel.section, VenueSeatModel.row_label, VenueSeatModel.seat_number
                )
            )
            return [to_show_seat(show_seat, seat) for show_seat, seat in result.all()]

    @Logger.io
    async def get_order_document(self, *, order_id: UUID) -> Optional[OrderDocument]:
        async with self.session_factory() as session:
            db_order = await session.get(TicketOrderModel, order_id)
            if db_order is None:
                return None
            db_show = await session.get(ShowModel, db_order.show_id)
            if db_show is None:
                return None

            result = await session.execute(
                self._ticket_rows_stmt()
                .where(TicketModel.order_id == order_id)
                .order_by(
                    VenueSeatModel.section, VenueSeatModel.row_label, VenueSeatModel.seat_number
                )
            )
            order = to_order(db_order)
            show = to_show(db_show)
            tickets = [
                TicketDocument(
                    ticket=to_ticket(db_ticket),
                    seat=SeatLine.from_show_seat(to_show_seat(db_show_seat, db_seat)),
                    show=show,
                    order_number=order.order_number,
                    customer_name=order.customer_name,
                )
                for db_ticket, db_show_seat, db_seat in result.all()
            ]
            return OrderDocument(order=order, show=show, tickets=tickets)

    @Logger.io
    async def get_ticket_document(self, *, ticket_id: UUID) -> Optional[TicketDocument]:
        async with self.session_factory() as session:
            result = await session.execute(
                self._ticket_rows_stmt().where(TicketModel.id == ticket_id)
            )
            row = result.first()
            if row is None:
                return None
            db_ticket, db_show_seat, db_seat = row

            db_order = await session.get(TicketOrderModel, db_ticket.order_id)
            db_show = await session.get(ShowModel, db_show_seat.show_id)
            if db_order is None or db_show is None:
                return None

            return TicketDocument(
                ticket=to_ticket(db_ticket),
                seat=SeatLine.from_show_seat(to_show_seat(db_show_seat, db_seat)),
                show=to_show(db_show),
                order_number=db_order.order_number,
                customer_name=db_order.customer_name,
            )
