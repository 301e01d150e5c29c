from datetime import datetime
from typing import AsyncContextManager, Callable, List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.box_office.domain.entity.ticket_entity import Ticket
from src.service.box_office.driven_adapter.model.order_model import TicketModel
from src.service.box_office.driven_adapter.repo.model_mapper import to_ticket, to_ticket_model


class TicketCommandRepoImpl(ITicketCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def create_many(self, *, tickets: List[Ticket]) -> List[Ticket]:
        async with self.session_factory() as session:
            session.add_all([to_ticket_model(ticket) for ticket in tickets])
            await session.commit()
        return tickets

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> Optional[Ticket]:
        async with self.session_factory() as session:
            db_ticket = await session.get(TicketModel, ticket_id)
            return to_ticket(db_ticket) if db_ticket else None

    @Logger.io
    async def get_by_code(self, *, ticket_code: str) -> Optional[Ticket]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketModel).where(TicketModel.ticket_code == ticket_code)
            )
            db_ticket = result.scalar_one_or_none()
            return to_ticket(db_ticket) if db_ticket else None

    @Logger.io
    async def list_by_order(self, *, order_id: UUID) -> List[Ticket]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketModel).where(TicketModel.order_id == order_id).order_by(TicketModel.id)
            )
            return [to_ticket(db_ticket) for db_ticket in result.scalars().all()]

    @Logger.io
    async def invalidate_by_order(self, *, order_id: UUID) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                update(TicketModel)
                .where(TicketModel.order_id == order_id, TicketModel.is_valid.is_(True))
                .values(is_valid=False)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount  # type: ignore[attr-defined]

    @Logger.io
    async def update_pdf(self, *, ticket_id: UUID, pdf_url: str, generated_at: datetime) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(TicketModel)
                .where(TicketModel.id == ticket_id)
                .values(pdf_url=pdf_url, pdf_generated_at=generated_at)
                .execution_options(synchronize_session=False)
            )
            await session.commit()

    @Logger.io
    async def mark_scanned(self, *, ticket_id: UUID, scanned_at: datetime) -> Optional[Ticket]:
        async with self.session_factory() as session:
            result = await session.execute(
                update(TicketModel)
                .where(TicketModel.id == ticket_id, TicketModel.is_valid.is_(True))
                .values(scanned_at=scanned_at, scan_count=TicketModel.scan_count + 1)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            if result.rowcount != 1:  # type: ignore[attr-defined]
                return None
            db_ticket = await session.get(TicketModel, ticket_id)
            return to_ticket(db_ticket) if db_ticket else None
