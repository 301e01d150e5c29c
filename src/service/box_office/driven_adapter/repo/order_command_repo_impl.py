from typing import AsyncContextManager, Callable, Optional
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.box_office.domain.entity.order_entity import Order, OrderStatus
from src.service.box_office.domain.exception.box_office_errors import PaymentAlreadyUsedError
from src.service.box_office.driven_adapter.model.order_model import TicketModel, TicketOrderModel
from src.service.box_office.driven_adapter.repo.model_mapper import to_order, to_order_model


class OrderCommandRepoImpl(IOrderCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, order: Order) -> Order:
        async with self.session_factory() as session:
            session.add(to_order_model(order))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if 'payment_intent_id' in str(e.orig):
                    raise PaymentAlreadyUsedError() from e
                raise
        return order

    @Logger.io
    async def delete(self, *, order_id: UUID) -> None:
        async with self.session_factory() as session:
            await session.execute(delete(TicketModel).where(TicketModel.order_id == order_id))
            await session.execute(delete(TicketOrderModel).where(TicketOrderModel.id == order_id))
            await session.commit()

    @Logger.io
    async def get_by_id(self, *, order_id: UUID) -> Optional[Order]:
        async with self.session_factory() as session:
            db_order = await session.get(TicketOrderModel, order_id)
            return to_order(db_order) if db_order else None

    @Logger.io
    async def get_by_order_number(self, *, order_number: str) -> Optional[Order]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketOrderModel).where(TicketOrderModel.order_number == order_number)
            )
            db_order = result.scalar_one_or_none()
            return to_order(db_order) if db_order else None

    @Logger.io
    async def get_by_payment_intent_id(self, *, payment_intent_id: str) -> Optional[Order]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketOrderModel).where(
                    TicketOrderModel.payment_intent_id == payment_intent_id
                )
            )
            db_order = result.scalar_one_or_none()
            return to_order(db_order) if db_order else None

    @Logger.io
    async def claim_refund_amount(
        self, *, order_id: UUID, expected_refunded_in_cents: int, amount_in_cents: int
    ) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                update(TicketOrderModel)
                .where(
                    TicketOrderModel.id == order_id,
                    TicketOrderModel.status == OrderStatus.PAID.value,
                    TicketOrderModel.refunded_amount_in_cents == expected_refunded_in_cents,
                    TicketOrderModel.total_amount_in_cents
                    >= TicketOrderModel.refunded_amount_in_cents + amount_in_cents,
                )
                .values(
                    refunded_amount_in_cents=TicketOrderModel.refunded_amount_in_cents
                    + amount_in_cents
                )
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def release_refund_amount(self, *, order_id: UUID, amount_in_cents: int) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                update(TicketOrderModel)
                .where(
                    TicketOrderModel.id == order_id,
                    TicketOrderModel.refunded_amount_in_cents >= amount_in_cents,
                )
                .values(
                    refunded_amount_in_cents=TicketOrderModel.refunded_amount_in_cents
                    - amount_in_cents
                )
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def update_refund_state(
        self, *, order: Order, note: str, expected_status: OrderStatus
    ) -> Optional[Order]:
        stmt = update(TicketOrderModel).where(TicketOrderModel.id == order.id)
        values = {
            # Appended in SQL so concurrent partial refunds never drop each other's note
            'notes': func.coalesce(TicketOrderModel.notes + '\n', '') + note,
            'updated_at': order.updated_at,
        }
        if order.status != expected_status:
            stmt = stmt.where(TicketOrderModel.status == expected_status.value)
            values['status'] = order.status.value

        async with self.session_factory() as session:
            result = await session.execute(
                stmt.values(**values).execution_options(synchronize_session=False)
            )
            await session.commit()
            if result.rowcount != 1:  # type: ignore[attr-defined]
                return None
        return order
