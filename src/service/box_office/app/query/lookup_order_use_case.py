from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.dto.box_office_dto import OrderDocument
from src.service.box_office.app.interface.i_box_office_query_repo import IBoxOfficeQueryRepo
from src.service.box_office.app.interface.i_order_command_repo import IOrderCommandRepo


class LookupOrderUseCase:
    def __init__(
        self,
        *,
        order_command_repo: IOrderCommandRepo,
        box_office_query_repo: IBoxOfficeQueryRepo,
    ) -> None:
        self.order_command_repo = order_command_repo
        self.box_office_query_repo = box_office_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        order_command_repo: IOrderCommandRepo = Depends(Provide[Container.order_command_repo]),
        box_office_query_repo: IBoxOfficeQueryRepo = Depends(
            Provide[Container.box_office_query_repo]
        ),
    ) -> Self:
        return cls(
            order_command_repo=order_command_repo,
            box_office_query_repo=box_office_query_repo,
        )

    @Logger.io
    async def lookup_order(self, *, order_number: str, email: str) -> OrderDocument:
        """
        Public "find my tickets". A wrong email is indistinguishable from a wrong
        order number so order numbers cannot be enumerated.
        """
        order = await self.order_command_repo.get_by_order_number(
            order_number=order_number.strip().upper()
        )
        if not order or not order.matches_email(email):
            raise NotFoundError('Order not found')

        return await self.get_order_detail(order_id=order.id)

    @Logger.io
    async def get_order_detail(self, *, order_id: UUID) -> OrderDocument:
        document = await self.box_office_query_repo.get_order_document(order_id=order_id)
        if not document:
            raise NotFoundError('Order not found')
        return document
