from datetime import datetime, timezone
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.dto.box_office_dto import TicketVerification
from src.service.box_office.app.interface.i_box_office_query_repo import IBoxOfficeQueryRepo
from src.service.box_office.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.box_office.domain.value_object.ticket_code import validate_ticket_code


class VerifyTicketUseCase:
    def __init__(
        self,
        *,
        ticket_command_repo: ITicketCommandRepo,
        box_office_query_repo: IBoxOfficeQueryRepo,
    ) -> None:
        self.ticket_command_repo = ticket_command_repo
        self.box_office_query_repo = box_office_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_command_repo: ITicketCommandRepo = Depends(Provide[Container.ticket_command_repo]),
        box_office_query_repo: IBoxOfficeQueryRepo = Depends(
            Provide[Container.box_office_query_repo]
        ),
    ) -> Self:
        return cls(
            ticket_command_repo=ticket_command_repo,
            box_office_query_repo=box_office_query_repo,
        )

    @Logger.io
    async def verify_ticket(self, *, ticket_code: str, mark_scanned: bool = False) -> TicketVerification:
        """
        Door check. Without `mark_scanned` this only reports; with it the ticket must
        still be valid and its scan counter is bumped.

        Raises:
            DomainError: malformed code, or scanning an invalidated ticket
            NotFoundError: no ticket with this code
        """
        code = validate_ticket_code(ticket_code)
        ticket = await self.ticket_command_repo.get_by_code(ticket_code=code)
        if not ticket:
            raise NotFoundError('Ticket not found')

        document = await self.box_office_query_repo.get_ticket_document(ticket_id=ticket.id)
        if not document:
            raise NotFoundError('Ticket not found')

        if mark_scanned:
            ticket.validate_scannable()
            scanned = await self.ticket_command_repo.mark_scanned(
                ticket_id=ticket.id, scanned_at=datetime.now(timezone.utc)
            )
            if scanned is None:
                raise DomainError('Ticket is no longer valid')
            if scanned.scan_count > 1:
                Logger.base.warning(
                    f'🔁 [SCAN] {code} scanned {scanned.scan_count} times '
                    f'(first at {ticket.scanned_at})'
                )
            ticket = scanned

        return TicketVerification(
            ticket=ticket,
            order_number=document.order_number,
            customer_name=document.customer_name,
            show_name=document.show.name,
            seat=document.seat,
            scanned_now=mark_scanned,
        )
