from typing import Dict, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError, UpstreamServiceError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.box_office.app.command.get_or_generate_ticket_pdf_use_case import (
    GetOrGenerateTicketPdfUseCase,
)
from src.service.box_office.app.interface.i_box_office_query_repo import IBoxOfficeQueryRepo
from src.service.box_office.app.interface.i_email_transport import IEmailTransport
from src.service.box_office.app.interface.i_ticket_artifact_renderer import ITicketEmailComposer


class SendConfirmationEmailUseCase:
    """
    Ticket confirmation email with a PDF link per ticket.

    Runs in the background after checkout and synchronously for staff "resend".
    A missing PDF never blocks the email; the ticket codes are in the body anyway.
    """

    def __init__(
        self,
        *,
        box_office_query_repo: IBoxOfficeQueryRepo,
        email_composer: ITicketEmailComposer,
        email_transport: IEmailTransport,
        ticket_pdf_use_case: GetOrGenerateTicketPdfUseCase,
    ) -> None:
        self.box_office_query_repo = box_office_query_repo
        self.email_composer = email_composer
        self.email_transport = email_transport
        self.ticket_pdf_use_case = ticket_pdf_use_case

    @classmethod
    @inject
    def depends(
        cls,
        box_office_query_repo: IBoxOfficeQueryRepo = Depends(
            Provide[Container.box_office_query_repo]
        ),
        email_composer: ITicketEmailComposer = Depends(Provide[Container.ticket_email_composer]),
        email_transport: IEmailTransport = Depends(Provide[Container.email_transport]),
        ticket_pdf_use_case: GetOrGenerateTicketPdfUseCase = Depends(
            GetOrGenerateTicketPdfUseCase.depends
        ),
    ) -> Self:
        return cls(
            box_office_query_repo=box_office_query_repo,
            email_composer=email_composer,
            email_transport=email_transport,
            ticket_pdf_use_case=ticket_pdf_use_case,
        )

    @Logger.io
    async def send_confirmation_email(
        self, *, order_id: UUID, recipient: Optional[str] = None
    ) -> bool:
        document = await self.box_office_query_repo.get_order_document(order_id=order_id)
        if not document:
            raise NotFoundError('Order not found')

        pdf_urls: Dict[UUID, str] = {}
        for item in document.tickets:
            try:
                pdf_urls[item.ticket.id] = await self.ticket_pdf_use_case.ensure_pdf(document=item)
            except Exception as e:
                Logger.base.opt(exception=e).warning(
                    f'⚠️ [PDF] Could not prepare PDF for {item.ticket.ticket_code}; '
                    f'sending email without it'
                )

        to = recipient or document.order.customer_email
        message = self.email_composer.compose_confirmation(
            document=document, recipient=to, pdf_urls=pdf_urls
        )
        result = await self.email_transport.send(message=message)

        metrics.ticket_emails.labels(
            kind='confirmation', result='sent' if result.success else 'failed'
        ).inc()
        if result.success:
            Logger.base.info(
                f'📧 [EMAIL] Confirmation for {document.order.order_number} sent '
                f'({len(document.tickets)} ticket(s), {len(pdf_urls)} PDF(s))'
            )
        else:
            Logger.base.error(
                f'❌ [EMAIL] Confirmation for {document.order.order_number} failed: {result.error}'
            )
        return result.success

    @Logger.io
    async def resend_confirmation_email(
        self, *, order_id: UUID, recipient: Optional[str] = None
    ) -> None:
        if not await self.send_confirmation_email(order_id=order_id, recipient=recipient):
            raise UpstreamServiceError('Failed to send email')
