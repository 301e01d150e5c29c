from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.box_office.app.interface.i_box_office_query_repo import IBoxOfficeQueryRepo
from src.service.box_office.app.interface.i_email_transport import IEmailTransport
from src.service.box_office.app.interface.i_ticket_artifact_renderer import ITicketEmailComposer


class SendRefundNotificationUseCase:
    def __init__(
        self,
        *,
        box_office_query_repo: IBoxOfficeQueryRepo,
        email_composer: ITicketEmailComposer,
        email_transport: IEmailTransport,
    ) -> None:
        self.box_office_query_repo = box_office_query_repo
        self.email_composer = email_composer
        self.email_transport = email_transport

    @classmethod
    @inject
    def depends(
        cls,
        box_office_query_repo: IBoxOfficeQueryRepo = Depends(
            Provide[Container.box_office_query_repo]
        ),
        email_composer: ITicketEmailComposer = Depends(Provide[Container.ticket_email_composer]),
        email_transport: IEmailTransport = Depends(Provide[Container.email_transport]),
    ) -> Self:
        return cls(
            box_office_query_repo=box_office_query_repo,
            email_composer=email_composer,
            email_transport=email_transport,
        )

    @Logger.io
    async def send_refund_notification(
        self, *, order_id: UUID, amount_in_cents: int, is_full_refund: bool
    ) -> bool:
        document = await self.box_office_query_repo.get_order_document(order_id=order_id)
        if not document:
            raise NotFoundError('Order not found')

        message = self.email_composer.compose_refund(
            document=document,
            recipient=document.order.customer_email,
            amount_in_cents=amount_in_cents,
            is_full_refund=is_full_refund,
        )
        result = await self.email_transport.send(message=message)

        metrics.ticket_emails.labels(
            kind='refund', result='sent' if result.success else 'failed'
        ).inc()
        if not result.success:
            Logger.base.error(
                f'❌ [EMAIL] Refund notice for {document.order.order_number} failed: {result.error}'
            )
        return result.success
