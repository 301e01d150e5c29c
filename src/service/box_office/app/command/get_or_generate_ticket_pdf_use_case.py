from datetime import datetime, timedelta, timezone
from typing import Optional, Self
from uuid import UUID

import anyio.to_thread
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.box_office.app.dto.box_office_dto import TicketDocument
from src.service.box_office.app.interface.i_box_office_query_repo import IBoxOfficeQueryRepo
from src.service.box_office.app.interface.i_object_storage import IObjectStorage
from src.service.box_office.app.interface.i_ticket_artifact_renderer import ITicketPdfRenderer
from src.service.box_office.app.interface.i_ticket_command_repo import ITicketCommandRepo


PDF_CONTENT_TYPE = 'application/pdf'


def ticket_pdf_path(ticket_id: UUID) -> str:
    return f'{ticket_id}.pdf'


class GetOrGenerateTicketPdfUseCase:
    """
    Cache-aside ticket PDFs.

    A ticket whose PDF was uploaded within the freshness window is served from its
    stored URL; otherwise the PDF is rendered, uploaded (overwriting) and recorded.
    """

    def __init__(
        self,
        *,
        ticket_command_repo: ITicketCommandRepo,
        box_office_query_repo: IBoxOfficeQueryRepo,
        pdf_renderer: ITicketPdfRenderer,
        object_storage: IObjectStorage,
        bucket: Optional[str] = None,
        cache_hours: Optional[int] = None,
    ) -> None:
        self.ticket_command_repo = ticket_command_repo
        self.box_office_query_repo = box_office_query_repo
        self.pdf_renderer = pdf_renderer
        self.object_storage = object_storage
        self.bucket = bucket or settings.TICKET_PDF_BUCKET
        self.max_age = timedelta(hours=cache_hours or settings.TICKET_PDF_CACHE_HOURS)

    @classmethod
    @inject
    def depends(
        cls,
        ticket_command_repo: ITicketCommandRepo = Depends(Provide[Container.ticket_command_repo]),
        box_office_query_repo: IBoxOfficeQueryRepo = Depends(
            Provide[Container.box_office_query_repo]
        ),
        pdf_renderer: ITicketPdfRenderer = Depends(Provide[Container.ticket_pdf_renderer]),
        object_storage: IObjectStorage = Depends(Provide[Container.object_storage]),
    ) -> Self:
        return cls(
            ticket_command_repo=ticket_command_repo,
            box_office_query_repo=box_office_query_repo,
            pdf_renderer=pdf_renderer,
            object_storage=object_storage,
        )

    @Logger.io
    async def get_or_generate(self, *, ticket_id: UUID) -> str:
        now = datetime.now(timezone.utc)
        ticket = await self.ticket_command_repo.get_by_id(ticket_id=ticket_id)
        if not ticket:
            raise NotFoundError('Ticket not found')

        if ticket.has_fresh_pdf(now=now, max_age=self.max_age):
            return ticket.pdf_url  # type: ignore[return-value]

        document = await self.box_office_query_repo.get_ticket_document(ticket_id=ticket_id)
        if not document:
            raise NotFoundError('Ticket not found')
        return await self._generate(document=document, now=now)

    async def ensure_pdf(self, *, document: TicketDocument) -> str:
        """Same as get_or_generate when the caller already holds the ticket document."""
        now = datetime.now(timezone.utc)
        if document.ticket.has_fresh_pdf(now=now, max_age=self.max_age):
            return document.ticket.pdf_url  # type: ignore[return-value]
        return await self._generate(document=document, now=now)

    @Logger.io
    async def download(self, *, ticket_id: UUID) -> bytes:
        await self.get_or_generate(ticket_id=ticket_id)
        return await self.object_storage.download(
            bucket=self.bucket, path=ticket_pdf_path(ticket_id)
        )

    async def _generate(self, *, document: TicketDocument, now: datetime) -> str:
        ticket = document.ticket
        # reportlab is CPU-bound
        pdf = await anyio.to_thread.run_sync(lambda: self.pdf_renderer.render(document=document))

        url = await self.object_storage.upload(
            bucket=self.bucket,
            path=ticket_pdf_path(ticket.id),
            data=pdf,
            content_type=PDF_CONTENT_TYPE,
        )
        await self.ticket_command_repo.update_pdf(ticket_id=ticket.id, pdf_url=url, generated_at=now)

        metrics.ticket_pdfs_generated.inc()
        Logger.base.info(f'📄 [PDF] Generated {ticket.ticket_code} ({len(pdf)} bytes) -> {url}')
        return url
