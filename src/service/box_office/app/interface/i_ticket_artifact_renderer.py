from abc import ABC, abstractmethod
from typing import Dict
from uuid import UUID

from src.service.box_office.app.dto.box_office_dto import OrderDocument, TicketDocument
from src.service.box_office.app.interface.i_email_transport import EmailMessage


class ITicketPdfRenderer(ABC):
    @abstractmethod
    def render(self, *, document: TicketDocument) -> bytes:
        """One page per ticket. Same document in, same bytes out."""
        pass


class ITicketEmailComposer(ABC):
    @abstractmethod
    def compose_confirmation(
        self, *, document: OrderDocument, recipient: str, pdf_urls: Dict[UUID, str]
    ) -> EmailMessage:
        pass

    @abstractmethod
    def compose_refund(
        self,
        *,
        document: OrderDocument,
        recipient: str,
        amount_in_cents: int,
        is_full_refund: bool,
    ) -> EmailMessage:
        pass
