from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.service.box_office.app.dto.box_office_dto import OrderDocument, TicketDocument
from src.service.box_office.domain.entity.show_seat_entity import Show, ShowSeat


class IBoxOfficeQueryRepo(ABC):
    """Read-side joins used by the seat map and the ticket artifact pipeline."""

    @abstractmethod
    async def get_show(self, *, show_id: UUID) -> Optional[Show]:
        pass

    @abstractmethod
    async def list_show_seats(self, *, show_id: UUID) -> List[ShowSeat]:
        """All seats of a show with venue seat attached, ordered section/row/number."""
        pass

    @abstractmethod
    async def get_order_document(self, *, order_id: UUID) -> Optional[OrderDocument]:
        """Order + show + every ticket with its seat."""
        pass

    @abstractmethod
    async def get_ticket_document(self, *, ticket_id: UUID) -> Optional[TicketDocument]:
        pass
