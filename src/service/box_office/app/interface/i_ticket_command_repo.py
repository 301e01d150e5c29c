from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.service.box_office.domain.entity.ticket_entity import Ticket


class ITicketCommandRepo(ABC):
    @abstractmethod
    async def create_many(self, *, tickets: List[Ticket]) -> List[Ticket]:
        """Insert all tickets of an order in one transaction (all or nothing)."""
        pass

    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def get_by_code(self, *, ticket_code: str) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def list_by_order(self, *, order_id: UUID) -> List[Ticket]:
        pass

    @abstractmethod
    async def invalidate_by_order(self, *, order_id: UUID) -> int:
        pass

    @abstractmethod
    async def update_pdf(self, *, ticket_id: UUID, pdf_url: str, generated_at: datetime) -> None:
        pass

    @abstractmethod
    async def mark_scanned(self, *, ticket_id: UUID, scanned_at: datetime) -> Optional[Ticket]:
        """
        Record a door scan. Conditional on the ticket still being valid.

        Returns:
            Updated ticket, or None if it was invalidated in the meantime
        """
        pass
