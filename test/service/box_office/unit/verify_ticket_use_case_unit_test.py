"""Unit tests for VerifyTicketUseCase (door check with optional scan)."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock

import attrs
import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError, NotFoundError
from src.service.box_office.app.command.verify_ticket_use_case import VerifyTicketUseCase
from src.service.box_office.app.dto.box_office_dto import SeatLine, TicketDocument
from src.service.box_office.domain.entity.show_seat_entity import Show
from src.service.box_office.domain.entity.ticket_entity import Ticket


NOW = datetime.now(timezone.utc)


@pytest.mark.unit
class TestVerifyTicket:
    @pytest.fixture
    def ticket(self) -> Ticket:
        return Ticket.create(order_id=uuid7(), show_seat_id=uuid7(), now=NOW)

    @pytest.fixture
    def mock_ticket_repo(self, ticket: Ticket) -> AsyncMock:
        repo = AsyncMock()
        repo.get_by_code = AsyncMock(return_value=ticket)
        repo.mark_scanned = AsyncMock(
            return_value=attrs.evolve(ticket, scanned_at=NOW, scan_count=1)
        )
        return repo

    @pytest.fixture
    def mock_query_repo(self, ticket: Ticket) -> AsyncMock:
        repo = AsyncMock()
        repo.get_ticket_document = AsyncMock(
            return_value=TicketDocument(
                ticket=ticket,
                seat=SeatLine(
                    show_seat_id=ticket.show_seat_id,
                    section='A',
                    row='C',
                    number=7,
                    price_in_cents=1500,
                ),
                show=Show(id=uuid7(), name='Spring Recital', show_date=date(2026, 5, 16)),
                order_number='ORD-20260501-ABC123',
                customer_name='Jamie Rivera',
            )
        )
        return repo

    @pytest.fixture
    def use_case(self, mock_ticket_repo: AsyncMock, mock_query_repo: AsyncMock) -> VerifyTicketUseCase:
        return VerifyTicketUseCase(
            ticket_command_repo=mock_ticket_repo, box_office_query_repo=mock_query_repo
        )

    @pytest.mark.asyncio
    async def test_lookup_without_scan_reports_only(
        self, use_case: VerifyTicketUseCase, ticket: Ticket, mock_ticket_repo: AsyncMock
    ) -> None:
        verification = await use_case.verify_ticket(ticket_code=ticket.ticket_code.lower())

        assert verification.ticket == ticket
        assert verification.show_name == 'Spring Recital'
        assert verification.scanned_now is False
        mock_ticket_repo.get_by_code.assert_awaited_once_with(ticket_code=ticket.ticket_code)
        mock_ticket_repo.mark_scanned.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_scan_bumps_counter(
        self, use_case: VerifyTicketUseCase, ticket: Ticket
    ) -> None:
        verification = await use_case.verify_ticket(
            ticket_code=ticket.ticket_code, mark_scanned=True
        )

        assert verification.scanned_now is True
        assert verification.ticket.scan_count == 1
        assert verification.ticket.scanned_at == NOW

    @pytest.mark.asyncio
    async def test_invalidated_ticket_cannot_be_scanned(
        self, use_case: VerifyTicketUseCase, ticket: Ticket, mock_ticket_repo: AsyncMock
    ) -> None:
        ticket.is_valid = False

        with pytest.raises(DomainError, match='no longer valid'):
            await use_case.verify_ticket(ticket_code=ticket.ticket_code, mark_scanned=True)
        mock_ticket_repo.mark_scanned.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalidated_between_read_and_scan(
        self, use_case: VerifyTicketUseCase, ticket: Ticket, mock_ticket_repo: AsyncMock
    ) -> None:
        mock_ticket_repo.mark_scanned = AsyncMock(return_value=None)

        with pytest.raises(DomainError):
            await use_case.verify_ticket(ticket_code=ticket.ticket_code, mark_scanned=True)

    @pytest.mark.asyncio
    async def test_unknown_and_malformed_codes(
        self, use_case: VerifyTicketUseCase, ticket: Ticket, mock_ticket_repo: AsyncMock
    ) -> None:
        with pytest.raises(DomainError, match='Invalid ticket code format'):
            await use_case.verify_ticket(ticket_code='hello')

        mock_ticket_repo.get_by_code = AsyncMock(return_value=None)
        with pytest.raises(NotFoundError):
            await use_case.verify_ticket(ticket_code=ticket.ticket_code)
