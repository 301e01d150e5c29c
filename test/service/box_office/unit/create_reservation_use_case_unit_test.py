"""
Unit tests for CreateReservationUseCase

Flow under test:
1. Insert reservation row
2. Check every seat is free and belongs to the show
3. Link seats, claim them with one conditional update
4. Any failure after step 1 releases claimed seats and deletes the row
"""

from datetime import datetime, timedelta, timezone
from typing import List
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
from uuid_utils.compat import uuid7

from src.service.box_office.app.command.create_reservation_use_case import (
    CreateReservationUseCase,
)
from src.service.box_office.domain.entity.show_seat_entity import Seat, SeatStatus, ShowSeat
from src.service.box_office.domain.exception.box_office_errors import (
    ReservationCreateFailedError,
    SeatUnavailableError,
)


def _show_seat(show_id: UUID, number: int, **overrides) -> ShowSeat:
    seat_id = uuid7()
    params = dict(
        id=uuid7(),
        show_id=show_id,
        seat_id=seat_id,
        price_in_cents=1500,
        seat=Seat(id=seat_id, section='A', row='B', number=number),
    )
    params.update(overrides)
    return ShowSeat(**params)


@pytest.mark.unit
class TestCreateReservation:
    @pytest.fixture
    def show_id(self) -> UUID:
        return uuid7()

    @pytest.fixture
    def show_seats(self, show_id: UUID) -> List[ShowSeat]:
        return [_show_seat(show_id, 1), _show_seat(show_id, 2)]

    @pytest.fixture
    def mock_show_seat_repo(self, show_seats: List[ShowSeat]) -> AsyncMock:
        repo = AsyncMock()
        repo.get_by_ids = AsyncMock(return_value=show_seats)
        repo.reserve_seats = AsyncMock(return_value=len(show_seats))
        repo.release_reserved_seats = AsyncMock(return_value=0)
        return repo

    @pytest.fixture
    def mock_reservation_repo(self) -> AsyncMock:
        return AsyncMock()

    @pytest.fixture
    def use_case(
        self, mock_show_seat_repo: AsyncMock, mock_reservation_repo: AsyncMock
    ) -> CreateReservationUseCase:
        return CreateReservationUseCase(
            show_seat_command_repo=mock_show_seat_repo,
            reservation_command_repo=mock_reservation_repo,
            hold_minutes=30,
            max_seats=10,
        )

    @pytest.mark.asyncio
    async def test_success_returns_summary_with_total(
        self,
        use_case: CreateReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        mock_reservation_repo: AsyncMock,
        show_id: UUID,
        show_seats: List[ShowSeat],
    ) -> None:
        """
        Given: Two free seats of the show
        When: Holding them
        Then: Both are claimed in one call and the summary totals their prices
        """
        summary = await use_case.create_reservation(
            session_id='session-a',
            show_id=show_id,
            show_seat_ids=[show_seat.id for show_seat in show_seats],
            email='parent@example.com',
        )

        assert summary.total_amount_in_cents == 3000
        assert [seat.number for seat in summary.seats] == [1, 2]
        assert 29 * 60 < summary.time_remaining_seconds <= 30 * 60
        mock_reservation_repo.create.assert_awaited_once()
        mock_reservation_repo.add_seats.assert_awaited_once()
        reserve_kwargs = mock_show_seat_repo.reserve_seats.await_args.kwargs
        assert reserve_kwargs['reservation_id'] == summary.reservation.id
        assert reserve_kwargs['reserved_until'] == summary.reservation.expires_at
        mock_reservation_repo.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_race_releases_and_deletes(
        self,
        use_case: CreateReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        mock_reservation_repo: AsyncMock,
        show_id: UUID,
        show_seats: List[ShowSeat],
    ) -> None:
        """
        Given: A concurrent hold takes one of the seats between read and claim
        When: The conditional update claims only 1 of 2 seats
        Then: 409, this hold's seats are released and the reservation row deleted
        """
        mock_show_seat_repo.reserve_seats = AsyncMock(return_value=1)

        with pytest.raises(SeatUnavailableError) as exc_info:
            await use_case.create_reservation(
                session_id='session-a',
                show_id=show_id,
                show_seat_ids=[show_seat.id for show_seat in show_seats],
                email='parent@example.com',
            )

        assert exc_info.value.status_code == 409
        reservation = mock_reservation_repo.create.await_args.kwargs['reservation']
        mock_show_seat_repo.release_reserved_seats.assert_awaited_once_with(
            reservation_id=reservation.id
        )
        mock_reservation_repo.delete.assert_awaited_once_with(reservation_id=reservation.id)

    @pytest.mark.asyncio
    async def test_taken_or_foreign_seat_is_unavailable(
        self,
        use_case: CreateReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        mock_reservation_repo: AsyncMock,
        show_id: UUID,
    ) -> None:
        now = datetime.now(timezone.utc)
        held = _show_seat(
            show_id,
            1,
            status=SeatStatus.RESERVED,
            reserved_until=now + timedelta(minutes=10),
            reserved_by=uuid7(),
        )
        foreign = _show_seat(uuid7(), 2)
        mock_show_seat_repo.get_by_ids = AsyncMock(return_value=[held, foreign])

        with pytest.raises(SeatUnavailableError) as exc_info:
            await use_case.create_reservation(
                session_id='session-a',
                show_id=show_id,
                show_seat_ids=[held.id, foreign.id],
                email='parent@example.com',
            )

        assert set(exc_info.value.show_seat_ids) == {held.id, foreign.id}
        mock_reservation_repo.add_seats.assert_not_awaited()
        mock_show_seat_repo.reserve_seats.assert_not_awaited()
        mock_reservation_repo.delete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lapsed_hold_counts_as_free(
        self,
        use_case: CreateReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        show_id: UUID,
    ) -> None:
        lapsed = _show_seat(
            show_id,
            1,
            status=SeatStatus.RESERVED,
            reserved_until=datetime.now(timezone.utc) - timedelta(minutes=1),
            reserved_by=uuid7(),
        )
        mock_show_seat_repo.get_by_ids = AsyncMock(return_value=[lapsed])
        mock_show_seat_repo.reserve_seats = AsyncMock(return_value=1)

        summary = await use_case.create_reservation(
            session_id='session-a',
            show_id=show_id,
            show_seat_ids=[lapsed.id],
            email='parent@example.com',
        )

        assert summary.reservation.show_seat_ids == [lapsed.id]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped_after_cleanup(
        self,
        use_case: CreateReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        mock_reservation_repo: AsyncMock,
        show_id: UUID,
        show_seats: List[ShowSeat],
    ) -> None:
        mock_reservation_repo.add_seats = AsyncMock(side_effect=RuntimeError('db down'))

        with pytest.raises(ReservationCreateFailedError) as exc_info:
            await use_case.create_reservation(
                session_id='session-a',
                show_id=show_id,
                show_seat_ids=[show_seat.id for show_seat in show_seats],
                email='parent@example.com',
            )

        assert exc_info.value.status_code == 500
        mock_show_seat_repo.release_reserved_seats.assert_awaited_once()
        mock_reservation_repo.delete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_selection_writes_nothing(
        self,
        use_case: CreateReservationUseCase,
        mock_reservation_repo: AsyncMock,
        show_id: UUID,
    ) -> None:
        with pytest.raises(Exception, match='At least one seat'):
            await use_case.create_reservation(
                session_id='session-a', show_id=show_id, show_seat_ids=[], email='a@b.co'
            )

        mock_reservation_repo.create.assert_not_awaited()
