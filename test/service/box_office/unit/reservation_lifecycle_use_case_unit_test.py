"""
Unit tests for the hold lifecycle: cancel, extend and the expiry sweep.

All three race on the same is_active compare-and-swap; these tests pin down what
each reports when it wins or loses that swap.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import attrs
import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import (
    ConflictError,
    ForbiddenError,
    GoneError,
    NotFoundError,
)
from src.service.box_office.app.command.cancel_reservation_use_case import (
    CancelReservationUseCase,
)
from src.service.box_office.app.command.extend_reservation_use_case import (
    ExtendReservationUseCase,
)
from src.service.box_office.app.command.release_expired_reservations_use_case import (
    ReleaseExpiredReservationsUseCase,
)
from src.service.box_office.domain.entity.reservation_entity import Reservation
from src.service.box_office.domain.exception.box_office_errors import (
    MaxExtensionsReachedError,
    SeatHoldLostError,
)


def _make_reservation(*, session_id: str = 'session-a', **overrides) -> Reservation:
    reservation = Reservation.create(
        session_id=session_id,
        show_id=uuid7(),
        show_seat_ids=[uuid7(), uuid7()],
        email='parent@example.com',
        phone=None,
        hold_minutes=30,
        max_seats=10,
        now=datetime.now(timezone.utc),
    )
    return attrs.evolve(reservation, **overrides)


@pytest.fixture
def mock_show_seat_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.release_reserved_seats = AsyncMock(return_value=2)
    repo.extend_reserved_seats = AsyncMock(return_value=2)
    repo.release_lapsed_holds = AsyncMock(return_value=0)
    return repo


@pytest.fixture
def mock_reservation_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.deactivate_if_active = AsyncMock(return_value=True)
    repo.extend_if_active = AsyncMock(return_value=True)
    return repo


@pytest.mark.unit
class TestCancelReservation:
    @pytest.fixture
    def use_case(
        self, mock_show_seat_repo: AsyncMock, mock_reservation_repo: AsyncMock
    ) -> CancelReservationUseCase:
        return CancelReservationUseCase(
            show_seat_command_repo=mock_show_seat_repo,
            reservation_command_repo=mock_reservation_repo,
        )

    @pytest.mark.asyncio
    async def test_cancel_active_hold_releases_seats(
        self,
        use_case: CancelReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        mock_reservation_repo: AsyncMock,
    ) -> None:
        reservation = _make_reservation()
        mock_reservation_repo.get_by_token = AsyncMock(return_value=reservation)

        assert await use_case.cancel_reservation(token=reservation.token) is True
        mock_reservation_repo.deactivate_if_active.assert_awaited_once_with(
            reservation_id=reservation.id
        )
        mock_show_seat_repo.release_reserved_seats.assert_awaited_once_with(
            reservation_id=reservation.id
        )

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent_for_inactive_hold(
        self,
        use_case: CancelReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        mock_reservation_repo: AsyncMock,
    ) -> None:
        reservation = _make_reservation(is_active=False)
        mock_reservation_repo.get_by_token = AsyncMock(return_value=reservation)

        assert await use_case.cancel_reservation(token=reservation.token) is False
        mock_reservation_repo.deactivate_if_active.assert_not_awaited()
        mock_show_seat_repo.release_reserved_seats.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_losing_swap_to_checkout_keeps_seats(
        self,
        use_case: CancelReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        mock_reservation_repo: AsyncMock,
    ) -> None:
        """
        Given: A checkout deactivated the hold after we read it
        When: Cancelling
        Then: False, and the (now sold) seats are not touched
        """
        reservation = _make_reservation()
        mock_reservation_repo.get_by_token = AsyncMock(return_value=reservation)
        mock_reservation_repo.deactivate_if_active = AsyncMock(return_value=False)

        assert await use_case.cancel_reservation(token=reservation.token) is False
        mock_show_seat_repo.release_reserved_seats.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_or_unknown_token_is_404(
        self, use_case: CancelReservationUseCase, mock_reservation_repo: AsyncMock
    ) -> None:
        mock_reservation_repo.get_by_token = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await use_case.cancel_reservation(token='not-a-token')
        mock_reservation_repo.get_by_token.assert_not_awaited()

        with pytest.raises(NotFoundError):
            await use_case.cancel_reservation(token='a' * 64)

    @pytest.mark.asyncio
    async def test_session_cancel_requires_owner(
        self, use_case: CancelReservationUseCase, mock_reservation_repo: AsyncMock
    ) -> None:
        reservation = _make_reservation()
        mock_reservation_repo.get_by_id = AsyncMock(return_value=reservation)

        with pytest.raises(ForbiddenError):
            await use_case.cancel_session_reservation(
                reservation_id=reservation.id, session_id='session-b'
            )
        assert (
            await use_case.cancel_session_reservation(
                reservation_id=reservation.id, session_id='session-a'
            )
            is True
        )


@pytest.mark.unit
class TestExtendReservation:
    @pytest.fixture
    def use_case(
        self, mock_show_seat_repo: AsyncMock, mock_reservation_repo: AsyncMock
    ) -> ExtendReservationUseCase:
        return ExtendReservationUseCase(
            show_seat_command_repo=mock_show_seat_repo,
            reservation_command_repo=mock_reservation_repo,
            extension_minutes=5,
            max_extensions=3,
        )

    @pytest.mark.asyncio
    async def test_extend_pushes_reservation_and_seats(
        self,
        use_case: ExtendReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        mock_reservation_repo: AsyncMock,
    ) -> None:
        reservation = _make_reservation()
        mock_reservation_repo.get_by_token = AsyncMock(return_value=reservation)

        extended = await use_case.extend_reservation(
            token=reservation.token, session_id='session-a'
        )

        assert extended.expires_at == reservation.expires_at + timedelta(minutes=5)
        assert extended.extension_count == 1
        assert use_case.extensions_remaining(extended) == 2
        kwargs = mock_reservation_repo.extend_if_active.await_args.kwargs
        assert kwargs['expected_extension_count'] == 0
        assert kwargs['new_expires_at'] == extended.expires_at
        mock_show_seat_repo.extend_reserved_seats.assert_awaited_once_with(
            reservation_id=reservation.id, reserved_until=extended.expires_at
        )

    @pytest.mark.asyncio
    async def test_fourth_extension_is_rejected(
        self, use_case: ExtendReservationUseCase, mock_reservation_repo: AsyncMock
    ) -> None:
        reservation = _make_reservation(extension_count=3)
        mock_reservation_repo.get_by_token = AsyncMock(return_value=reservation)

        with pytest.raises(MaxExtensionsReachedError):
            await use_case.extend_reservation(token=reservation.token, session_id='session-a')
        mock_reservation_repo.extend_if_active.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_session_cannot_extend(
        self, use_case: ExtendReservationUseCase, mock_reservation_repo: AsyncMock
    ) -> None:
        reservation = _make_reservation()
        mock_reservation_repo.get_by_token = AsyncMock(return_value=reservation)

        with pytest.raises(ForbiddenError):
            await use_case.extend_reservation(token=reservation.token, session_id='session-b')

    @pytest.mark.asyncio
    async def test_lost_swap_reports_the_winning_state(
        self,
        use_case: ExtendReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        mock_reservation_repo: AsyncMock,
    ) -> None:
        """
        Given: The hold was checked out between read and conditional update
        When: Extending
        Then: 410 from the reloaded (inactive) hold; seats untouched
        """
        reservation = _make_reservation()
        mock_reservation_repo.get_by_token = AsyncMock(return_value=reservation)
        mock_reservation_repo.extend_if_active = AsyncMock(return_value=False)
        mock_reservation_repo.get_by_id = AsyncMock(
            return_value=attrs.evolve(reservation, is_active=False)
        )

        with pytest.raises(GoneError):
            await use_case.extend_reservation(token=reservation.token, session_id='session-a')
        mock_show_seat_repo.extend_reserved_seats.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_swap_to_concurrent_extend_is_conflict(
        self, use_case: ExtendReservationUseCase, mock_reservation_repo: AsyncMock
    ) -> None:
        reservation = _make_reservation()
        mock_reservation_repo.get_by_token = AsyncMock(return_value=reservation)
        mock_reservation_repo.extend_if_active = AsyncMock(return_value=False)
        mock_reservation_repo.get_by_id = AsyncMock(
            return_value=attrs.evolve(reservation, extension_count=1)
        )

        with pytest.raises(ConflictError):
            await use_case.extend_reservation(token=reservation.token, session_id='session-a')

    @pytest.mark.asyncio
    async def test_short_seat_extension_releases_the_hold(
        self,
        use_case: ExtendReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        mock_reservation_repo: AsyncMock,
    ) -> None:
        """
        Given: One of two held seats lapsed and was taken by another reservation
        When: Extending the hold pushes only one seat row forward
        Then: 409, the reservation is deactivated and its remaining seat released
        """
        reservation = _make_reservation()
        mock_reservation_repo.get_by_token = AsyncMock(return_value=reservation)
        mock_show_seat_repo.extend_reserved_seats = AsyncMock(return_value=1)

        with pytest.raises(SeatHoldLostError) as exc_info:
            await use_case.extend_reservation(token=reservation.token, session_id='session-a')

        assert exc_info.value.status_code == 409
        mock_reservation_repo.deactivate_if_active.assert_awaited_once_with(
            reservation_id=reservation.id
        )
        mock_show_seat_repo.release_reserved_seats.assert_awaited_once_with(
            reservation_id=reservation.id
        )

    @pytest.mark.asyncio
    async def test_short_seat_extension_after_concurrent_deactivate_keeps_seats(
        self,
        use_case: ExtendReservationUseCase,
        mock_show_seat_repo: AsyncMock,
        mock_reservation_repo: AsyncMock,
    ) -> None:
        reservation = _make_reservation()
        mock_reservation_repo.get_by_token = AsyncMock(return_value=reservation)
        mock_show_seat_repo.extend_reserved_seats = AsyncMock(return_value=0)
        mock_reservation_repo.deactivate_if_active = AsyncMock(return_value=False)

        with pytest.raises(SeatHoldLostError):
            await use_case.extend_reservation(token=reservation.token, session_id='session-a')
        mock_show_seat_repo.release_reserved_seats.assert_not_awaited()


@pytest.mark.unit
class TestReleaseExpiredReservations:
    @pytest.mark.asyncio
    async def test_sweep_releases_only_swaps_it_wins(
        self, mock_show_seat_repo: AsyncMock, mock_reservation_repo: AsyncMock
    ) -> None:
        """
        Given: Two lapsed holds, one of which a concurrent cancel deactivates first
        When: Sweeping
        Then: Only the hold whose swap succeeded has its seats released
        """
        won, lost = _make_reservation(), _make_reservation()
        mock_reservation_repo.list_expired_active = AsyncMock(return_value=[won, lost])
        mock_reservation_repo.deactivate_if_active = AsyncMock(side_effect=[True, False])
        mock_show_seat_repo.release_lapsed_holds = AsyncMock(return_value=1)
        use_case = ReleaseExpiredReservationsUseCase(
            show_seat_command_repo=mock_show_seat_repo,
            reservation_command_repo=mock_reservation_repo,
        )

        result = await use_case.release_expired(now=datetime.now(timezone.utc))

        assert result.reservations_expired == 1
        assert result.seats_released == 3
        mock_show_seat_repo.release_reserved_seats.assert_awaited_once_with(reservation_id=won.id)
