"""
Unit tests for the Reservation entity

Covers creation rules, ownership, and the purchasable / readable / extendable
checks that the checkout, read and extend paths rely on.
"""

from datetime import datetime, timedelta, timezone

import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError, ForbiddenError, GoneError
from src.service.box_office.domain.entity.reservation_entity import (
    Reservation,
    is_valid_reservation_token,
)
from src.service.box_office.domain.exception.box_office_errors import (
    MaxExtensionsReachedError,
    ReservationExpiredError,
    ReservationInactiveError,
)


NOW = datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc)


def _make_reservation(**overrides) -> Reservation:
    params = dict(
        session_id='session-a',
        show_id=uuid7(),
        show_seat_ids=[uuid7(), uuid7()],
        email='  parent@example.com ',
        phone=' 555-0100 ',
        hold_minutes=30,
        max_seats=10,
        now=NOW,
    )
    params.update(overrides)
    return Reservation.create(**params)


@pytest.mark.unit
class TestReservationCreate:
    def test_create_sets_token_expiry_and_normalized_contact(self) -> None:
        """
        Given: A valid seat selection
        When: Creating a reservation
        Then: A 64 hex char token is issued and the hold expires 30 minutes from now
        """
        reservation = _make_reservation()

        assert is_valid_reservation_token(reservation.token)
        assert reservation.expires_at == NOW + timedelta(minutes=30)
        assert reservation.is_active is True
        assert reservation.extension_count == 0
        assert reservation.email == 'parent@example.com'
        assert reservation.phone == '555-0100'

    def test_tokens_are_unique_per_reservation(self) -> None:
        assert _make_reservation().token != _make_reservation().token

    @pytest.mark.parametrize(
        'overrides, message',
        [
            ({'show_seat_ids': []}, 'At least one seat must be selected'),
            ({'max_seats': 1}, 'Maximum 1 seats per reservation'),
            ({'email': 'not-an-email'}, 'Invalid email format'),
            ({'email': '   '}, 'Email is required'),
            ({'session_id': ''}, 'Session is required to hold seats'),
        ],
    )
    def test_invalid_selection_is_rejected(self, overrides: dict, message: str) -> None:
        with pytest.raises(DomainError) as exc_info:
            _make_reservation(**overrides)
        assert exc_info.value.message == message
        assert exc_info.value.status_code == 400

    def test_duplicate_seats_are_rejected(self) -> None:
        seat_id = uuid7()
        with pytest.raises(DomainError, match='Duplicate seats'):
            _make_reservation(show_seat_ids=[seat_id, seat_id])


@pytest.mark.unit
class TestReservationChecks:
    def test_other_session_is_forbidden(self) -> None:
        reservation = _make_reservation()

        with pytest.raises(ForbiddenError):
            reservation.validate_owned_by(session_id='session-b')
        reservation.validate_owned_by(session_id='session-a')

    def test_purchasable_reports_expiry_before_inactivity(self) -> None:
        """
        Given: A hold that is both expired and already deactivated
        When: Checking it for checkout
        Then: The expiry message wins (400)
        """
        reservation = _make_reservation().deactivate()

        with pytest.raises(ReservationExpiredError) as exc_info:
            reservation.validate_purchasable(now=NOW + timedelta(minutes=31))
        assert exc_info.value.status_code == 400

    def test_purchasable_rejects_inactive_hold(self) -> None:
        reservation = _make_reservation().deactivate()

        with pytest.raises(ReservationInactiveError):
            reservation.validate_purchasable(now=NOW)

    def test_expiry_boundary_is_exclusive(self) -> None:
        """A hold is still purchasable at exactly expires_at."""
        reservation = _make_reservation()

        reservation.validate_purchasable(now=reservation.expires_at)
        assert reservation.is_expired(now=reservation.expires_at + timedelta(microseconds=1))

    def test_readable_uses_410_for_inactive_and_expired(self) -> None:
        reservation = _make_reservation()

        with pytest.raises(GoneError):
            reservation.deactivate().validate_readable(now=NOW)
        with pytest.raises(ReservationExpiredError) as exc_info:
            reservation.validate_readable(now=NOW + timedelta(hours=1))
        assert exc_info.value.status_code == 410

    def test_time_remaining_never_negative(self) -> None:
        reservation = _make_reservation()

        assert reservation.time_remaining_seconds(now=NOW) == 30 * 60
        assert reservation.time_remaining_seconds(now=NOW + timedelta(hours=2)) == 0


@pytest.mark.unit
class TestReservationExtend:
    def test_extend_moves_expiry_and_counts(self) -> None:
        reservation = _make_reservation()

        extended = reservation.extend(minutes=5)

        assert extended.expires_at == reservation.expires_at + timedelta(minutes=5)
        assert extended.extension_count == 1
        assert reservation.extension_count == 0

    def test_extension_budget_is_enforced(self) -> None:
        reservation = _make_reservation().extend(minutes=5).extend(minutes=5).extend(minutes=5)

        with pytest.raises(MaxExtensionsReachedError) as exc_info:
            reservation.validate_extendable(now=NOW, max_extensions=3)
        assert exc_info.value.status_code == 429
