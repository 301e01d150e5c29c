from datetime import datetime, timedelta
import re
import secrets
from typing import List, Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError, ForbiddenError, GoneError
from src.service.box_office.domain.exception.box_office_errors import (
    MaxExtensionsReachedError,
    ReservationExpiredError,
    ReservationInactiveError,
)
from src.service.box_office.domain.value_object.contact import normalize_email, normalize_phone


RESERVATION_TOKEN_PATTERN = re.compile(r'^[0-9a-f]{64}$')


def generate_reservation_token() -> str:
    return secrets.token_hex(32)


def is_valid_reservation_token(token: str) -> bool:
    return bool(RESERVATION_TOKEN_PATTERN.fullmatch(token))


@attrs.define(kw_only=True)
class Reservation:
    """
    Time-boxed, exclusive hold on a set of show seats.

    The token is a bearer capability (cancel, read); checkout additionally requires
    the caller's session to match `session_id`. Expiry is implicit: `is_active` can
    still be True after `expires_at` has passed, so readers must check both.
    """

    id: UUID
    token: str = attrs.field(repr=False)
    session_id: str = attrs.field(repr=False)
    show_id: UUID
    email: str
    expires_at: datetime
    phone: Optional[str] = attrs.field(default=None)
    is_active: bool = attrs.field(default=True)
    extension_count: int = attrs.field(default=0)
    created_at: Optional[datetime] = attrs.field(default=None)
    show_seat_ids: List[UUID] = attrs.field(factory=list)

    @classmethod
    def create(
        cls,
        *,
        session_id: str,
        show_id: UUID,
        show_seat_ids: List[UUID],
        email: str,
        phone: Optional[str],
        hold_minutes: int,
        max_seats: int,
        now: datetime,
    ) -> 'Reservation':
        if not show_seat_ids:
            raise DomainError('At least one seat must be selected')
        if len(set(show_seat_ids)) != len(show_seat_ids):
            raise DomainError('Duplicate seats in selection')
        if len(show_seat_ids) > max_seats:
            raise DomainError(f'Maximum {max_seats} seats per reservation')
        if not session_id:
            raise DomainError('Session is required to hold seats')

        return cls(
            id=uuid7(),
            token=generate_reservation_token(),
            session_id=session_id,
            show_id=show_id,
            email=normalize_email(email),
            phone=normalize_phone(phone),
            expires_at=now + timedelta(minutes=hold_minutes),
            created_at=now,
            show_seat_ids=list(show_seat_ids),
        )

    def is_expired(self, *, now: datetime) -> bool:
        return self.expires_at < now

    def time_remaining_seconds(self, *, now: datetime) -> int:
        return max(0, int((self.expires_at - now).total_seconds()))

    def validate_owned_by(self, *, session_id: str) -> None:
        if self.session_id != session_id:
            raise ForbiddenError('This reservation belongs to a different session')

    def validate_purchasable(self, *, now: datetime) -> None:
        # Expiry first: an expired hold gets the "timed out" message even if still flagged active
        if self.is_expired(now=now):
            raise ReservationExpiredError(status_code=400)
        if not self.is_active:
            raise ReservationInactiveError()

    def validate_readable(self, *, now: datetime) -> None:
        if not self.is_active:
            raise GoneError('This reservation is no longer active')
        if self.is_expired(now=now):
            raise ReservationExpiredError(status_code=410)

    def validate_extendable(self, *, now: datetime, max_extensions: int) -> None:
        self.validate_readable(now=now)
        if self.extension_count >= max_extensions:
            raise MaxExtensionsReachedError(max_extensions)

    def extend(self, *, minutes: int) -> 'Reservation':
        return attrs.evolve(
            self,
            expires_at=self.expires_at + timedelta(minutes=minutes),
            extension_count=self.extension_count + 1,
        )

    def deactivate(self) -> 'Reservation':
        return attrs.evolve(self, is_active=False)
