"""
Ticket codes: the human-facing ticket number and the QR payload.

Format: TKT-<12 random base36 chars>-<13 digit epoch milliseconds>
e.g.    TKT-7G2KQ9X0ZP4M-1767225600000
"""

from datetime import datetime, timezone
import re
import secrets
import string
from typing import Optional

from src.platform.exception.exceptions import DomainError


TICKET_CODE_PATTERN = re.compile(r'^TKT-[A-Z0-9]{12}-\d{13}$')

_BASE36_ALPHABET = string.digits + string.ascii_uppercase
_RANDOM_PART_LENGTH = 12


def generate_ticket_code(*, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    random_part = ''.join(secrets.choice(_BASE36_ALPHABET) for _ in range(_RANDOM_PART_LENGTH))
    return f'TKT-{random_part}-{int(now.timestamp() * 1000):013d}'


def is_valid_ticket_code(code: str) -> bool:
    return bool(TICKET_CODE_PATTERN.fullmatch(code))


def validate_ticket_code(code: str) -> str:
    code = code.strip().upper()
    if not is_valid_ticket_code(code):
        raise DomainError('Invalid ticket code format')
    return code
