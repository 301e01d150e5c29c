import re

from src.platform.exception.exceptions import DomainError


EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def normalize_email(email: str) -> str:
    email = (email or '').strip()
    if not email:
        raise DomainError('Email is required')
    if not EMAIL_PATTERN.match(email):
        raise DomainError('Invalid email format')
    return email


def normalize_phone(phone: str | None) -> str | None:
    if phone is None:
        return None
    return phone.strip() or None
