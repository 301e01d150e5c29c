"""
Bearer token verification.

Tokens are issued by the studio's account service; this side only verifies them
(shared HS256 secret) and rebuilds the caller from the claims, without a DB query.
"""

from enum import StrEnum
from typing import Dict, Optional

import attrs
import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError


class UserRole(StrEnum):
    ADMIN = 'admin'
    STAFF = 'staff'
    CUSTOMER = 'customer'


@attrs.define(frozen=True)
class CurrentUser:
    id: str
    email: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER


class JwtAuth:
    def __init__(self, *, secret: Optional[str] = None, algorithm: Optional[str] = None) -> None:
        self.secret = secret or settings.SECRET_KEY.get_secret_value()
        self.algorithm = algorithm or settings.ALGORITHM

    def encode(self, payload: Dict) -> str:
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> Dict:
        """Raises jwt.PyJWTError on a bad signature, malformed token or expiry."""
        return jwt.decode(token, self.secret, algorithms=[self.algorithm])

    def get_current_user_from_jwt(self, token: Optional[str]) -> CurrentUser:
        if not token:
            raise AuthenticationError('Not authenticated')

        try:
            payload = self.decode(token)
        except jwt.PyJWTError as e:
            raise AuthenticationError('Invalid token') from e

        user_id = payload.get('sub') or payload.get('user_id')
        if not user_id:
            raise AuthenticationError('Invalid token')

        role = payload.get('role') or UserRole.CUSTOMER
        try:
            user_role = UserRole(role)
        except ValueError:
            # Unknown roles from the account service get no extra privileges
            user_role = UserRole.CUSTOMER

        return CurrentUser(id=str(user_id), email=payload.get('email'), role=user_role)
