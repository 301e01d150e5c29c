from datetime import datetime, timedelta, timezone
import secrets
from typing import Optional

from fastapi import Request, Response
import jwt

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.box_office.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


SESSION_TOKEN_TYPE = 'reservation_session'


class ReservationSessionResolver:
    """
    Stable per-browser identity used to bind seat holds to whoever created them.

    Authenticated callers are identified by their account id. Anonymous callers
    carry a 256-bit random id inside a signed, httpOnly cookie; a missing, forged
    or expired cookie is silently replaced with a fresh one.
    """

    def __init__(
        self,
        *,
        jwt_auth: JwtAuth,
        cookie_name: Optional[str] = None,
        max_age_seconds: Optional[int] = None,
        secure_cookie: Optional[bool] = None,
    ) -> None:
        self.jwt_auth = jwt_auth
        self.cookie_name = cookie_name or settings.SESSION_COOKIE_NAME
        self.max_age_seconds = max_age_seconds or settings.SESSION_COOKIE_MAX_AGE_SECONDS
        self.secure_cookie = (not settings.DEBUG) if secure_cookie is None else secure_cookie

    def resolve(
        self, *, request: Request, response: Response, bearer_token: Optional[str] = None
    ) -> str:
        if bearer_token:
            # An invalid bearer token is a 401, never a silent downgrade to anonymous
            return self.jwt_auth.get_current_user_from_jwt(bearer_token).id

        cookie = request.cookies.get(self.cookie_name)
        if cookie:
            session_id = self.read_session_cookie(cookie)
            if session_id:
                return session_id

        session_id = secrets.token_hex(32)
        response.set_cookie(
            key=self.cookie_name,
            value=self.mint_session_cookie(session_id),
            max_age=self.max_age_seconds,
            httponly=True,
            secure=self.secure_cookie,
            samesite='lax',
            path='/',
        )
        Logger.base.debug('🍪 [SESSION] Issued new anonymous reservation session')
        return session_id

    def mint_session_cookie(self, session_id: str, *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        return self.jwt_auth.encode(
            {
                'sid': session_id,
                'typ': SESSION_TOKEN_TYPE,
                'iat': now,
                'exp': now + timedelta(seconds=self.max_age_seconds),
            }
        )

    def read_session_cookie(self, cookie: str) -> Optional[str]:
        try:
            payload = self.jwt_auth.decode(cookie)
        except jwt.PyJWTError:
            return None
        if payload.get('typ') != SESSION_TOKEN_TYPE:
            return None
        session_id = payload.get('sid')
        return session_id if isinstance(session_id, str) and session_id else None
