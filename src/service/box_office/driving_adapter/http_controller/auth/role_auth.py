from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError
from src.service.box_office.driving_adapter.http_controller.auth.jwt_auth import (
    CurrentUser,
    JwtAuth,
    UserRole,
)
from src.service.box_office.driving_adapter.http_controller.auth.reservation_session import (
    ReservationSessionResolver,
)


bearer_scheme = HTTPBearer(auto_error=False)


class RoleAuthStrategy:
    @staticmethod
    def can_refund(user: CurrentUser) -> bool:
        return user.role == UserRole.ADMIN

    @staticmethod
    def can_manage_orders(user: CurrentUser) -> bool:
        return user.role in (UserRole.ADMIN, UserRole.STAFF)


@inject
async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> Optional[CurrentUser]:
    if credentials is None:
        return None
    return jwt_auth.get_current_user_from_jwt(credentials.credentials)


@inject
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> CurrentUser:
    return jwt_auth.get_current_user_from_jwt(credentials.credentials if credentials else None)


async def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not RoleAuthStrategy.can_refund(current_user):
        raise ForbiddenError('Admin access required')
    return current_user


async def require_admin_or_staff(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    if not RoleAuthStrategy.can_manage_orders(current_user):
        raise ForbiddenError('Admin or staff access required')
    return current_user


@inject
async def get_session_id(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    resolver: ReservationSessionResolver = Depends(Provide[Container.session_resolver]),
) -> str:
    return resolver.resolve(
        request=request,
        response=response,
        bearer_token=credentials.credentials if credentials else None,
    )
