from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.v1.models.user_models import RoleEnum, User
from storefront.auth.auth import decode_token
from storefront.core.db import get_db
from storefront.core.exceptions import Forbidden, Unauthorized

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request):
    return request.app.state.settings


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
):
    if credentials is None:
        raise Unauthorized("Not authorized, no token")

    user_id = decode_token(credentials.credentials, get_settings(request))
    user = await db.get(User, user_id)
    if user is None:
        raise Unauthorized("Not authorized, user not found")

    request.state.user = user
    return user


def get_admin_user(user=Depends(get_current_user)):
    if user.role != RoleEnum.admin:
        raise Forbidden("Admin access required")
    return user
