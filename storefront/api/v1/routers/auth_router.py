from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.v1.schema.auth_schema import AuthOut, LoginRequest, RegisterRequest, UserOut
from storefront.api.v1.services.auth_service import authenticate_user, register_user
from storefront.auth.auth import create_access_token
from storefront.core.db import get_db
from storefront.core.responses import envelope
from storefront.utils.get_user import get_current_user, get_settings

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _with_token(user, request: Request) -> AuthOut:
    token = create_access_token(user.id, user.role.value, get_settings(request))
    return AuthOut(id=user.id, name=user.name, email=user.email, role=user.role, token=token)


@router.post("/register", status_code=201)
async def register(payload: RegisterRequest, request: Request, db: AsyncSession = Depends(get_db)):
    user = await register_user(payload.name, payload.email, payload.password, db, role=payload.role)
    return envelope(_with_token(user, request), message="User registered successfully")


@router.post("/login")
async def login(payload: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(payload.email, payload.password, db)
    return envelope(_with_token(user, request), message="Login successful")


@router.get("/me")
async def me(user=Depends(get_current_user)):
    return envelope(UserOut.model_validate(user))
