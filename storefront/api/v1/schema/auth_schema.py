from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from storefront.api.v1.models.user_models import RoleEnum


class RegisterRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    role: RoleEnum = RoleEnum.customer


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: RoleEnum


class AuthOut(UserOut):
    token: str
