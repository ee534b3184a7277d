import uuid
from datetime import datetime

from pydantic import AliasChoices, EmailStr, Field

from storefront.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: str | None = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(
        min_length=1, validation_alias=AliasChoices("refreshToken", "refresh_token")
    )


class UserResponse(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    phone: str | None
    loyalty_points: int
    created_at: datetime


class AuthResponse(CamelModel):
    message: str
    user: UserResponse
    access_token: str
    refresh_token: str


class RefreshResponse(CamelModel):
    access_token: str
    user: UserResponse
