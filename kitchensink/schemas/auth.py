"""Pydantic schemas for registration, login and token exchange."""

from __future__ import annotations

from pydantic import EmailStr, field_validator

from kitchensink.schemas.common import CamelModel
from kitchensink.schemas.user import validate_username


class SignUpRequest(CamelModel):
    username: str
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Email is required")
            if len(v) > 100:
                raise ValueError("Email must not exceed 100 characters")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Password is required")
        if not 8 <= len(v) <= 120:
            raise ValueError("Password must be between 8 and 120 characters")
        return v


class LoginRequest(CamelModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Username cannot be blank")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Password cannot be blank")
        return v


class RefreshTokenRequest(CamelModel):
    refresh_token: str

    @field_validator("refresh_token")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Refresh token must not be blank")
        return v


class LogoutRequest(CamelModel):
    refresh_token: str | None = None


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str
    type: str = "Bearer"
    id: str
    username: str
    roles: list[str]
