"""Pydantic schemas for User administration."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import EmailStr, field_validator

from kitchensink.models.user import Role
from kitchensink.schemas.common import CamelModel

_USERNAME_RE = re.compile(r"^[A-Za-z0-9]+$")


def validate_username(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Username is required")
    if not 8 <= len(v) <= 30:
        raise ValueError("Username must be between 8 and 30 characters")
    if not _USERNAME_RE.fullmatch(v):
        raise ValueError("Username can only contain letters and numbers")
    return v


class UserRead(CamelModel):
    id: str
    username: str
    email: str
    roles: list[str]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserUpdateRequest(CamelModel):
    username: str
    email: EmailStr | None = None
    password: str | None = None
    roles: set[Role] | None = None

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str | None) -> str | None:
        if v and not 8 <= len(v) <= 120:
            raise ValueError("Password must be between 8 and 120 characters")
        return v or None

    @field_validator("roles")
    @classmethod
    def _roles(cls, v: set[Role] | None) -> set[Role] | None:
        if v is not None and not v:
            raise ValueError("A user must keep at least one role")
        return v
