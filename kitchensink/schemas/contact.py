"""Pydantic schemas for contacts."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import EmailStr, field_validator

from kitchensink.schemas.common import CamelModel

_NAME_RE = re.compile(r"^[A-Za-z]+(?: [A-Za-z]+)*$")
_PHONE_RE = re.compile(r"^\+?[0-9\s\-()]{10,11}$")


class ContactWrite(CamelModel):
    name: str
    email: EmailStr
    phone_number: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        if not 2 <= len(v) <= 100:
            raise ValueError("Name must be between 2 and 100 characters")
        if not _NAME_RE.fullmatch(v):
            raise ValueError("Name can only contain alphabets and single spaces between words")
        return v

    @field_validator("phone_number")
    @classmethod
    def _phone(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Phone number is required")
        if not _PHONE_RE.fullmatch(v):
            raise ValueError(
                "Phone number must be a valid format "
                "(digits, optional +, spaces, dashes, parentheses allowed)"
            )
        return v


class ContactRead(CamelModel):
    id: str
    name: str
    email: str
    phone_number: str
    created_by: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
