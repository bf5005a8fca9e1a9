"""
User model — account record plus the role enum used for access control.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String

from kitchensink.db.base import Base, new_id


class Role(str, enum.Enum):
    ROLE_USER = "ROLE_USER"
    ROLE_ADMIN = "ROLE_ADMIN"


def role_names(roles: Iterable[Role | str]) -> list[str]:
    """Return role names de-duplicated, in declaration order of ``Role``."""
    wanted = {Role(r) for r in roles}
    return [r.value for r in Role if r in wanted]


class User(Base):
    __tablename__ = "users"

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    username: str = Column(String(30), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    email: str = Column(String(100), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    password_hash: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    roles: list[str] = Column(JSON, nullable=False, default=lambda: [Role.ROLE_USER.value])  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def role_set(self) -> frozenset[Role]:
        return frozenset(Role(r) for r in self.roles or ())

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username}>"
