"""
Contact model — name / email / phone entries owned by a user.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String

from kitchensink.db.base import Base, new_id


class Contact(Base):
    __tablename__ = "contacts"

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    phone_number: str = Column(String(30), unique=True, nullable=False)  # type: ignore[assignment]
    created_by: str = Column(String(30), nullable=False, index=True)  # type: ignore[assignment]  # owner username
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
