"""
Refresh token model — stateful, long-lived credential.

``user_id`` is unique: a user owns at most one refresh token at a time.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String

from kitchensink.db.base import Base, new_id


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    token: str = Column(String(64), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    user_id: str = Column(  # type: ignore[assignment]
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    expires_at: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<RefreshToken id={self.id} user_id={self.user_id}>"
