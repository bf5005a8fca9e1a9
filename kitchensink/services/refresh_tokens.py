"""
Refresh token lifecycle — issue, verify, revoke.

A user holds at most one refresh token: issuing a new one replaces the old.
Expired tokens are deleted the moment they are presented.
"""

from __future__ import annotations

import enum
import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from kitchensink.core.exceptions import UserNotFoundError
from kitchensink.models.refresh_token import RefreshToken
from kitchensink.repositories.refresh_tokens import RefreshTokenRepository
from kitchensink.repositories.users import UserRepository

logger = logging.getLogger(__name__)

# 16 random bytes -> 128 bits, rendered URL-safe
TOKEN_BYTES = 16


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ensure_utc(dt: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything is stored in UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class RefreshTokenErrorKind(str, enum.Enum):
    NOT_FOUND = "NotFound"
    EXPIRED = "Expired"


class RefreshTokenError(Exception):
    def __init__(self, kind: RefreshTokenErrorKind) -> None:
        self.kind = kind
        super().__init__(kind.value)


class RefreshTokenService:
    def __init__(
        self,
        users: UserRepository,
        tokens: RefreshTokenRepository,
        lifetime: timedelta,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.users = users
        self.tokens = tokens
        self.lifetime = lifetime
        self._clock = clock

    async def issue(self, user_id: str) -> RefreshToken:
        """Create a fresh token for ``user_id``, revoking any previous one."""
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError("id", user_id)

        removed = await self.tokens.delete_by_user_id(user_id)
        if removed:
            logger.info("Replaced %d refresh token(s) for user %s", removed, user.username)

        now = self._clock()
        record = RefreshToken(
            token=secrets.token_urlsafe(TOKEN_BYTES),
            user_id=user_id,
            created_at=now,
            expires_at=now + self.lifetime,
        )
        return await self.tokens.save(record)

    async def verify(self, token: str) -> RefreshToken:
        """Return the stored record; the token stays valid after this call."""
        record = await self.tokens.find_by_token(token) if token else None
        if record is None:
            logger.warning("Attempted to use a non-existent refresh token")
            raise RefreshTokenError(RefreshTokenErrorKind.NOT_FOUND)

        if _ensure_utc(record.expires_at) <= self._clock():
            logger.warning("Attempted to use an expired refresh token (user %s)", record.user_id)
            await self.tokens.delete(record)
            raise RefreshTokenError(RefreshTokenErrorKind.EXPIRED)

        return record

    async def revoke(self, token: str) -> None:
        record = await self.tokens.find_by_token(token) if token else None
        if record is not None:
            await self.tokens.delete(record)
            logger.info("Revoked refresh token for user %s", record.user_id)

    async def revoke_all_for_user(self, user_id: str) -> None:
        removed = await self.tokens.delete_by_user_id(user_id)
        logger.info("Revoked %d refresh token(s) for user %s", removed, user_id)
