"""
Authentication service — registration, login, token refresh and logout.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from kitchensink.core.exceptions import (
    BadCredentialsError,
    EmailTakenError,
    InvalidRefreshTokenError,
    UsernameTakenError,
)
from kitchensink.core.security import AccessTokenCodec, PasswordHasher
from kitchensink.models.user import Role, User, role_names
from kitchensink.repositories.users import UserRepository
from kitchensink.services.refresh_tokens import RefreshTokenError, RefreshTokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    user_id: str
    username: str
    roles: list[str]


class AuthenticationService:
    def __init__(
        self,
        users: UserRepository,
        refresh_tokens: RefreshTokenService,
        hasher: PasswordHasher,
        codec: AccessTokenCodec,
        rotate_refresh_tokens: bool = False,
    ) -> None:
        self.users = users
        self.refresh_tokens = refresh_tokens
        self.hasher = hasher
        self.codec = codec
        self.rotate_refresh_tokens = rotate_refresh_tokens

    async def register(self, username: str, email: str, raw_password: str) -> User:
        """Create a ``ROLE_USER`` account."""
        if await self.users.exists_by_username(username):
            raise UsernameTakenError()
        if await self.users.exists_by_email(email):
            raise EmailTakenError()

        user = User(
            username=username,
            email=email,
            password_hash=await asyncio.to_thread(self.hasher.hash, raw_password),
            roles=[Role.ROLE_USER.value],
        )
        user = await self.users.save(user)
        logger.info("Registered new user: %s", username)
        return user

    async def login(self, username: str, raw_password: str) -> TokenPair:
        """Verify credentials and issue an access + refresh token pair.

        An unknown username and a wrong password fail identically, and both
        pay for one bcrypt verification.  bcrypt runs in a worker thread so
        the event loop keeps serving other requests.
        """
        user = await self.users.find_by_username(username)
        if user is None:
            await asyncio.to_thread(self.hasher.burn, raw_password)
            logger.warning("Login failed for %s", username)
            raise BadCredentialsError()
        if not await asyncio.to_thread(self.hasher.verify, raw_password, user.password_hash):
            logger.warning("Login failed for %s", username)
            raise BadCredentialsError()

        access_token = self.codec.issue(user.username, user.role_set)
        refresh = await self.refresh_tokens.issue(user.id)
        logger.info("User logged in: %s", user.username)
        return self._pair(user, access_token, refresh.token)

    async def refresh(self, refresh_token: str) -> TokenPair:
        try:
            record = await self.refresh_tokens.verify(refresh_token)
        except RefreshTokenError as exc:
            raise InvalidRefreshTokenError() from exc

        user = await self.users.find_by_id(record.user_id)
        if user is None:
            logger.warning("Refresh token references missing user %s", record.user_id)
            raise InvalidRefreshTokenError()

        access_token = self.codec.issue(user.username, user.role_set)
        token = record.token
        if self.rotate_refresh_tokens:
            token = (await self.refresh_tokens.issue(user.id)).token
            logger.info("Rotated refresh token for user: %s", user.username)
        logger.info("Refreshed access token for user: %s", user.username)
        return self._pair(user, access_token, token)

    async def logout(self, refresh_token: str | None) -> bool:
        """Revoke ``refresh_token`` if one was supplied; report whether it was."""
        if not refresh_token:
            logger.info("Logout request received without a refresh token")
            return False
        await self.refresh_tokens.revoke(refresh_token)
        logger.info("Logout: refresh token revoked")
        return True

    @staticmethod
    def _pair(user: User, access_token: str, refresh_token: str) -> TokenPair:
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            user_id=user.id,
            username=user.username,
            roles=role_names(user.role_set),
        )
