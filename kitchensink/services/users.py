"""
User administration — listing, editing and deleting accounts.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from kitchensink.core.exceptions import (
    EmailTakenError,
    UserNotFoundError,
    UsernameTakenError,
)
from kitchensink.core.security import PasswordHasher
from kitchensink.models.user import Role, User, role_names
from kitchensink.repositories.users import UserRepository
from kitchensink.services.refresh_tokens import RefreshTokenService

logger = logging.getLogger(__name__)


class UserService:
    def __init__(
        self,
        users: UserRepository,
        refresh_tokens: RefreshTokenService,
        hasher: PasswordHasher,
    ) -> None:
        self.users = users
        self.refresh_tokens = refresh_tokens
        self.hasher = hasher

    async def create_admin_user(self, username: str, email: str, raw_password: str) -> User:
        if await self.users.exists_by_username(username):
            raise UsernameTakenError()
        if await self.users.exists_by_email(email):
            raise EmailTakenError()
        user = User(
            username=username,
            email=email,
            password_hash=await asyncio.to_thread(self.hasher.hash, raw_password),
            roles=role_names([Role.ROLE_USER, Role.ROLE_ADMIN]),
        )
        user = await self.users.save(user)
        logger.info("Created new admin user: %s", username)
        return user

    async def get_all_users(self) -> list[User]:
        return await self.users.find_all()

    async def get_user_by_id(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError("id", user_id)
        return user

    async def is_same_user(self, user_id: str, username: str | None) -> bool:
        """Whether ``user_id`` is the account signed in as ``username``."""
        if not username:
            return False
        user = await self.users.find_by_username(username)
        return user is not None and user.id == user_id

    async def update_user(
        self,
        user_id: str,
        username: str | None = None,
        email: str | None = None,
        password: str | None = None,
        roles: Iterable[Role] | None = None,
    ) -> User:
        """Apply the supplied changes; ``None`` leaves a field untouched."""
        user = await self.get_user_by_id(user_id)

        if (
            username is not None
            and username != user.username
            and await self.users.exists_by_username_and_id_not(username, user_id)
        ):
            raise UsernameTakenError("Username is already in use")
        if (
            email is not None
            and email != user.email
            and await self.users.exists_by_email_and_id_not(email, user_id)
        ):
            raise EmailTakenError()

        credentials_changed = False
        if username is not None and username != user.username:
            user.username = username
            credentials_changed = True
        if email is not None:
            user.email = email
        if password:
            user.password_hash = await asyncio.to_thread(self.hasher.hash, password)
            credentials_changed = True
        new_roles = role_names(roles) if roles else None
        if new_roles and new_roles != role_names(user.role_set):
            user.roles = new_roles
            credentials_changed = True

        user = await self.users.save(user)
        if credentials_changed:
            # Outstanding refresh tokens were minted for the old identity
            await self.refresh_tokens.revoke_all_for_user(user.id)
        logger.info("Updated user with id: %s", user_id)
        return user

    async def delete_user(self, user_id: str) -> None:
        user = await self.get_user_by_id(user_id)
        await self.refresh_tokens.revoke_all_for_user(user.id)
        await self.users.delete(user)
        logger.info("Deleted user with id: %s", user_id)
