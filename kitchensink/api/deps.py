"""
FastAPI dependencies — database session, repositories, services and the
role guard.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from kitchensink.core.config import Settings
from kitchensink.core.exceptions import ForbiddenError, NotAuthenticatedError
from kitchensink.core.identity import CallerIdentity
from kitchensink.core.security import AccessTokenCodec, PasswordHasher
from kitchensink.db.session import async_session_factory
from kitchensink.models.user import Role
from kitchensink.repositories.base import deadline_after
from kitchensink.repositories.contacts import ContactRepository
from kitchensink.repositories.refresh_tokens import RefreshTokenRepository
from kitchensink.repositories.users import UserRepository
from kitchensink.services.auth import AuthenticationService
from kitchensink.services.contacts import ContactService
from kitchensink.services.refresh_tokens import RefreshTokenService
from kitchensink.services.users import UserService


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Process-wide collaborators (built once in create_app) ───────────
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> AccessTokenCodec:
    return request.app.state.token_codec


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_deadline(app_settings: Settings = Depends(get_settings)) -> float:
    """Absolute deadline shared by every store call of this request."""
    return deadline_after(app_settings.REQUEST_TIMEOUT_SECONDS)


# ── Repositories ────────────────────────────────────────────────────
def get_user_repository(
    db: AsyncSession = Depends(get_db),
    deadline: float = Depends(get_deadline),
) -> UserRepository:
    return UserRepository(db, deadline)


def get_refresh_token_repository(
    db: AsyncSession = Depends(get_db),
    deadline: float = Depends(get_deadline),
) -> RefreshTokenRepository:
    return RefreshTokenRepository(db, deadline)


def get_contact_repository(
    db: AsyncSession = Depends(get_db),
    deadline: float = Depends(get_deadline),
) -> ContactRepository:
    return ContactRepository(db, deadline)


# ── Services ────────────────────────────────────────────────────────
def get_refresh_token_service(
    users: UserRepository = Depends(get_user_repository),
    tokens: RefreshTokenRepository = Depends(get_refresh_token_repository),
    app_settings: Settings = Depends(get_settings),
) -> RefreshTokenService:
    return RefreshTokenService(users, tokens, app_settings.refresh_token_lifetime)


def get_auth_service(
    users: UserRepository = Depends(get_user_repository),
    refresh_tokens: RefreshTokenService = Depends(get_refresh_token_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
    codec: AccessTokenCodec = Depends(get_token_codec),
    app_settings: Settings = Depends(get_settings),
) -> AuthenticationService:
    return AuthenticationService(
        users,
        refresh_tokens,
        hasher,
        codec,
        rotate_refresh_tokens=app_settings.REFRESH_TOKEN_ROTATION,
    )


def get_user_service(
    users: UserRepository = Depends(get_user_repository),
    refresh_tokens: RefreshTokenService = Depends(get_refresh_token_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(users, refresh_tokens, hasher)


def get_contact_service(
    contacts: ContactRepository = Depends(get_contact_repository),
) -> ContactService:
    return ContactService(contacts)


# ── Caller & role guard ─────────────────────────────────────────────
def get_caller(request: Request) -> CallerIdentity:
    """Identity attached by ``AuthorizationFilter`` (anonymous if absent)."""
    caller = getattr(request.state, "caller", None)
    return caller if caller is not None else CallerIdentity.anonymous()


class RoleGuard:
    """Route dependency requiring the caller to hold ``role``.

    Anonymous callers get 401, authenticated callers without the role 403.
    """

    def __init__(self, role: Role) -> None:
        self.role = role

    async def __call__(self, caller: CallerIdentity = Depends(get_caller)) -> CallerIdentity:
        if not caller.authenticated:
            raise NotAuthenticatedError()
        if not caller.has_role(self.role):
            raise ForbiddenError()
        return caller


require_user = RoleGuard(Role.ROLE_USER)
require_admin = RoleGuard(Role.ROLE_ADMIN)
