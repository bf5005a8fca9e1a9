"""
Kitchensink — application entry point.

This is the **only** file that assembles the app.  Business logic lives in
the `services/` package, persistence in `repositories/`, HTTP in `api/`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kitchensink.api.api import api_router
from kitchensink.api.middleware import AuthorizationFilter
from kitchensink.core.config import Settings, settings
from kitchensink.core.exceptions import EmailTakenError, UsernameTakenError, register_exception_handlers
from kitchensink.core.security import AccessTokenCodec, PasswordHasher
from kitchensink.db.base import Base
from kitchensink.db.session import async_session_factory, engine
from kitchensink.repositories.base import deadline_after
from kitchensink.repositories.refresh_tokens import RefreshTokenRepository
from kitchensink.repositories.users import UserRepository
from kitchensink.services.refresh_tokens import RefreshTokenService
from kitchensink.services.users import UserService

# Ensure all models are imported so metadata.create_all can see them
from kitchensink.models.contact import Contact  # noqa: F401
from kitchensink.models.refresh_token import RefreshToken  # noqa: F401
from kitchensink.models.user import User  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def seed_first_admin(app: FastAPI) -> None:
    """Create the configured admin account unless it already exists."""
    cfg: Settings = app.state.settings
    if not (cfg.FIRST_ADMIN_USERNAME and cfg.FIRST_ADMIN_EMAIL and cfg.FIRST_ADMIN_PASSWORD):
        logger.info("No first admin configured; skipping seed")
        return

    async with async_session_factory() as session:
        deadline = deadline_after(cfg.REQUEST_TIMEOUT_SECONDS)
        users = UserRepository(session, deadline)
        refresh_tokens = RefreshTokenService(
            users, RefreshTokenRepository(session, deadline), cfg.refresh_token_lifetime
        )
        service = UserService(users, refresh_tokens, app.state.password_hasher)
        try:
            await service.create_admin_user(
                cfg.FIRST_ADMIN_USERNAME,
                cfg.FIRST_ADMIN_EMAIL,
                cfg.FIRST_ADMIN_PASSWORD.get_secret_value(),
            )
        except (UsernameTakenError, EmailTakenError):
            logger.info("First admin %s already present", cfg.FIRST_ADMIN_USERNAME)
        else:
            logger.info("Default admin created: %s (password: <redacted>)", cfg.FIRST_ADMIN_USERNAME)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    await seed_first_admin(app)

    logger.info("Kitchensink v%s started", app.state.settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app(app_settings: Settings | None = None) -> FastAPI:
    cfg = app_settings or settings
    application = FastAPI(
        title=cfg.PROJECT_NAME,
        description="Contact management behind JWT authentication",
        version=cfg.VERSION,
        openapi_url=f"{cfg.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Immutable after startup, shared by every request
    application.state.settings = cfg
    application.state.token_codec = AccessTokenCodec(
        cfg.JWT_SECRET.get_secret_value(),
        cfg.access_token_lifetime,
        algorithm=cfg.JWT_ALGORITHM,
    )
    application.state.password_hasher = PasswordHasher(rounds=cfg.BCRYPT_ROUNDS)

    register_exception_handlers(application)

    # Runs before routing on every request
    application.add_middleware(AuthorizationFilter, codec=application.state.token_codec)

    # CORS is opt-in: only the configured origins are allowed
    if cfg.CORS_ORIGINS:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=cfg.CORS_ORIGINS,
            allow_credentials="*" not in cfg.CORS_ORIGINS,
            allow_methods=["*"],
            allow_headers=["*"],
            max_age=3600,
        )
        logger.info("CORS enabled for %s", ", ".join(cfg.CORS_ORIGINS))

    application.include_router(api_router, prefix=cfg.API_PREFIX)

    return application


app = create_app()
