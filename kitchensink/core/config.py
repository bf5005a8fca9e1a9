"""
Centralised application settings loaded from environment / .env file.

Uses pydantic-settings so every value can be overridden via env vars
or the .env file at the project root.  ``JWT_SECRET`` has no default:
the service refuses to start without signing key material.
"""

from __future__ import annotations

from datetime import timedelta

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings

MIN_SECRET_BYTES = 32


class Settings(BaseSettings):
    # ── Project ──────────────────────────────────────────────────────
    PROJECT_NAME: str = "Kitchensink"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # ── Persistence ─────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./kitchensink.db"
    # Upper bound for the store calls made while serving one request
    REQUEST_TIMEOUT_SECONDS: float = 5.0

    # ── JWT ──────────────────────────────────────────────────────────
    JWT_SECRET: SecretStr
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_LIFETIME_MS: int = 15 * 60 * 1000
    REFRESH_TOKEN_LIFETIME_MS: int = 24 * 60 * 60 * 1000
    # False: refresh tokens stay valid until expiry; True: rotate on every use
    REFRESH_TOKEN_ROTATION: bool = False

    # ── Passwords ────────────────────────────────────────────────────
    BCRYPT_ROUNDS: int = 12

    # ── CORS ─────────────────────────────────────────────────────────
    CORS_ORIGINS: list[str] = []

    # ── Logging ──────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    # ── Default admin (seeded on startup when all three are set) ────
    FIRST_ADMIN_USERNAME: str | None = None
    FIRST_ADMIN_EMAIL: str | None = None
    FIRST_ADMIN_PASSWORD: SecretStr | None = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @field_validator("JWT_SECRET")
    @classmethod
    def _validate_secret(cls, v: SecretStr) -> SecretStr:
        if len(v.get_secret_value().encode("utf-8")) < MIN_SECRET_BYTES:
            raise ValueError(
                f"JWT_SECRET must be at least {MIN_SECRET_BYTES} bytes (256 bits)"
            )
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def _validate_algorithm(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in {"HS256", "HS384", "HS512"}:
            raise ValueError("JWT_ALGORITHM must be an HMAC algorithm (HS256/HS384/HS512)")
        return v

    @field_validator("ACCESS_TOKEN_LIFETIME_MS", "REFRESH_TOKEN_LIFETIME_MS")
    @classmethod
    def _validate_lifetime(cls, v: int) -> int:
        if v < 1000:
            raise ValueError("Token lifetimes must be at least 1000 ms")
        return v

    @field_validator("REQUEST_TIMEOUT_SECONDS")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be greater than 0")
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def _validate_rounds(cls, v: int) -> int:
        if v < 4 or v > 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v: object) -> list[str]:
        if isinstance(v, str) and not v.strip().startswith("["):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v  # type: ignore[return-value]

    @property
    def access_token_lifetime(self) -> timedelta:
        return timedelta(milliseconds=self.ACCESS_TOKEN_LIFETIME_MS)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return timedelta(milliseconds=self.REFRESH_TOKEN_LIFETIME_MS)


settings = Settings()  # type: ignore[call-arg]
