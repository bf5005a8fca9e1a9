"""
Password hashing (bcrypt) and JWT access-token issuance / verification.
"""

from __future__ import annotations

import enum
import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from jose.exceptions import JWTClaimsError
from passlib.context import CryptContext

from kitchensink.core.config import MIN_SECRET_BYTES
from kitchensink.models.user import Role, role_names

logger = logging.getLogger(__name__)

_HMAC_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Passwords ───────────────────────────────────────────────────────
class PasswordHasher:
    """One-way salted bcrypt hashing with constant-time verification."""

    def __init__(self, rounds: int = 12) -> None:
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )
        # Built up front so the first unknown-user login costs the same as the rest
        self._dummy_hash = self.hash("kitchensink-dummy-password")

    def hash(self, raw: str) -> str:
        return self._context.hash(raw)

    def verify(self, raw: str, hashed: str) -> bool:
        try:
            return self._context.verify(raw, hashed)
        except (ValueError, TypeError):
            # Unknown or corrupted hash format
            logger.warning("Stored password hash could not be parsed")
            return False

    def burn(self, raw: str) -> None:
        """Spend one verify's worth of work against a throwaway hash.

        Used when the account does not exist so that the failure costs the
        same as a wrong password.
        """
        self._context.verify(raw, self._dummy_hash)


# ── JWT access tokens ───────────────────────────────────────────────
class TokenErrorKind(str, enum.Enum):
    EXPIRED = "Expired"
    MALFORMED = "Malformed"
    BAD_SIGNATURE = "BadSignature"


class TokenError(Exception):
    """Access token failed verification."""

    def __init__(self, kind: TokenErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    roles: frozenset[Role]
    issued_at: int
    expires_at: int


def parse_roles(claim: Any) -> frozenset[Role]:
    """Parse the comma-joined ``roles`` claim, ignoring unknown names."""
    if not isinstance(claim, str):
        return frozenset()
    parsed = set()
    for name in claim.split(","):
        name = name.strip()
        if name in Role.__members__:
            parsed.add(Role(name))
    return frozenset(parsed)


class AccessTokenCodec:
    """Issue and verify short-lived HMAC-signed JWTs.

    The signing key and lifetime are fixed at construction; the instance is
    shared by every request and never mutated.
    """

    def __init__(
        self,
        secret: str,
        lifetime: timedelta,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if len(secret.encode("utf-8")) < MIN_SECRET_BYTES:
            raise ValueError(f"Signing key must be at least {MIN_SECRET_BYTES} bytes")
        if algorithm not in _HMAC_ALGORITHMS:
            raise ValueError(f"Unsupported signing algorithm: {algorithm}")
        self._secret = secret
        self._lifetime_seconds = max(1.0, lifetime.total_seconds())
        self._algorithm = algorithm
        self._clock = clock

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def _now(self) -> float:
        return self._clock().timestamp()

    def issue(self, username: str, roles: Iterable[Role | str]) -> str:
        now = self._now()
        claims = {
            "sub": username,
            "roles": ",".join(role_names(roles)),
            "iat": int(now),
            # Rounded up: the token must stay valid for the whole lifetime
            "exp": math.ceil(now + self._lifetime_seconds),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Return the token's claims or raise :class:`TokenError`.

        Structure and signature are checked before expiry, so a broken or
        forged token never reports ``Expired``.  Expiry is compared against
        the clock's fractional time.
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise TokenError(TokenErrorKind.MALFORMED, str(exc)) from exc

        if header.get("alg") != self._algorithm:
            raise TokenError(
                TokenErrorKind.BAD_SIGNATURE,
                f"unexpected algorithm {header.get('alg')!r}",
            )

        # Payload must be a JSON object whatever the signature says
        try:
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise TokenError(TokenErrorKind.MALFORMED, str(exc)) from exc

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTClaimsError as exc:
            raise TokenError(TokenErrorKind.MALFORMED, str(exc)) from exc
        except JWTError as exc:
            raise TokenError(TokenErrorKind.BAD_SIGNATURE, str(exc)) from exc

        sub = payload.get("sub")
        exp = payload.get("exp")
        iat = payload.get("iat", 0)
        if not isinstance(sub, str) or not sub:
            raise TokenError(TokenErrorKind.MALFORMED, "missing subject")
        if not isinstance(exp, int) or isinstance(exp, bool):
            raise TokenError(TokenErrorKind.MALFORMED, "missing expiry")

        if self._now() >= exp:
            raise TokenError(TokenErrorKind.EXPIRED, "token has expired")

        return TokenClaims(
            subject=sub,
            roles=parse_roles(payload.get("roles")),
            issued_at=iat if isinstance(iat, int) else 0,
            expires_at=exp,
        )

    def subject(self, token: str) -> str:
        return self.verify(token).subject
