"""
Authorization filter — turns a bearer header into a ``CallerIdentity``.

Runs before routing on every request.  Requests without a bearer header
continue anonymously (route guards decide whether that is acceptable); a
bearer token that fails verification ends the request with 401.
"""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from kitchensink.core.exceptions import NotAuthenticatedError, error_response
from kitchensink.core.identity import CallerIdentity
from kitchensink.core.security import AccessTokenCodec, TokenError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def bearer_token(authorization: str | None) -> str | None:
    """Token part of an ``Authorization: Bearer <token>`` header, else ``None``."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    return authorization[len(BEARER_PREFIX):].strip()


class AuthorizationFilter(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, codec: AccessTokenCodec) -> None:
        super().__init__(app)
        self.codec = codec

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        token = bearer_token(request.headers.get("Authorization"))
        if token is None:
            request.state.caller = CallerIdentity.anonymous()
            return await call_next(request)

        try:
            claims = self.codec.verify(token)
        except TokenError as exc:
            logger.warning(
                "Rejected access token (%s): %s %s from %s",
                exc.kind.value,
                request.method,
                request.url.path,
                request.client.host if request.client else "-",
            )
            # Same answer for every failure kind
            err = NotAuthenticatedError("Invalid access token")
            return error_response(
                request, err.status_code, err.message, {"WWW-Authenticate": "Bearer"}
            )

        request.state.caller = CallerIdentity(
            username=claims.subject,
            roles=claims.roles,
            authenticated=True,
        )
        return await call_next(request)
