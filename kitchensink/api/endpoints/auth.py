"""
Auth endpoints — registration, login, token refresh and logout.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from kitchensink.api.deps import get_auth_service
from kitchensink.schemas.auth import (
    LoginRequest,
    LogoutRequest,
    RefreshTokenRequest,
    SignUpRequest,
    TokenPairResponse,
)
from kitchensink.schemas.common import MessageResponse
from kitchensink.services.auth import AuthenticationService, TokenPair

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_pair_response(pair: TokenPair) -> TokenPairResponse:
    return TokenPairResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        id=pair.user_id,
        username=pair.username,
        roles=pair.roles,
    )


@router.post("/register", response_model=MessageResponse)
async def register_user(
    body: SignUpRequest,
    auth: AuthenticationService = Depends(get_auth_service),
) -> MessageResponse:
    """Create a ``ROLE_USER`` account."""
    await auth.register(body.username, body.email, body.password)
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=TokenPairResponse)
async def login(
    body: LoginRequest,
    auth: AuthenticationService = Depends(get_auth_service),
) -> TokenPairResponse:
    """Exchange username/password for an access + refresh token pair."""
    return _token_pair_response(await auth.login(body.username, body.password))


@router.post("/refresh-token", response_model=TokenPairResponse)
async def refresh_token(
    body: RefreshTokenRequest,
    auth: AuthenticationService = Depends(get_auth_service),
) -> TokenPairResponse:
    """Issue a new access token for a valid refresh token."""
    return _token_pair_response(await auth.refresh(body.refresh_token))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    body: LogoutRequest | None = None,
    auth: AuthenticationService = Depends(get_auth_service),
) -> MessageResponse:
    """Revoke the supplied refresh token; succeeds without one."""
    if await auth.logout(body.refresh_token if body else None):
        return MessageResponse(message="Logged out successfully.")
    return MessageResponse(message="Logout request processed.")
