"""
Error kinds and the HTTP error boundary.

Services raise the typed errors below; this module is the only place that
turns them into status codes.  Every response body has the same shape::

    {"timestamp": ..., "status": 401, "error": "Unauthorized",
     "message": "...", "path": "/api/..."}

except request validation failures, which answer 400 with a
``{field: message}`` map.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    BAD_CREDENTIALS = "BadCredentials"
    INVALID_REFRESH_TOKEN = "InvalidRefreshToken"
    USER_NOT_FOUND = "UserNotFound"
    CONTACT_NOT_FOUND = "ContactNotFound"
    USERNAME_TAKEN = "UsernameTaken"
    EMAIL_TAKEN = "EmailTaken"
    DUPLICATE_CONTACT_EMAIL = "DuplicateContactEmail"
    DUPLICATE_CONTACT_PHONE = "DuplicateContactPhone"
    SELF_EDIT_FORBIDDEN = "SelfEditForbidden"
    FORBIDDEN = "Forbidden"
    MISSING_OR_BAD_ACCESS_TOKEN = "MissingOrBadAccessToken"
    VALIDATION_FAILED = "ValidationFailed"
    INTERNAL = "Internal"


class KitchensinkError(Exception):
    """Base for every error the HTTP boundary knows how to map."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadCredentialsError(KitchensinkError):
    kind = ErrorKind.BAD_CREDENTIALS
    status_code = 401
    default_message = "Invalid username or password"


class InvalidRefreshTokenError(KitchensinkError):
    kind = ErrorKind.INVALID_REFRESH_TOKEN
    status_code = 401
    default_message = "Invalid or expired refresh token"


class NotAuthenticatedError(KitchensinkError):
    kind = ErrorKind.MISSING_OR_BAD_ACCESS_TOKEN
    status_code = 401
    default_message = "Full authentication is required to access this resource"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(f"Unauthorized: {reason or self.default_message}")


class ForbiddenError(KitchensinkError):
    kind = ErrorKind.FORBIDDEN
    status_code = 403
    default_message = "You don't have permission to access this resource"


class NotFoundError(KitchensinkError):
    status_code = 404
    default_message = "Resource not found"

    def __init__(self, resource: str, field: str, value: Any) -> None:
        super().__init__(f"{resource} not found with {field} : '{value}'")


class UserNotFoundError(NotFoundError):
    kind = ErrorKind.USER_NOT_FOUND

    def __init__(self, field: str, value: Any) -> None:
        super().__init__("User", field, value)


class ContactNotFoundError(NotFoundError):
    kind = ErrorKind.CONTACT_NOT_FOUND

    def __init__(self, field: str, value: Any) -> None:
        super().__init__("Contact", field, value)


class BadRequestError(KitchensinkError):
    status_code = 400
    default_message = "Bad request"


class UsernameTakenError(BadRequestError):
    kind = ErrorKind.USERNAME_TAKEN
    default_message = "Username is already taken"


class EmailTakenError(BadRequestError):
    kind = ErrorKind.EMAIL_TAKEN
    default_message = "Email is already in use"


class DuplicateContactEmailError(BadRequestError):
    kind = ErrorKind.DUPLICATE_CONTACT_EMAIL
    default_message = "Contact with this email already exists"


class DuplicateContactPhoneError(BadRequestError):
    kind = ErrorKind.DUPLICATE_CONTACT_PHONE
    default_message = "Contact with this phone number already exists"


class SelfEditForbiddenError(BadRequestError):
    kind = ErrorKind.SELF_EDIT_FORBIDDEN
    default_message = "You cannot edit your own user account."


class ValidationFailedError(KitchensinkError):
    kind = ErrorKind.VALIDATION_FAILED
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, field_errors: dict[str, str]) -> None:
        self.field_errors = field_errors
        super().__init__()

    @classmethod
    def from_errors(cls, errors: list[Any]) -> ValidationFailedError:
        return cls(field_errors_from(errors))


class StoreTimeoutError(KitchensinkError):
    kind = ErrorKind.INTERNAL
    status_code = 500
    default_message = "Store operation exceeded the request deadline"


# ── Body helpers ────────────────────────────────────────────────────
def field_errors_from(errors: list[Any]) -> dict[str, str]:
    """Flatten pydantic error entries into ``{field: message}``."""
    fields: dict[str, str] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if not isinstance(part, int)]
        if loc and loc[0] in {"body", "query", "path"} and len(loc) > 1:
            loc = loc[1:]
        name = ".".join(loc) or "body"
        msg = str(err.get("msg", "Invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        fields.setdefault(name, msg)
    return fields


def error_body(status_code: int, message: str, path: str) -> dict[str, Any]:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status_code,
        "error": HTTPStatus(status_code).phrase,
        "message": message,
        "path": path,
    }


def error_response(
    request: Request,
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_body(status_code, message, request.url.path),
        headers=headers,
    )


def _client(request: Request) -> str:
    return request.client.host if request.client else "-"


# ── Handlers ────────────────────────────────────────────────────────
async def _kitchensink_error_handler(request: Request, exc: KitchensinkError) -> JSONResponse:
    if isinstance(exc, ValidationFailedError):
        logger.warning(
            "Validation failed: %s %s from %s: %s",
            request.method, request.url.path, _client(request), exc.field_errors,
        )
        return JSONResponse(status_code=400, content=exc.field_errors)

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s: %s %s from %s: %s",
        exc.kind.value, request.method, request.url.path, _client(request), exc.message,
    )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return error_response(request, exc.status_code, exc.message, headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = field_errors_from(list(exc.errors()))
    logger.warning(
        "Validation failed: %s %s from %s: %s",
        request.method, request.url.path, _client(request), fields,
    )
    return JSONResponse(status_code=400, content=fields)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.info(
        "HTTP %s: %s %s from %s: %s",
        exc.status_code, request.method, request.url.path, _client(request), exc.detail,
    )
    return error_response(request, exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception: %s %s from %s: %s",
        request.method, request.url.path, _client(request), exc,
    )
    return error_response(request, 500, str(exc) or exc.__class__.__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(KitchensinkError, _kitchensink_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
