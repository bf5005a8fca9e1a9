"""
Admin endpoints — manage every user and every contact.

The whole router sits behind ``RoleGuard(ROLE_ADMIN)``.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError

from kitchensink.api.deps import get_contact_service, get_user_service, require_admin
from kitchensink.core.exceptions import SelfEditForbiddenError, ValidationFailedError
from kitchensink.core.identity import CallerIdentity
from kitchensink.models.contact import Contact
from kitchensink.models.user import User
from kitchensink.schemas.common import MessageResponse
from kitchensink.schemas.contact import ContactRead, ContactWrite
from kitchensink.schemas.user import UserRead, UserUpdateRequest
from kitchensink.services.contacts import ContactService
from kitchensink.services.users import UserService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


# ── Contacts ────────────────────────────────────────────────────────
@router.get("/contacts", response_model=list[ContactRead])
async def list_all_contacts(
    contacts: ContactService = Depends(get_contact_service),
) -> list[Contact]:
    return await contacts.get_all_contacts()


@router.get("/contacts/{contact_id}", response_model=ContactRead)
async def get_contact(
    contact_id: str,
    contacts: ContactService = Depends(get_contact_service),
) -> Contact:
    return await contacts.get_contact_by_id(contact_id)


@router.put("/contacts/{contact_id}", response_model=ContactRead)
async def update_contact(
    contact_id: str,
    body: ContactWrite,
    contacts: ContactService = Depends(get_contact_service),
) -> Contact:
    return await contacts.update_contact(contact_id, body.name, body.email, body.phone_number)


@router.delete("/contacts/{contact_id}", response_model=MessageResponse)
async def delete_contact(
    contact_id: str,
    contacts: ContactService = Depends(get_contact_service),
) -> MessageResponse:
    await contacts.delete_contact(contact_id)
    return MessageResponse(message="Contact deleted successfully")


# ── Users ───────────────────────────────────────────────────────────
@router.get("/users", response_model=list[UserRead])
async def list_users(users: UserService = Depends(get_user_service)) -> list[User]:
    return await users.get_all_users()


@router.get("/users/{user_id}", response_model=UserRead)
async def get_user(user_id: str, users: UserService = Depends(get_user_service)) -> User:
    return await users.get_user_by_id(user_id)


@router.put("/users/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    payload: Any = Body(default=None),
    caller: CallerIdentity = Depends(require_admin),
    users: UserService = Depends(get_user_service),
) -> User:
    """Update another user's account.

    The body is taken raw and the self-edit check runs before it is
    validated, so an admin targeting their own id is refused whatever JSON
    they send.  Anything other than an object then fails validation.
    """
    if await users.is_same_user(user_id, caller.username):
        logger.warning("Admin %s attempted to edit their own account (ID: %s)", caller.username, user_id)
        raise SelfEditForbiddenError()

    try:
        body = UserUpdateRequest.model_validate({} if payload is None else payload)
    except ValidationError as exc:
        raise ValidationFailedError.from_errors(list(exc.errors())) from exc

    return await users.update_user(
        user_id,
        username=body.username,
        email=body.email,
        password=body.password,
        roles=body.roles,
    )


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, users: UserService = Depends(get_user_service)) -> MessageResponse:
    await users.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")
