"""
Contact endpoints for the signed-in user.

Every route requires ``ROLE_USER`` and only ever sees the caller's own
contacts; someone else's contact answers 404.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from kitchensink.api.deps import get_contact_service, require_user
from kitchensink.core.identity import CallerIdentity
from kitchensink.models.contact import Contact
from kitchensink.schemas.common import MessageResponse
from kitchensink.schemas.contact import ContactRead, ContactWrite
from kitchensink.services.contacts import ContactService

router = APIRouter(prefix="/kitchensink", tags=["kitchensink"])


@router.post("/contacts", response_model=ContactRead)
async def create_contact(
    body: ContactWrite,
    caller: CallerIdentity = Depends(require_user),
    contacts: ContactService = Depends(get_contact_service),
) -> Contact:
    return await contacts.create_contact(body.name, body.email, body.phone_number, caller.username)


@router.get("/contacts", response_model=list[ContactRead])
async def list_contacts(
    caller: CallerIdentity = Depends(require_user),
    contacts: ContactService = Depends(get_contact_service),
) -> list[Contact]:
    """Contacts created by the current user."""
    return await contacts.get_contacts_by_user(caller.username)


@router.get("/contacts/{contact_id}", response_model=ContactRead)
async def get_contact(
    contact_id: str,
    caller: CallerIdentity = Depends(require_user),
    contacts: ContactService = Depends(get_contact_service),
) -> Contact:
    return await contacts.get_contact_by_id(contact_id, owner=caller.username)


@router.put("/contacts/{contact_id}", response_model=ContactRead)
async def update_contact(
    contact_id: str,
    body: ContactWrite,
    caller: CallerIdentity = Depends(require_user),
    contacts: ContactService = Depends(get_contact_service),
) -> Contact:
    return await contacts.update_contact(
        contact_id, body.name, body.email, body.phone_number, owner=caller.username
    )


@router.delete("/contacts/{contact_id}", response_model=MessageResponse)
async def delete_contact(
    contact_id: str,
    caller: CallerIdentity = Depends(require_user),
    contacts: ContactService = Depends(get_contact_service),
) -> MessageResponse:
    await contacts.delete_contact(contact_id, owner=caller.username)
    return MessageResponse(message="Contact deleted successfully")
