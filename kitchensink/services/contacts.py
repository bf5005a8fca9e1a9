"""
Contact management — owner-scoped for users, unrestricted for admins.
"""

from __future__ import annotations

import logging

from kitchensink.core.exceptions import (
    ContactNotFoundError,
    DuplicateContactEmailError,
    DuplicateContactPhoneError,
)
from kitchensink.models.contact import Contact
from kitchensink.repositories.contacts import ContactRepository

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, contacts: ContactRepository) -> None:
        self.contacts = contacts

    async def create_contact(self, name: str, email: str, phone_number: str, username: str) -> Contact:
        if await self.contacts.exists_by_email(email):
            raise DuplicateContactEmailError()
        if await self.contacts.exists_by_phone_number(phone_number):
            raise DuplicateContactPhoneError()

        contact = Contact(name=name, email=email, phone_number=phone_number, created_by=username)
        contact = await self.contacts.save(contact)
        logger.info("Created new contact: %s by user: %s", name, username)
        return contact

    async def get_all_contacts(self) -> list[Contact]:
        return await self.contacts.find_all()

    async def get_contacts_by_user(self, username: str) -> list[Contact]:
        return await self.contacts.find_by_created_by(username)

    async def get_contact_by_id(self, contact_id: str, owner: str | None = None) -> Contact:
        """Fetch a contact; with ``owner`` set, other users' contacts look missing."""
        contact = await self.contacts.find_by_id(contact_id)
        if contact is None or (owner is not None and contact.created_by != owner):
            raise ContactNotFoundError("id", contact_id)
        return contact

    async def update_contact(
        self,
        contact_id: str,
        name: str,
        email: str,
        phone_number: str,
        owner: str | None = None,
    ) -> Contact:
        contact = await self.get_contact_by_id(contact_id, owner)

        if email != contact.email and await self.contacts.exists_by_email_and_id_not(email, contact_id):
            raise DuplicateContactEmailError("Email is already in use")
        if phone_number != contact.phone_number and await self.contacts.exists_by_phone_number_and_id_not(
            phone_number, contact_id
        ):
            raise DuplicateContactPhoneError("Phone number is already in use")

        contact.name = name
        contact.email = email
        contact.phone_number = phone_number
        contact = await self.contacts.save(contact)
        logger.info("Updated contact with id: %s", contact_id)
        return contact

    async def delete_contact(self, contact_id: str, owner: str | None = None) -> None:
        contact = await self.get_contact_by_id(contact_id, owner)
        await self.contacts.delete(contact)
        logger.info("Deleted contact with id: %s", contact_id)
