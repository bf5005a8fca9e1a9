"""Contact persistence."""

from __future__ import annotations

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError

from kitchensink.core.exceptions import DuplicateContactEmailError, DuplicateContactPhoneError
from kitchensink.db.base import new_id
from kitchensink.models.contact import Contact
from kitchensink.repositories.base import SqlRepository, violates


class ContactRepository(SqlRepository):
    async def find_by_id(self, contact_id: str) -> Contact | None:
        return await self._run(self.session.get(Contact, contact_id))

    async def find_all(self) -> list[Contact]:
        result = await self._run(
            self.session.execute(select(Contact).order_by(Contact.created_at))
        )
        return list(result.scalars().all())

    async def find_by_created_by(self, username: str) -> list[Contact]:
        result = await self._run(
            self.session.execute(
                select(Contact).where(Contact.created_by == username).order_by(Contact.created_at)
            )
        )
        return list(result.scalars().all())

    async def _exists(self, *criteria) -> bool:
        result = await self._run(self.session.execute(select(exists().where(*criteria))))
        return bool(result.scalar())

    async def exists_by_email(self, email: str) -> bool:
        return await self._exists(Contact.email == email)

    async def exists_by_email_and_id_not(self, email: str, contact_id: str) -> bool:
        return await self._exists(Contact.email == email, Contact.id != contact_id)

    async def exists_by_phone_number(self, phone_number: str) -> bool:
        return await self._exists(Contact.phone_number == phone_number)

    async def exists_by_phone_number_and_id_not(self, phone_number: str, contact_id: str) -> bool:
        return await self._exists(Contact.phone_number == phone_number, Contact.id != contact_id)

    async def save(self, contact: Contact) -> Contact:
        if contact.id is None:
            contact.id = new_id()
        self.session.add(contact)
        try:
            await self._run(self.session.commit())
        except IntegrityError as exc:
            await self.session.rollback()
            if violates(exc, "email"):
                raise DuplicateContactEmailError() from exc
            if violates(exc, "phone"):
                raise DuplicateContactPhoneError() from exc
            raise
        await self._run(self.session.refresh(contact))
        return contact

    async def delete(self, contact: Contact) -> None:
        await self._run(self.session.execute(delete(Contact).where(Contact.id == contact.id)))
        await self._run(self.session.commit())
