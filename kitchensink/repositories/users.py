"""User persistence (identity store)."""

from __future__ import annotations

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError

from kitchensink.core.exceptions import EmailTakenError, UsernameTakenError
from kitchensink.db.base import new_id
from kitchensink.models.user import User
from kitchensink.repositories.base import SqlRepository, violates


class UserRepository(SqlRepository):
    """Look up and persist ``User`` rows; username and email are unique."""

    async def find_by_id(self, user_id: str) -> User | None:
        return await self._run(self.session.get(User, user_id))

    async def find_by_username(self, username: str) -> User | None:
        result = await self._run(
            self.session.execute(select(User).where(User.username == username))
        )
        return result.scalar_one_or_none()

    async def find_all(self) -> list[User]:
        result = await self._run(self.session.execute(select(User).order_by(User.created_at)))
        return list(result.scalars().all())

    async def _exists(self, *criteria) -> bool:
        result = await self._run(self.session.execute(select(exists().where(*criteria))))
        return bool(result.scalar())

    async def exists_by_username(self, username: str) -> bool:
        return await self._exists(User.username == username)

    async def exists_by_email(self, email: str) -> bool:
        return await self._exists(User.email == email)

    async def exists_by_username_and_id_not(self, username: str, user_id: str) -> bool:
        return await self._exists(User.username == username, User.id != user_id)

    async def exists_by_email_and_id_not(self, email: str, user_id: str) -> bool:
        return await self._exists(User.email == email, User.id != user_id)

    async def save(self, user: User) -> User:
        """Insert or update; returns the row with id and timestamps assigned."""
        if user.id is None:
            user.id = new_id()
        self.session.add(user)
        try:
            await self._run(self.session.commit())
        except IntegrityError as exc:
            await self.session.rollback()
            # Lost a race against a concurrent insert of the same value
            if violates(exc, "username"):
                raise UsernameTakenError() from exc
            if violates(exc, "email"):
                raise EmailTakenError() from exc
            raise
        await self._run(self.session.refresh(user))
        return user

    async def delete(self, user: User) -> None:
        await self.delete_by_id(user.id)

    async def delete_by_id(self, user_id: str) -> None:
        await self._run(self.session.execute(delete(User).where(User.id == user_id)))
        await self._run(self.session.commit())
