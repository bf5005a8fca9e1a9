"""Refresh token persistence (token store)."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite

from kitchensink.db.base import new_id
from kitchensink.models.refresh_token import RefreshToken
from kitchensink.repositories.base import SqlRepository

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RefreshTokenRepository(SqlRepository):
    """Refresh tokens keyed by their opaque string.

    ``save`` is an upsert on ``user_id``: storing a token for a user replaces
    whatever token that user held, in a single statement.  Two concurrent
    logins for one user therefore never leave two rows behind.
    """

    async def find_by_token(self, token: str) -> RefreshToken | None:
        result = await self._run(
            self.session.execute(
                select(RefreshToken)
                .where(RefreshToken.token == token)
                .execution_options(populate_existing=True)
            )
        )
        return result.scalar_one_or_none()

    async def save(self, record: RefreshToken) -> RefreshToken:
        values = {
            "id": record.id or new_id(),
            "token": record.token,
            "user_id": record.user_id,
            "expires_at": record.expires_at,
            "created_at": record.created_at or datetime.now(timezone.utc),
        }
        insert = _UPSERT_DIALECTS.get(self.dialect)
        if insert is None:
            # No native upsert: replace inside one transaction, the unique
            # index on user_id still rejects a concurrent second row.
            await self._run(
                self.session.execute(
                    delete(RefreshToken).where(RefreshToken.user_id == record.user_id)
                )
            )
            self.session.add(RefreshToken(**values))
        else:
            stmt = insert(RefreshToken).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id"],
                set_={
                    "id": stmt.excluded.id,
                    "token": stmt.excluded.token,
                    "expires_at": stmt.excluded.expires_at,
                    "created_at": stmt.excluded.created_at,
                },
            )
            await self._run(self.session.execute(stmt))
        await self._run(self.session.commit())

        # A concurrent issue for the same user may already have replaced the
        # row, so answer with what was written rather than re-reading it.
        return RefreshToken(**values)

    async def delete(self, record: RefreshToken) -> None:
        await self._run(
            self.session.execute(delete(RefreshToken).where(RefreshToken.id == record.id))
        )
        await self._run(self.session.commit())

    async def delete_by_user_id(self, user_id: str) -> int:
        result = await self._run(
            self.session.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
        )
        await self._run(self.session.commit())
        return result.rowcount or 0
