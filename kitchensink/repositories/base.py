"""
Shared plumbing for the SQL-backed repositories.

Every store call made while serving a request is bounded by the request's
deadline (an absolute ``time.monotonic()`` value).
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kitchensink.core.exceptions import StoreTimeoutError

T = TypeVar("T")


def deadline_after(seconds: float) -> float:
    return time.monotonic() + seconds


def violates(exc: IntegrityError, column: str) -> bool:
    """Whether a unique violation mentions ``column`` (SQLite and PostgreSQL)."""
    message = str(exc.orig).lower() if exc.orig else str(exc).lower()
    return column.lower() in message


class SqlRepository:
    def __init__(self, session: AsyncSession, deadline: float | None = None) -> None:
        self.session = session
        self.deadline = deadline

    async def _run(self, awaitable: Awaitable[T]) -> T:
        if self.deadline is None:
            return await awaitable
        remaining = self.deadline - time.monotonic()
        if remaining <= 0:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise StoreTimeoutError()
        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError as exc:
            raise StoreTimeoutError() from exc

    @property
    def dialect(self) -> str:
        return self.session.get_bind().dialect.name
