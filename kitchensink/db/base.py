"""SQLAlchemy declarative Base and shared model helpers."""

from __future__ import annotations

import uuid

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models.

    Models declare plain ``Column`` attributes with loose type hints rather
    than ``Mapped[...]``.
    """

    __allow_unmapped__ = True


def new_id() -> str:
    """Opaque record identifier."""
    return str(uuid.uuid4())
