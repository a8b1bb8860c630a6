"""Declarative base and shared column conventions for ORM models."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..utils.dates import utcnow


def new_id() -> str:
    """Opaque record identifier."""
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    """Declarative base for all models."""
    pass


class RecordMixin:
    """Opaque string primary key and creation timestamp."""

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
