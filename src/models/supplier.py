"""Supplier registry model."""

from datetime import datetime
from typing import Optional, Dict, Any

from sqlalchemy import DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, RecordMixin
from ..utils.dates import isoformat, utcnow


class Supplier(RecordMixin, Base):
    """A supplier and the running total of what is still owed to it."""

    __tablename__ = "suppliers"

    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    contact_person: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    total_debt: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def to_summary(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "contactPerson": self.contact_person,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "totalDebt": self.total_debt,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at)
        }
