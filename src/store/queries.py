"""Shared lookup helpers for services."""

from typing import Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models.base import Base
from ..utils.exceptions import NotFoundError

M = TypeVar("M", bound=Base)


def get_or_404(session: Session, model: Type[M], record_id: str, message: Optional[str] = None) -> M:
    """
    Load a record by id.

    Raises:
        NotFoundError: If no record has this id
    """
    record = session.get(model, record_id)
    if record is None:
        raise NotFoundError(
            message or f"No record found with id {record_id}",
            details={"id": record_id}
        )
    return record


def find_by_name(session: Session, model: Type[M], name: str) -> Optional[M]:
    return session.scalars(select(model).where(model.name == name)).first()


def count_where(session: Session, model: Type[M], *criteria) -> int:
    return session.scalar(select(func.count()).select_from(model).where(*criteria)) or 0
