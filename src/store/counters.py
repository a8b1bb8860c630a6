"""Atomic single-row counter updates.

Running counters (``Product.current_stock``, ``Supplier.total_debt``) are
never written as read-modify-write from Python; every change is one
``UPDATE ... SET col = col + :delta`` statement so concurrent increments on
the same row serialize in the store.
"""

from typing import Optional, Type

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..models.base import Base


def increment_counter(
    session: Session,
    model: Type[Base],
    record_id: str,
    column: str,
    delta: float,
    minimum: Optional[float] = None
) -> bool:
    """
    Atomically add ``delta`` to ``column`` of one record.

    Args:
        session: Active session
        model: Mapped class owning the counter
        record_id: Primary key of the record
        column: Counter attribute name
        delta: Amount to add (negative to subtract)
        minimum: If given, only update when the current value is at least this

    Returns:
        True if a row was updated, False if the record does not exist or
        the ``minimum`` guard rejected the update
    """
    counter = getattr(model, column)
    stmt = update(model).where(model.id == record_id)
    if minimum is not None:
        stmt = stmt.where(counter >= minimum)

    result = session.execute(
        stmt.values({column: counter + delta}).execution_options(synchronize_session="fetch")
    )
    return result.rowcount == 1


def set_counter(session: Session, model: Type[Base], record_id: str, column: str, value: float) -> bool:
    """Overwrite a counter; used only by reconciliation repairs."""
    result = session.execute(
        update(model)
        .where(model.id == record_id)
        .values({column: value})
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount == 1


def claim_counter_phase(session: Session, model: Type[Base], record_id: str, applied: bool) -> bool:
    """
    Flip a ledger entry's ``counters_applied`` flag if it is not already set.

    The flip is a conditional update, so only one caller can win it. Whoever
    wins performs the matching counter adjustment; everyone else skips. This
    makes applying (or reversing) an entry's counters idempotent.

    Args:
        session: Active session
        model: ``StockIn`` or ``StockOut``
        record_id: Ledger entry id
        applied: Target flag value (True to apply, False to reverse)

    Returns:
        True if this call flipped the flag
    """
    result = session.execute(
        update(model)
        .where(model.id == record_id, model.counters_applied == (not applied))
        .values(counters_applied=applied)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount == 1
