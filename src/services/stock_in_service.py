"""Stock-In ledger service (deliveries from suppliers)."""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.product import Product
from ..models.stock_in import PaymentStatus, StockIn
from ..models.supplier import Supplier
from ..schemas.requests import StockInCreate, StockInUpdate
from ..store.database import Database, get_database
from ..store.queries import get_or_404
from ..utils.dates import optional_date_range, utcnow
from ..utils.exceptions import InvalidOperationError
from ..utils.logger import get_ledger_logger
from .inventory_rules import InventoryRules

IMMUTABLE_FIELDS_MESSAGE = "Cannot update product or quantity directly. Create a new record instead."


class StockInService:
    """
    Records deliveries and keeps product stock and supplier debt in step.

    Every mutation runs both phases (entry write, counter adjustment) in a
    single store transaction.
    """

    def __init__(self, database: Optional[Database] = None, rules: Optional[InventoryRules] = None):
        self.logger = get_ledger_logger()
        self.db = database or get_database()
        self.rules = rules or InventoryRules()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, payload: StockInCreate, created_by: str, apply_counters: bool = True) -> Dict[str, Any]:
        """
        Record a delivery.

        Args:
            payload: Delivery fields
            created_by: Id of the user recording the delivery
            apply_counters: False leaves the counters untouched (administrative
                backfills); the entry stays pending until reconciliation applies it

        Returns:
            The persisted entry with product and supplier populated

        Raises:
            ValidationError: Partial payment without amount paid
            NotFoundError: Unknown product or supplier
        """
        def work(session: Session) -> Dict[str, Any]:
            entry = self.record(session, payload, created_by)
            if apply_counters:
                self.rules.apply_stock_in(session, entry)
            else:
                self.logger.info(f"Stock-in {entry.id} recorded without counter changes")
            return entry.to_dict()

        return self.db.run_in_transaction(work)

    def record(self, session: Session, payload: StockInCreate, created_by: str) -> StockIn:
        """Phase 1 of a delivery: validate and persist the entry, counters untouched."""
        get_or_404(session, Product, payload.product, "Product not found")
        get_or_404(session, Supplier, payload.supplier, "Supplier not found")

        total_amount = self.rules.compute_total_amount(
            payload.quantity, payload.unit_price, payload.total_amount
        )
        terms = self.rules.resolve_payment(payload.payment_status, total_amount, payload.amount_paid)

        entry = StockIn(
            product_id=payload.product,
            supplier_id=payload.supplier,
            quantity=payload.quantity,
            unit_price=payload.unit_price,
            total_amount=total_amount,
            payment_status=terms.status.value,
            amount_paid=terms.amount_paid,
            remaining_debt=terms.remaining_debt,
            delivery_date=payload.delivery_date or utcnow(),
            notes=payload.notes,
            created_by=created_by,
            counters_applied=False
        )
        session.add(entry)
        session.flush()

        self.logger.info(
            f"Stock-in recorded: {entry.id} product={entry.product_id} qty={entry.quantity} "
            f"total={entry.total_amount} status={entry.payment_status} debt={entry.remaining_debt}"
        )
        return entry

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        supplier: Optional[str] = None,
        product: Optional[str] = None,
        payment_status: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Deliveries, newest first, optionally filtered."""
        date_range = optional_date_range(start_date, end_date)

        with self.db.session_scope() as session:
            stmt = select(StockIn).order_by(StockIn.delivery_date.desc())
            if date_range:
                stmt = stmt.where(StockIn.delivery_date.between(date_range.start, date_range.end))
            if supplier:
                stmt = stmt.where(StockIn.supplier_id == supplier)
            if product:
                stmt = stmt.where(StockIn.product_id == product)
            if payment_status:
                stmt = stmt.where(StockIn.payment_status == payment_status)

            return [entry.to_dict() for entry in session.scalars(stmt)]

    def get(self, entry_id: str) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            return self._get(session, entry_id).to_dict()

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, entry_id: str, payload: StockInUpdate) -> Dict[str, Any]:
        """
        Update payment fields, delivery date or notes.

        When payment fields change the remaining debt is recomputed and only
        the difference is applied to the supplier's total debt.

        Raises:
            NotFoundError: Unknown entry
            InvalidOperationError: The payload tries to change product or quantity
            ValidationError: Invalid payment amounts
        """
        def work(session: Session) -> Dict[str, Any]:
            entry = self._get(session, entry_id)

            if payload.product is not None or payload.quantity is not None:
                raise InvalidOperationError(IMMUTABLE_FIELDS_MESSAGE)

            if payload.payment_status is not None or payload.amount_paid is not None:
                self._update_payment(session, entry, payload.payment_status, payload.amount_paid)

            if payload.delivery_date is not None:
                entry.delivery_date = payload.delivery_date
            if "notes" in payload.model_fields_set:
                entry.notes = payload.notes

            session.flush()
            return entry.to_dict()

        return self.db.run_in_transaction(work)

    def _update_payment(
        self,
        session: Session,
        entry: StockIn,
        status: Optional[PaymentStatus],
        amount_paid: Optional[float]
    ) -> None:
        original_debt = entry.remaining_debt

        if status is None:
            status = self.rules.derive_status(amount_paid, entry.total_amount)
        if status == PaymentStatus.PARTIAL and amount_paid is None:
            amount_paid = entry.amount_paid

        terms = self.rules.resolve_payment(status, entry.total_amount, amount_paid)
        entry.payment_status = terms.status.value
        entry.amount_paid = terms.amount_paid
        entry.remaining_debt = terms.remaining_debt

        debt_change = terms.remaining_debt - original_debt
        self.rules.apply_debt_change(session, entry, debt_change)

        self.logger.info(
            f"Stock-in {entry.id} payment updated: status={entry.payment_status} "
            f"paid={entry.amount_paid} debt {original_debt} -> {entry.remaining_debt}"
        )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete(self, entry_id: str) -> None:
        """Delete a delivery and reverse its stock and debt effects."""
        def work(session: Session) -> None:
            entry = self._get(session, entry_id)
            self.rules.reverse_stock_in(session, entry)
            session.delete(entry)
            self.logger.info(f"Stock-in deleted: {entry_id}")

        self.db.run_in_transaction(work)

    @staticmethod
    def _get(session: Session, entry_id: str) -> StockIn:
        return get_or_404(session, StockIn, entry_id, f"No stock in record found with id {entry_id}")
