"""Stock-Out ledger service (sales)."""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.product import Product
from ..models.stock_out import StockOut
from ..schemas.requests import StockOutCreate, StockOutUpdate
from ..store.database import Database, get_database
from ..store.queries import get_or_404
from ..utils.dates import optional_date_range, today_range, utcnow
from ..utils.exceptions import InvalidOperationError
from ..utils.logger import get_ledger_logger
from .inventory_rules import InventoryRules
from .stock_in_service import IMMUTABLE_FIELDS_MESSAGE


class StockOutService:
    """Records sales and removes the sold units from stock."""

    def __init__(self, database: Optional[Database] = None, rules: Optional[InventoryRules] = None):
        self.logger = get_ledger_logger()
        self.db = database or get_database()
        self.rules = rules or InventoryRules()

    def create(self, payload: StockOutCreate, created_by: str, apply_counters: bool = True) -> Dict[str, Any]:
        """
        Record a sale.

        Args:
            payload: Sale fields
            created_by: Id of the user recording the sale
            apply_counters: False leaves the stock untouched (administrative backfills)

        Returns:
            The persisted entry with the product populated

        Raises:
            NotFoundError: Unknown product
            InsufficientStockError: The product has fewer units than requested
        """
        def work(session: Session) -> Dict[str, Any]:
            entry = self.record(session, payload, created_by, check_stock=apply_counters)
            if apply_counters:
                self.rules.apply_stock_out(session, entry)
            else:
                self.logger.info(f"Stock-out {entry.id} recorded without counter changes")
            return entry.to_dict()

        return self.db.run_in_transaction(work)

    def record(
        self,
        session: Session,
        payload: StockOutCreate,
        created_by: str,
        check_stock: bool = True
    ) -> StockOut:
        """Phase 1 of a sale: check stock and persist the entry, counters untouched."""
        product = get_or_404(session, Product, payload.product, "Product not found")
        if check_stock:
            self.rules.check_stock_available(product, payload.quantity)

        entry = StockOut(
            product_id=product.id,
            quantity=payload.quantity,
            sale_price=payload.sale_price,
            total_amount=self.rules.compute_total_amount(
                payload.quantity, payload.sale_price, payload.total_amount
            ),
            customer=payload.customer,
            sale_date=payload.sale_date or utcnow(),
            notes=payload.notes,
            created_by=created_by,
            counters_applied=False
        )
        session.add(entry)
        session.flush()

        self.logger.info(
            f"Stock-out recorded: {entry.id} product={entry.product_id} qty={entry.quantity} "
            f"total={entry.total_amount}"
        )
        return entry

    def list(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        product: Optional[str] = None,
        customer: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Sales, newest first, optionally filtered."""
        date_range = optional_date_range(start_date, end_date)

        with self.db.session_scope() as session:
            stmt = select(StockOut).order_by(StockOut.sale_date.desc())
            if date_range:
                stmt = stmt.where(StockOut.sale_date.between(date_range.start, date_range.end))
            if product:
                stmt = stmt.where(StockOut.product_id == product)
            if customer:
                stmt = stmt.where(StockOut.customer == customer)

            return [entry.to_dict() for entry in session.scalars(stmt)]

    def get(self, entry_id: str) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            return self._get(session, entry_id).to_dict()

    def today(self) -> Dict[str, Any]:
        """Today's sales (UTC) with their total revenue."""
        day = today_range()

        with self.db.session_scope() as session:
            sales = session.scalars(
                select(StockOut)
                .where(StockOut.sale_date.between(day.start, day.end))
                .order_by(StockOut.sale_date.desc())
            ).all()

            return {
                "count": len(sales),
                "totalRevenue": sum(sale.total_amount for sale in sales),
                "data": [sale.to_dict() for sale in sales]
            }

    def update(self, entry_id: str, payload: StockOutUpdate) -> Dict[str, Any]:
        """
        Update price, customer, sale date or notes.

        A new sale price without an explicit total recomputes the total.

        Raises:
            NotFoundError: Unknown entry
            InvalidOperationError: The payload tries to change product or quantity
        """
        def work(session: Session) -> Dict[str, Any]:
            entry = self._get(session, entry_id)

            if payload.product is not None or payload.quantity is not None:
                raise InvalidOperationError(IMMUTABLE_FIELDS_MESSAGE)

            changes = payload.model_dump(exclude_unset=True, exclude={"product", "quantity"})
            if "sale_price" in changes and changes.get("total_amount") is None:
                changes["total_amount"] = self.rules.compute_total_amount(entry.quantity, changes["sale_price"])

            for key, value in changes.items():
                if key in ("sale_price", "total_amount", "sale_date") and value is None:
                    continue
                setattr(entry, key, value)

            session.flush()
            self.logger.info(f"Stock-out {entry.id} updated: {sorted(changes)}")
            return entry.to_dict()

        return self.db.run_in_transaction(work)

    def delete(self, entry_id: str) -> None:
        """Delete a sale and return its units to stock."""
        def work(session: Session) -> None:
            entry = self._get(session, entry_id)
            self.rules.reverse_stock_out(session, entry)
            session.delete(entry)
            self.logger.info(f"Stock-out deleted: {entry_id}")

        self.db.run_in_transaction(work)

    @staticmethod
    def _get(session: Session, entry_id: str) -> StockOut:
        return get_or_404(session, StockOut, entry_id, f"No sale record found with id {entry_id}")
