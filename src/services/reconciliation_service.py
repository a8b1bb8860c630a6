"""Counter reconciliation against the ledgers."""

from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models.product import Product
from ..models.reconciliation_result import DRIFT_TOLERANCE, CounterDrift, ReconciliationResult
from ..models.stock_in import StockIn
from ..models.stock_out import StockOut
from ..models.supplier import Supplier
from ..store.counters import set_counter
from ..store.database import Database, get_database
from ..utils.exceptions import BaseAppException
from ..utils.logger import get_error_logger, get_reconcile_logger
from .inventory_rules import InventoryRules


class ReconciliationService:
    """
    Recomputes ``Product.current_stock`` and ``Supplier.total_debt`` from
    the applied ledger entries and reports (optionally repairs) any drift.
    """

    def __init__(self, database: Database = None, rules: InventoryRules = None):
        self.logger = get_reconcile_logger()
        self.error_logger = get_error_logger()
        self.db = database or get_database()
        self.rules = rules or InventoryRules()

    def reconcile(self, fix: bool = False, apply_pending: bool = False) -> ReconciliationResult:
        """
        Run a reconciliation pass.

        Args:
            fix: Overwrite drifted counters with the value the ledger implies
            apply_pending: First run the counter phase of entries recorded
                without it

        Returns:
            ReconciliationResult
        """
        self.logger.info("=" * 60)
        self.logger.info(f"Starting reconciliation (fix={fix}, apply_pending={apply_pending})")
        self.logger.info("=" * 60)

        result = ReconciliationResult(success=True)

        try:
            if apply_pending:
                self._apply_pending(result)

            self.db.run_in_transaction(lambda session: self._check_counters(session, result, fix))

        except Exception as e:
            self.error_logger.error(f"Critical reconciliation error: {str(e)}", exc_info=True)
            result.add_error("SYSTEM", "CriticalError", str(e))

        result.finalize()
        self.logger.info(result.get_summary())
        return result

    # ------------------------------------------------------------------
    # Pending entries
    # ------------------------------------------------------------------

    def _apply_pending(self, result: ReconciliationResult) -> None:
        """Apply each pending entry in its own transaction so one failure does not block the rest."""
        with self.db.session_scope() as session:
            pending_in = session.scalars(
                select(StockIn.id).where(StockIn.counters_applied.is_(False)).order_by(StockIn.created_at)
            ).all()
            pending_out = session.scalars(
                select(StockOut.id).where(StockOut.counters_applied.is_(False)).order_by(StockOut.created_at)
            ).all()

        self.logger.info(f"Pending entries: {len(pending_in)} stock-in, {len(pending_out)} stock-out")

        for entry_id in pending_in:
            self._apply_one(result, StockIn, entry_id, self.rules.apply_stock_in)
        for entry_id in pending_out:
            self._apply_one(result, StockOut, entry_id, self.rules.apply_stock_out)

    def _apply_one(self, result: ReconciliationResult, model, entry_id: str, apply) -> None:
        def work(session: Session) -> bool:
            entry = session.get(model, entry_id)
            if entry is None:
                return False
            return apply(session, entry)

        try:
            if self.db.run_in_transaction(work):
                result.pending_applied_count += 1
        except BaseAppException as e:
            self.logger.warning(f"Could not apply {model.__name__} {entry_id}: {e.message}")
            result.add_error(entry_id, type(e).__name__, e.message)

    # ------------------------------------------------------------------
    # Counter checks
    # ------------------------------------------------------------------

    def _check_counters(self, session: Session, result: ReconciliationResult, fix: bool) -> None:
        stock_in = self._applied_totals(session, StockIn.product_id, StockIn.quantity, StockIn)
        stock_out = self._applied_totals(session, StockOut.product_id, StockOut.quantity, StockOut)
        supplier_debt = self._applied_totals(session, StockIn.supplier_id, StockIn.remaining_debt, StockIn)

        drifts: List[CounterDrift] = []

        for product in session.scalars(select(Product).order_by(Product.name)):
            result.checked_count += 1
            expected = product.opening_stock + stock_in.get(product.id, 0) - stock_out.get(product.id, 0)
            if abs(product.current_stock - expected) > DRIFT_TOLERANCE:
                drifts.append(CounterDrift(
                    record_type="product",
                    record_id=product.id,
                    name=product.name,
                    counter="currentStock",
                    stored=product.current_stock,
                    expected=expected
                ))

        for supplier in session.scalars(select(Supplier).order_by(Supplier.name)):
            result.checked_count += 1
            expected = supplier_debt.get(supplier.id, 0.0)
            if abs(supplier.total_debt - expected) > DRIFT_TOLERANCE:
                drifts.append(CounterDrift(
                    record_type="supplier",
                    record_id=supplier.id,
                    name=supplier.name,
                    counter="totalDebt",
                    stored=supplier.total_debt,
                    expected=expected
                ))

        for drift in drifts:
            self.logger.warning(
                f"Drift on {drift.record_type} {drift.name}: {drift.counter} "
                f"stored={drift.stored} expected={drift.expected}"
            )
            if fix:
                model, column = (Product, "current_stock") if drift.record_type == "product" \
                    else (Supplier, "total_debt")
                drift.fixed = set_counter(session, model, drift.record_id, column, drift.expected)
                if drift.fixed:
                    result.fixed_count += 1
            result.add_drift(drift)

    @staticmethod
    def _applied_totals(session: Session, key_column, value_column, model) -> Dict[str, float]:
        rows = session.execute(
            select(key_column, func.sum(value_column))
            .where(model.counters_applied.is_(True))
            .group_by(key_column)
        )
        return {key: value or 0 for key, value in rows}
