"""Inventory consistency rules.

Keeps ``Product.current_stock`` and ``Supplier.total_debt`` in step with the
Stock-In / Stock-Out ledgers. Every ledger mutation is two explicit phases:

  1. the ledger service writes (or deletes) the entry,
  2. the ledger service calls one of the ``apply_*`` / ``reverse_*`` methods
     here to adjust the running counters.

Phase 2 first claims the entry's ``counters_applied`` flag with a
conditional update, so calling it twice for the same entry adjusts the
counters once. Reconciliation relies on this to re-apply pending entries.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..models.product import Product
from ..models.stock_in import PaymentStatus, StockIn
from ..models.stock_out import StockOut
from ..models.supplier import Supplier
from ..store.counters import claim_counter_phase, increment_counter
from ..utils.exceptions import InsufficientStockError, NotFoundError, ValidationError
from ..utils.logger import get_ledger_logger


@dataclass(frozen=True)
class PaymentTerms:
    """Resolved payment fields of a Stock-In entry."""

    status: PaymentStatus
    amount_paid: float
    remaining_debt: float


class InventoryRules:
    """Pure payment/stock rules plus the counter phases of ledger mutations."""

    def __init__(self):
        self.logger = get_ledger_logger()

    # ------------------------------------------------------------------
    # Pure rules
    # ------------------------------------------------------------------

    @staticmethod
    def compute_total_amount(quantity: int, unit_price: float, total_amount: Optional[float] = None) -> float:
        """Total of a ledger line: the explicit amount if given, else quantity × price."""
        if total_amount is not None:
            return total_amount
        return quantity * unit_price

    @staticmethod
    def resolve_payment(
        status: PaymentStatus,
        total_amount: float,
        amount_paid: Optional[float] = None
    ) -> PaymentTerms:
        """
        Derive amount paid and remaining debt from the payment status.

        Args:
            status: Paid, Partial or Unpaid
            total_amount: Total of the delivery
            amount_paid: Required for Partial, ignored otherwise

        Returns:
            PaymentTerms with ``amount_paid + remaining_debt == total_amount``

        Raises:
            ValidationError: Partial without an amount, or an amount outside [0, total]
        """
        status = PaymentStatus(status)

        if status == PaymentStatus.PAID:
            return PaymentTerms(status, total_amount, 0.0)

        if status == PaymentStatus.PARTIAL:
            if not amount_paid:
                raise ValidationError("Amount paid must be provided for partial payment")
            if amount_paid < 0 or amount_paid > total_amount:
                raise ValidationError(
                    f"Amount paid must be between 0 and the total amount ({total_amount})",
                    details={"amountPaid": amount_paid, "totalAmount": total_amount}
                )
            return PaymentTerms(status, amount_paid, total_amount - amount_paid)

        return PaymentTerms(PaymentStatus.UNPAID, 0.0, total_amount)

    @staticmethod
    def derive_status(amount_paid: float, total_amount: float) -> PaymentStatus:
        """Status implied by an amount paid when no status is given."""
        if amount_paid <= 0:
            return PaymentStatus.UNPAID
        if amount_paid >= total_amount:
            return PaymentStatus.PAID
        return PaymentStatus.PARTIAL

    @staticmethod
    def check_stock_available(product: Product, quantity: int) -> None:
        """
        Raises:
            InsufficientStockError: If the product has fewer than ``quantity`` units
        """
        if product.current_stock < quantity:
            raise InsufficientStockError(available=product.current_stock, requested=quantity)

    # ------------------------------------------------------------------
    # Stock-In counter phases
    # ------------------------------------------------------------------

    def apply_stock_in(self, session: Session, entry: StockIn) -> bool:
        """
        Add a delivery to the counters: stock += quantity, debt += remaining debt.

        Returns:
            False if the entry's counters were already applied
        """
        if not claim_counter_phase(session, StockIn, entry.id, applied=True):
            self.logger.debug(f"Stock-in {entry.id} counters already applied")
            return False

        self._increment(session, Product, entry.product_id, "current_stock", entry.quantity)
        self._increment(session, Supplier, entry.supplier_id, "total_debt", entry.remaining_debt)

        self.logger.info(
            f"Stock-in {entry.id}: product {entry.product_id} stock +{entry.quantity}, "
            f"supplier {entry.supplier_id} debt +{entry.remaining_debt}"
        )
        return True

    def reverse_stock_in(self, session: Session, entry: StockIn) -> bool:
        """
        Remove a delivery from the counters (inverse of :meth:`apply_stock_in`).

        Returns:
            False if the entry's counters were never applied
        """
        if not claim_counter_phase(session, StockIn, entry.id, applied=False):
            self.logger.debug(f"Stock-in {entry.id} counters not applied, nothing to reverse")
            return False

        self._increment(session, Product, entry.product_id, "current_stock", -entry.quantity)
        self._increment(session, Supplier, entry.supplier_id, "total_debt", -entry.remaining_debt)

        self.logger.info(
            f"Stock-in {entry.id} reversed: product {entry.product_id} stock -{entry.quantity}, "
            f"supplier {entry.supplier_id} debt -{entry.remaining_debt}"
        )
        return True

    def apply_debt_change(self, session: Session, entry: StockIn, debt_change: float) -> bool:
        """
        Apply the change of an entry's remaining debt to its supplier.

        Only the delta is applied, never the absolute value. Entries whose
        counters are not applied have no debt on the supplier yet.
        """
        if not entry.counters_applied or debt_change == 0:
            return False

        self._increment(session, Supplier, entry.supplier_id, "total_debt", debt_change)
        self.logger.info(f"Stock-in {entry.id}: supplier {entry.supplier_id} debt {debt_change:+}")
        return True

    # ------------------------------------------------------------------
    # Stock-Out counter phases
    # ------------------------------------------------------------------

    def apply_stock_out(self, session: Session, entry: StockOut) -> bool:
        """
        Remove sold units from the product's stock.

        The decrement only happens while the stock still covers the sale, so
        two concurrent sales cannot overdraw the product.

        Raises:
            NotFoundError: If the product no longer exists
            InsufficientStockError: If the stock no longer covers the sale
        """
        if not claim_counter_phase(session, StockOut, entry.id, applied=True):
            self.logger.debug(f"Stock-out {entry.id} counters already applied")
            return False

        if not increment_counter(
            session, Product, entry.product_id, "current_stock", -entry.quantity, minimum=entry.quantity
        ):
            product = session.get(Product, entry.product_id, populate_existing=True)
            if product is None:
                raise NotFoundError("Product not found", details={"id": entry.product_id})
            raise InsufficientStockError(available=product.current_stock, requested=entry.quantity)

        self.logger.info(f"Stock-out {entry.id}: product {entry.product_id} stock -{entry.quantity}")
        return True

    def reverse_stock_out(self, session: Session, entry: StockOut) -> bool:
        """Return sold units to stock (inverse of :meth:`apply_stock_out`)."""
        if not claim_counter_phase(session, StockOut, entry.id, applied=False):
            self.logger.debug(f"Stock-out {entry.id} counters not applied, nothing to reverse")
            return False

        self._increment(session, Product, entry.product_id, "current_stock", entry.quantity)
        self.logger.info(f"Stock-out {entry.id} reversed: product {entry.product_id} stock +{entry.quantity}")
        return True

    # ------------------------------------------------------------------

    def _increment(self, session: Session, model, record_id: str, column: str, delta: float) -> None:
        if not increment_counter(session, model, record_id, column, delta):
            # Same as an increment on a missing document: nothing to update
            self.logger.warning(
                f"{model.__name__} {record_id} not found, {column} change of {delta} not applied"
            )
