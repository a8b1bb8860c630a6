"""Stock-In ledger model (purchases / deliveries)."""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, RecordMixin
from .product import Product
from .supplier import Supplier
from ..utils.dates import isoformat, utcnow


class PaymentStatus(str, Enum):
    """How much of a delivery has been paid for."""

    PAID = "Paid"
    PARTIAL = "Partial"
    UNPAID = "Unpaid"


class StockIn(RecordMixin, Base):
    """A delivery from a supplier; adds stock and possibly supplier debt."""

    __tablename__ = "stock_ins"

    # Plain reference columns: integrity is checked by the services, not the store
    product_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    supplier_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[float] = mapped_column(Float, nullable=False)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=PaymentStatus.UNPAID.value, index=True
    )
    amount_paid: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    remaining_debt: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    delivery_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    counters_applied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    product: Mapped[Optional[Product]] = relationship(
        Product,
        primaryjoin="foreign(StockIn.product_id) == Product.id",
        viewonly=True,
        lazy="joined"
    )
    supplier: Mapped[Optional[Supplier]] = relationship(
        Supplier,
        primaryjoin="foreign(StockIn.supplier_id) == Supplier.id",
        viewonly=True,
        lazy="joined"
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation with references populated."""
        return {
            "id": self.id,
            "product": self.product.to_summary() if self.product else None,
            "productId": self.product_id,
            "supplier": self.supplier.to_summary() if self.supplier else None,
            "supplierId": self.supplier_id,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "totalAmount": self.total_amount,
            "paymentStatus": self.payment_status,
            "amountPaid": self.amount_paid,
            "remainingDebt": self.remaining_debt,
            "deliveryDate": isoformat(self.delivery_date),
            "notes": self.notes,
            "createdBy": self.created_by,
            "countersApplied": self.counters_applied,
            "createdAt": isoformat(self.created_at)
        }
