"""Stock-Out ledger model (sales)."""

from datetime import datetime
from typing import Optional, Dict, Any

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, RecordMixin
from .product import Product
from ..utils.dates import isoformat, utcnow


class StockOut(RecordMixin, Base):
    """A sale; removes stock from a product."""

    __tablename__ = "stock_outs"

    product_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    sale_price: Mapped[float] = mapped_column(Float, nullable=False)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)
    customer: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, index=True)
    sale_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    counters_applied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    product: Mapped[Optional[Product]] = relationship(
        Product,
        primaryjoin="foreign(StockOut.product_id) == Product.id",
        viewonly=True,
        lazy="joined"
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation with the product populated."""
        return {
            "id": self.id,
            "product": self.product.to_summary() if self.product else None,
            "productId": self.product_id,
            "quantity": self.quantity,
            "salePrice": self.sale_price,
            "totalAmount": self.total_amount,
            "customer": self.customer,
            "saleDate": isoformat(self.sale_date),
            "notes": self.notes,
            "createdBy": self.created_by,
            "countersApplied": self.counters_applied,
            "createdAt": isoformat(self.created_at)
        }
