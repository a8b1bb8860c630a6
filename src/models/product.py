"""Product registry model."""

from typing import Optional, Dict, Any

from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, RecordMixin
from ..utils.dates import isoformat

OUT_OF_STOCK = "Out of Stock"
LOW_STOCK = "Low Stock"
IN_STOCK = "In Stock"


class Product(RecordMixin, Base):
    """A stocked product with its running on-hand quantity."""

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    unit_price: Mapped[float] = mapped_column(Float, nullable=False)
    current_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Part of current_stock not explained by applied ledger entries
    opening_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_stock_level: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def stock_status(self) -> str:
        if self.current_stock <= 0:
            return OUT_OF_STOCK
        if self.current_stock < self.min_stock_level:
            return LOW_STOCK
        return IN_STOCK

    @property
    def has_negative_stock(self) -> bool:
        return self.current_stock < 0

    def to_summary(self) -> Dict[str, Any]:
        """Reference view embedded in ledger entries."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "unitPrice": self.unit_price
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "unitPrice": self.unit_price,
            "currentStock": self.current_stock,
            "minStockLevel": self.min_stock_level,
            "description": self.description,
            "stockStatus": self.stock_status,
            "createdAt": isoformat(self.created_at)
        }

    def __repr__(self) -> str:
        return f"<Product {self.name!r} stock={self.current_stock}>"
