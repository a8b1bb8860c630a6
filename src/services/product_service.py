"""Product registry service."""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.product import Product
from ..models.stock_in import StockIn
from ..models.stock_out import StockOut
from ..schemas.requests import ProductCreate, ProductUpdate
from ..store.counters import increment_counter
from ..store.database import Database, get_database
from ..store.queries import count_where, find_by_name, get_or_404
from ..utils.config import get_config
from ..utils.exceptions import ValidationError
from ..utils.logger import get_ledger_logger

# Columns that cannot be cleared through an update
REQUIRED_FIELDS = ("name", "category", "unit_price", "min_stock_level")


class ProductService:
    """Create, read, update and delete products."""

    def __init__(self, database: Optional[Database] = None):
        self.config = get_config()
        self.logger = get_ledger_logger()
        self.db = database or get_database()

    def create(self, payload: ProductCreate) -> Dict[str, Any]:
        """
        Register a new product.

        The initial ``current_stock`` becomes the product's opening stock.

        Raises:
            ValidationError: If a product with the same name exists
        """
        def work(session: Session) -> Dict[str, Any]:
            if find_by_name(session, Product, payload.name):
                raise ValidationError("A product with this name already exists")

            min_level = payload.min_stock_level
            if min_level is None:
                min_level = self.config.inventory.default_min_stock_level

            product = Product(
                name=payload.name,
                category=payload.category,
                unit_price=payload.unit_price,
                current_stock=payload.current_stock,
                opening_stock=payload.current_stock,
                min_stock_level=min_level,
                description=payload.description
            )
            session.add(product)
            session.flush()

            self.logger.info(f"Product created: {product.name} ({product.id})")
            return product.to_dict()

        return self.db.run_in_transaction(work)

    def list(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            stmt = select(Product).order_by(Product.name)
            if category:
                stmt = stmt.where(Product.category == category)
            return [p.to_dict() for p in session.scalars(stmt)]

    def get(self, product_id: str) -> Dict[str, Any]:
        with self.db.session_scope() as session:
            return self._get(session, product_id).to_dict()

    def update(self, product_id: str, payload: ProductUpdate) -> Dict[str, Any]:
        """
        Edit a product.

        A direct ``currentStock`` edit bypasses the ledger; it is recorded as
        a change of the opening stock so reconciliation still balances.
        """
        def work(session: Session) -> Dict[str, Any]:
            changes = payload.model_dump(exclude_unset=True)
            product = self._get(session, product_id)

            new_name = changes.get("name")
            if new_name and new_name != product.name and find_by_name(session, Product, new_name):
                raise ValidationError("A product with this name already exists")

            new_stock = changes.pop("current_stock", None)
            for key, value in changes.items():
                if value is None and key in REQUIRED_FIELDS:
                    continue
                setattr(product, key, value)
            session.flush()

            if new_stock is not None and new_stock != product.current_stock:
                delta = new_stock - product.current_stock
                increment_counter(session, Product, product_id, "current_stock", delta)
                increment_counter(session, Product, product_id, "opening_stock", delta)
                self.logger.warning(
                    f"Direct stock edit on {product.name}: {delta:+} (now {product.current_stock})"
                )

            return product.to_dict()

        return self.db.run_in_transaction(work)

    def delete(self, product_id: str) -> None:
        """
        Delete a product.

        Products have no reference guard; ledger entries pointing at a deleted
        product become dangling and are excluded from reports.
        """
        def work(session: Session) -> None:
            product = self._get(session, product_id)
            references = (
                count_where(session, StockIn, StockIn.product_id == product_id)
                + count_where(session, StockOut, StockOut.product_id == product_id)
            )
            session.delete(product)

            if references:
                self.logger.warning(
                    f"Product {product.name} deleted with {references} ledger entries still referencing it"
                )
            else:
                self.logger.info(f"Product deleted: {product.name}")

        self.db.run_in_transaction(work)

    def low_stock(self) -> List[Dict[str, Any]]:
        """Products below their minimum stock level, lowest stock first."""
        with self.db.session_scope() as session:
            stmt = (
                select(Product)
                .where(Product.current_stock < Product.min_stock_level)
                .order_by(Product.current_stock, Product.name)
            )
            return [p.to_dict() for p in session.scalars(stmt)]

    @staticmethod
    def _get(session: Session, product_id: str) -> Product:
        return get_or_404(session, Product, product_id, f"No product found with id {product_id}")
