"""Supplier registry service."""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.stock_in import StockIn
from ..models.supplier import Supplier
from ..schemas.requests import SupplierCreate, SupplierUpdate
from ..store.database import Database, get_database
from ..store.queries import count_where, find_by_name, get_or_404
from ..utils.exceptions import InvalidOperationError, ValidationError
from ..utils.logger import get_ledger_logger


class SupplierService:
    """Create, read, update and delete suppliers."""

    def __init__(self, database: Optional[Database] = None):
        self.logger = get_ledger_logger()
        self.db = database or get_database()

    def create(self, payload: SupplierCreate) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: If a supplier with the same name exists
        """
        def work(session: Session) -> Dict[str, Any]:
            if find_by_name(session, Supplier, payload.name):
                raise ValidationError("A supplier with this name already exists")

            supplier = Supplier(**payload.model_dump())
            session.add(supplier)
            session.flush()

            self.logger.info(f"Supplier created: {supplier.name} ({supplier.id})")
            return supplier.to_dict()

        return self.db.run_in_transaction(work)

    def list(self) -> List[Dict[str, Any]]:
        with self.db.session_scope() as session:
            return [s.to_dict() for s in session.scalars(select(Supplier).order_by(Supplier.name))]

    def get(self, supplier_id: str) -> Dict[str, Any]:
        """Supplier with its deliveries, newest first."""
        with self.db.session_scope() as session:
            supplier = self._get(session, supplier_id)
            deliveries = session.scalars(
                select(StockIn)
                .where(StockIn.supplier_id == supplier_id)
                .order_by(StockIn.delivery_date.desc())
            ).unique()

            data = supplier.to_dict()
            data["deliveries"] = [d.to_dict() for d in deliveries]
            return data

    def update(self, supplier_id: str, payload: SupplierUpdate) -> Dict[str, Any]:
        def work(session: Session) -> Dict[str, Any]:
            changes = payload.model_dump(exclude_unset=True)
            supplier = self._get(session, supplier_id)

            new_name = changes.get("name")
            if new_name and new_name != supplier.name and find_by_name(session, Supplier, new_name):
                raise ValidationError("A supplier with this name already exists")

            for key, value in changes.items():
                if key == "name" and value is None:
                    continue
                setattr(supplier, key, value)
            session.flush()
            return supplier.to_dict()

        return self.db.run_in_transaction(work)

    def delete(self, supplier_id: str) -> None:
        """
        Delete a supplier that has no deliveries.

        Raises:
            NotFoundError: If the supplier does not exist
            InvalidOperationError: If any Stock-In entry references the supplier
        """
        def work(session: Session) -> None:
            supplier = self._get(session, supplier_id)

            deliveries = count_where(session, StockIn, StockIn.supplier_id == supplier_id)
            if deliveries > 0:
                raise InvalidOperationError(
                    "Cannot delete supplier with associated delivery records. "
                    "Please delete those records first or update them.",
                    details={"deliveryCount": deliveries}
                )

            session.delete(supplier)
            self.logger.info(f"Supplier deleted: {supplier.name}")

        self.db.run_in_transaction(work)

    def with_debt(self) -> List[Dict[str, Any]]:
        """Suppliers that are still owed money, largest debt first."""
        with self.db.session_scope() as session:
            stmt = (
                select(Supplier)
                .where(Supplier.total_debt > 0)
                .order_by(Supplier.total_debt.desc())
            )
            return [s.to_dict() for s in session.scalars(stmt)]

    @staticmethod
    def _get(session: Session, supplier_id: str) -> Supplier:
        return get_or_404(session, Supplier, supplier_id, f"No supplier found with id {supplier_id}")
