"""Tests for the product and supplier registries."""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from src.schemas.requests import ProductCreate, ProductUpdate, SupplierCreate, SupplierUpdate
from src.utils.exceptions import InvalidOperationError, NotFoundError, ValidationError


class TestProductService:
    """Tests for ProductService."""

    def test_create_uses_default_min_stock_level(self, product):
        assert product["minStockLevel"] == 10
        assert product["stockStatus"] == "Out of Stock"

    def test_duplicate_name(self, product_service, product):
        with pytest.raises(ValidationError, match="A product with this name already exists"):
            product_service.create(ProductCreate(name="Widget", category="Other", unit_price=1.0))

    def test_list_by_category(self, product_service, product):
        product_service.create(ProductCreate(name="Apple", category="Food", unit_price=1.0))

        assert [p["name"] for p in product_service.list()] == ["Apple", "Widget"]
        assert [p["name"] for p in product_service.list(category="Food")] == ["Apple"]

    def test_direct_stock_edit(self, product_service, product):
        updated = product_service.update(product["id"], ProductUpdate(current_stock=25, unit_price=120.0))

        assert updated["currentStock"] == 25
        assert updated["unitPrice"] == 120.0
        assert updated["stockStatus"] == "In Stock"

    def test_direct_stock_edit_survives_retry(self, product_service, product, monkeypatch):
        """A transaction retried after a transient commit failure still applies the stock edit."""
        real_commit = Session.commit
        attempts = []

        def flaky_commit(session):
            attempts.append(1)
            if len(attempts) == 1:
                raise OperationalError("COMMIT", {}, Exception("database is locked"))
            return real_commit(session)

        monkeypatch.setattr(Session, "commit", flaky_commit)
        updated = product_service.update(product["id"], ProductUpdate(current_stock=25))
        monkeypatch.undo()

        assert len(attempts) == 2
        assert updated["currentStock"] == 25
        assert product_service.get(product["id"])["currentStock"] == 25

    def test_null_required_fields_are_ignored(self, product_service, product):
        updated = product_service.update(
            product["id"], ProductUpdate(name=None, unit_price=None, description="Steel")
        )

        assert updated["name"] == "Widget"
        assert updated["unitPrice"] == 100.0
        assert updated["description"] == "Steel"

    def test_low_stock(self, product_service, product):
        product_service.create(ProductCreate(name="Gear", category="Hardware", unit_price=1.0, current_stock=50))

        assert [p["name"] for p in product_service.low_stock()] == ["Widget"]

    def test_delete_unknown(self, product_service):
        with pytest.raises(NotFoundError, match="No product found with id nope"):
            product_service.delete("nope")

    def test_delete_leaves_ledger_rows(self, product_service, stock_in_service, make_stock_in, product):
        entry = make_stock_in()

        product_service.delete(product["id"])

        assert stock_in_service.get(entry["id"])["product"] is None


class TestSupplierService:
    """Tests for SupplierService."""

    def test_invalid_email_rejected_by_schema(self):
        with pytest.raises(ValueError, match="Please add a valid email"):
            SupplierCreate(name="Bad", email="not-an-email")

    def test_duplicate_name(self, supplier_service, supplier):
        with pytest.raises(ValidationError, match="A supplier with this name already exists"):
            supplier_service.create(SupplierCreate(name="Acme Supply"))

    def test_update(self, supplier_service, supplier):
        updated = supplier_service.update(supplier["id"], SupplierUpdate(phone="555-0100"))

        assert updated["phone"] == "555-0100"
        assert updated["totalDebt"] == 0.0

    def test_null_name_is_ignored(self, supplier_service, supplier):
        updated = supplier_service.update(supplier["id"], SupplierUpdate(name=None, phone=None))

        assert updated["name"] == "Acme Supply"
        assert updated["phone"] is None

    def test_delete_blocked_while_referenced(self, supplier_service, make_stock_in, supplier):
        make_stock_in()

        with pytest.raises(InvalidOperationError, match="Cannot delete supplier") as exc:
            supplier_service.delete(supplier["id"])

        assert exc.value.details == {"deliveryCount": 1}

    def test_delete(self, supplier_service, supplier):
        supplier_service.delete(supplier["id"])

        with pytest.raises(NotFoundError):
            supplier_service.get(supplier["id"])

    def test_get_includes_deliveries(self, supplier_service, make_stock_in, supplier):
        make_stock_in()

        assert len(supplier_service.get(supplier["id"])["deliveries"]) == 1

    def test_with_debt(self, supplier_service, make_stock_in, supplier):
        supplier_service.create(SupplierCreate(name="Paid Up Ltd"))
        make_stock_in()

        assert [s["name"] for s in supplier_service.with_debt()] == ["Acme Supply"]
