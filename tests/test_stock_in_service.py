"""Tests for the Stock-In ledger service."""

import pytest

from src.models.stock_in import PaymentStatus
from src.schemas.requests import StockInCreate, StockInUpdate
from src.utils.exceptions import InvalidOperationError, NotFoundError, ValidationError


class TestStockInCreate:
    """Tests for recording deliveries."""

    def test_unpaid_delivery_adds_stock_and_debt(self, make_stock_in, product_service, supplier_service,
                                                 product, supplier):
        entry = make_stock_in(quantity=10, unit_price=80.0)

        assert entry["totalAmount"] == 800.0
        assert entry["paymentStatus"] == "Unpaid"
        assert entry["remainingDebt"] == 800.0
        assert entry["countersApplied"] is True
        assert entry["product"]["name"] == "Widget"
        assert entry["supplier"]["name"] == "Acme Supply"
        assert entry["createdBy"] == "tester"
        assert product_service.get(product["id"])["currentStock"] == 10
        assert supplier_service.get(supplier["id"])["totalDebt"] == 800.0

    def test_paid_delivery_adds_no_debt(self, make_stock_in, supplier_service, supplier):
        entry = make_stock_in(payment_status=PaymentStatus.PAID)

        assert entry["amountPaid"] == 800.0
        assert entry["remainingDebt"] == 0.0
        assert supplier_service.get(supplier["id"])["totalDebt"] == 0.0

    def test_partial_delivery(self, make_stock_in, supplier_service, supplier):
        entry = make_stock_in(payment_status=PaymentStatus.PARTIAL, amount_paid=300.0)

        assert entry["remainingDebt"] == 500.0
        assert supplier_service.get(supplier["id"])["totalDebt"] == 500.0

    def test_partial_without_amount_is_rejected_and_nothing_changes(self, make_stock_in, product_service,
                                                                    stock_in_service, product):
        with pytest.raises(ValidationError, match="Amount paid must be provided"):
            make_stock_in(payment_status=PaymentStatus.PARTIAL)

        assert stock_in_service.list() == []
        assert product_service.get(product["id"])["currentStock"] == 0

    def test_unknown_product(self, stock_in_service, supplier):
        payload = StockInCreate(product="missing", supplier=supplier["id"], quantity=1, unit_price=1.0)

        with pytest.raises(NotFoundError, match="Product not found"):
            stock_in_service.create(payload, created_by="tester")

    def test_unknown_supplier(self, stock_in_service, product):
        payload = StockInCreate(product=product["id"], supplier="missing", quantity=1, unit_price=1.0)

        with pytest.raises(NotFoundError, match="Supplier not found"):
            stock_in_service.create(payload, created_by="tester")

    def test_skip_counters_leaves_entry_pending(self, make_stock_in, product_service, product):
        entry = make_stock_in(apply_counters=False)

        assert entry["countersApplied"] is False
        assert product_service.get(product["id"])["currentStock"] == 0


class TestStockInUpdate:
    """Tests for payment updates."""

    def test_product_and_quantity_are_immutable(self, make_stock_in, stock_in_service):
        entry = make_stock_in()

        with pytest.raises(InvalidOperationError, match="Cannot update product or quantity directly"):
            stock_in_service.update(entry["id"], StockInUpdate(quantity=5))

    def test_marking_paid_clears_supplier_debt(self, make_stock_in, stock_in_service, supplier_service,
                                               supplier):
        entry = make_stock_in()

        updated = stock_in_service.update(entry["id"], StockInUpdate(payment_status=PaymentStatus.PAID))

        assert updated["amountPaid"] == 800.0
        assert updated["remainingDebt"] == 0.0
        assert supplier_service.get(supplier["id"])["totalDebt"] == 0.0

    def test_amount_only_derives_partial(self, make_stock_in, stock_in_service, supplier_service, supplier):
        entry = make_stock_in()

        updated = stock_in_service.update(entry["id"], StockInUpdate(amount_paid=200.0))

        assert updated["paymentStatus"] == "Partial"
        assert updated["remainingDebt"] == 600.0
        assert supplier_service.get(supplier["id"])["totalDebt"] == 600.0

    def test_amount_equal_to_total_derives_paid(self, make_stock_in, stock_in_service):
        entry = make_stock_in()

        updated = stock_in_service.update(entry["id"], StockInUpdate(amount_paid=800.0))

        assert updated["paymentStatus"] == "Paid"

    def test_partial_without_amount_keeps_existing_amount(self, make_stock_in, stock_in_service):
        entry = make_stock_in(payment_status=PaymentStatus.PARTIAL, amount_paid=300.0)

        updated = stock_in_service.update(
            entry["id"], StockInUpdate(payment_status=PaymentStatus.PARTIAL, notes="checked")
        )

        assert updated["amountPaid"] == 300.0
        assert updated["notes"] == "checked"

    def test_pending_entry_payment_change_does_not_touch_debt(self, make_stock_in, stock_in_service,
                                                              supplier_service, supplier):
        entry = make_stock_in(apply_counters=False)

        stock_in_service.update(entry["id"], StockInUpdate(payment_status=PaymentStatus.PAID))

        assert supplier_service.get(supplier["id"])["totalDebt"] == 0.0


class TestStockInDelete:

    def test_delete_reverses_counters(self, make_stock_in, stock_in_service, product_service,
                                      supplier_service, product, supplier):
        entry = make_stock_in()

        stock_in_service.delete(entry["id"])

        assert product_service.get(product["id"])["currentStock"] == 0
        assert supplier_service.get(supplier["id"])["totalDebt"] == 0.0
        with pytest.raises(NotFoundError, match="No stock in record found"):
            stock_in_service.get(entry["id"])

    def test_list_filters(self, make_stock_in, stock_in_service):
        make_stock_in(payment_status=PaymentStatus.PAID)
        make_stock_in()

        assert len(stock_in_service.list()) == 2
        assert len(stock_in_service.list(payment_status="Paid")) == 1
        assert len(stock_in_service.list(start_date="2025-05-01", end_date="2025-05-01")) == 0
        assert len(stock_in_service.list(start_date="2025-05-01", end_date="2025-05-31")) == 2
