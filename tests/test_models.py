"""Tests for data models."""

import pytest

from src.models.product import IN_STOCK, LOW_STOCK, OUT_OF_STOCK, Product
from src.models.reconciliation_result import CounterDrift, ReconciliationResult
from src.models.reports import DailySalesLine, ProductProfitLine, SupplierDebtLine, margin_percent
from src.models.stock_in import PaymentStatus


class TestProduct:
    """Tests for the Product model."""

    @pytest.mark.parametrize("stock,expected", [
        (-2, OUT_OF_STOCK),
        (0, OUT_OF_STOCK),
        (1, LOW_STOCK),
        (9, LOW_STOCK),
        (10, IN_STOCK),
        (250, IN_STOCK),
    ])
    def test_stock_status(self, stock, expected):
        """Status thresholds follow the minimum stock level."""
        product = Product(name="Bolt", category="Hardware", unit_price=1.0,
                          current_stock=stock, min_stock_level=10)

        assert product.stock_status == expected

    def test_negative_stock_flag(self):
        product = Product(name="Bolt", category="Hardware", unit_price=1.0,
                          current_stock=-1, min_stock_level=10)

        assert product.has_negative_stock is True

    def test_to_dict_uses_camel_case(self):
        product = Product(id="abc", name="Bolt", category="Hardware", unit_price=1.5,
                          current_stock=3, min_stock_level=10)

        data = product.to_dict()

        assert data["unitPrice"] == 1.5
        assert data["currentStock"] == 3
        assert data["stockStatus"] == LOW_STOCK
        assert "openingStock" not in data


class TestPaymentStatus:

    def test_values(self):
        assert PaymentStatus("Paid") == PaymentStatus.PAID
        assert PaymentStatus.PARTIAL.value == "Partial"
        assert PaymentStatus.UNPAID == "Unpaid"


class TestReportLines:
    """Tests for report aggregate rows."""

    def test_margin_percent_without_revenue(self):
        assert margin_percent(10.0, 0.0) == 0.0

    def test_margin_percent(self):
        assert margin_percent(80.0, 400.0) == pytest.approx(20.0)

    def test_profit_line_uses_fixed_average_cost(self):
        line = ProductProfitLine(product_id="p1", product_name="Widget", avg_cost=80.0)
        line.add_sale(4, 400.0)
        line.add_sale(1, 120.0)

        assert line.quantity_sold == 5
        assert line.cost == pytest.approx(400.0)
        assert line.profit == pytest.approx(120.0)
        assert line.to_dict()["profitMargin"] == pytest.approx(23.0769, rel=1e-4)

    def test_daily_sales_line_counts_sales(self):
        line = DailySalesLine(date="2025-05-10")
        line.add(100.0)
        line.add(50.0)

        assert line.to_dict() == {"date": "2025-05-10", "totalAmount": 150.0, "salesCount": 2}

    def test_supplier_debt_line_sums_deliveries(self):
        line = SupplierDebtLine(supplier_id="s1", supplier_name="Acme")
        line.add_delivery({"id": "a", "remainingDebt": 300.0})
        line.add_delivery({"id": "b", "remainingDebt": 200.0})

        assert line.total_debt == pytest.approx(500.0)
        assert len(line.to_dict()["deliveries"]) == 2


class TestReconciliationResult:
    """Tests for ReconciliationResult model."""

    def test_consistent_when_empty(self):
        result = ReconciliationResult(success=True)
        result.finalize()

        assert result.is_consistent
        assert result.end_time is not None
        assert result.duration >= 0

    def test_open_drift_is_inconsistent(self):
        result = ReconciliationResult(success=True)
        result.add_drift(CounterDrift("product", "p1", "Widget", "currentStock", 7, 6))

        assert result.drift_count == 1
        assert not result.is_consistent
        assert result.drifts[0].difference == 1

    def test_fixed_drift_is_consistent(self):
        result = ReconciliationResult(success=True)
        result.add_drift(CounterDrift("supplier", "s1", "Acme", "totalDebt", 10.0, 0.0, fixed=True))

        assert result.is_consistent

    def test_add_error_marks_failure(self):
        result = ReconciliationResult(success=True)
        result.add_error("SYSTEM", "CriticalError", "boom")

        assert result.success is False
        assert result.to_dict()["errors"][0]["message"] == "boom"

    def test_summary_lists_drifts(self):
        result = ReconciliationResult(success=True)
        result.add_drift(CounterDrift("product", "p1", "Widget", "currentStock", 7, 6))
        result.finalize()

        summary = result.get_summary()

        assert "Drifted: 1" in summary
        assert "Widget" in summary
