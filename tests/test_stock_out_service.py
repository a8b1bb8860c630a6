"""Tests for the Stock-Out ledger service."""

import pytest

from src.schemas.requests import StockOutCreate, StockOutUpdate
from src.utils.dates import utcnow
from src.utils.exceptions import InsufficientStockError, InvalidOperationError, NotFoundError


class TestStockOutCreate:
    """Tests for recording sales."""

    def test_sale_decrements_stock(self, make_stock_in, make_stock_out, product_service, product):
        make_stock_in(quantity=10)

        sale = make_stock_out(quantity=4, sale_price=100.0)

        assert sale["totalAmount"] == 400.0
        assert sale["product"]["id"] == product["id"]
        assert product_service.get(product["id"])["currentStock"] == 6

    def test_insufficient_stock_is_rejected(self, make_stock_in, make_stock_out, stock_out_service,
                                            product_service, product):
        make_stock_in(quantity=10)
        make_stock_out(quantity=4)

        with pytest.raises(InsufficientStockError, match="Available: 6, Requested: 7") as exc:
            make_stock_out(quantity=7)

        assert exc.value.details == {"available": 6, "requested": 7}
        assert product_service.get(product["id"])["currentStock"] == 6
        assert len(stock_out_service.list()) == 1

    def test_unknown_product(self, stock_out_service):
        payload = StockOutCreate(product="missing", quantity=1, sale_price=1.0)

        with pytest.raises(NotFoundError, match="Product not found"):
            stock_out_service.create(payload, created_by="tester")

    def test_explicit_total_amount(self, make_stock_in, make_stock_out):
        make_stock_in(quantity=10)

        sale = make_stock_out(quantity=2, sale_price=100.0, total_amount=180.0)

        assert sale["totalAmount"] == 180.0


class TestStockOutUpdateDelete:

    def test_new_price_recomputes_total(self, make_stock_in, make_stock_out, stock_out_service):
        make_stock_in(quantity=10)
        sale = make_stock_out(quantity=4, sale_price=100.0)

        updated = stock_out_service.update(sale["id"], StockOutUpdate(sale_price=90.0, customer="Bob"))

        assert updated["salePrice"] == 90.0
        assert updated["totalAmount"] == 360.0
        assert updated["customer"] == "Bob"

    def test_product_is_immutable(self, make_stock_in, make_stock_out, stock_out_service, product):
        make_stock_in(quantity=10)
        sale = make_stock_out()

        with pytest.raises(InvalidOperationError):
            stock_out_service.update(sale["id"], StockOutUpdate(product=product["id"]))

    def test_delete_restores_stock(self, make_stock_in, make_stock_out, stock_out_service,
                                   product_service, product):
        make_stock_in(quantity=10)
        sale = make_stock_out(quantity=4)

        stock_out_service.delete(sale["id"])

        assert product_service.get(product["id"])["currentStock"] == 10
        with pytest.raises(NotFoundError, match="No sale record found"):
            stock_out_service.get(sale["id"])

    def test_today(self, make_stock_in, make_stock_out, stock_out_service):
        make_stock_in(quantity=10)
        make_stock_out(quantity=1, sale_price=50.0, sale_date=utcnow())
        make_stock_out(quantity=1, sale_price=50.0)

        today = stock_out_service.today()

        assert today["count"] == 1
        assert today["totalRevenue"] == 50.0

    def test_list_filters_by_customer(self, make_stock_in, make_stock_out, stock_out_service):
        make_stock_in(quantity=10)
        make_stock_out(quantity=1, customer="Alice")
        make_stock_out(quantity=1, customer="Bob")

        assert [s["customer"] for s in stock_out_service.list(customer="Alice")] == ["Alice"]
