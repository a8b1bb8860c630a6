"""Pytest configuration and fixtures."""

from datetime import datetime

import pytest

from src.schemas.requests import ProductCreate, StockInCreate, StockOutCreate, SupplierCreate
from src.services.inventory_rules import InventoryRules
from src.services.product_service import ProductService
from src.services.reconciliation_service import ReconciliationService
from src.services.report_service import ReportService
from src.services.stock_in_service import StockInService
from src.services.stock_out_service import StockOutService
from src.services.supplier_service import SupplierService
from src.store.database import Database

DELIVERY_DATE = datetime(2025, 5, 2, 9, 0)
SALE_DATE = datetime(2025, 5, 10, 14, 30)


@pytest.fixture
def db():
    """In-memory database with all tables created."""
    database = Database("sqlite://")
    database.create_all()
    yield database
    database.close()


@pytest.fixture
def rules():
    return InventoryRules()


@pytest.fixture
def product_service(db):
    return ProductService(db)


@pytest.fixture
def supplier_service(db):
    return SupplierService(db)


@pytest.fixture
def stock_in_service(db, rules):
    return StockInService(db, rules)


@pytest.fixture
def stock_out_service(db, rules):
    return StockOutService(db, rules)


@pytest.fixture
def report_service(db):
    return ReportService(db)


@pytest.fixture
def reconciliation_service(db, rules):
    return ReconciliationService(db, rules)


@pytest.fixture
def product(product_service):
    """A product with no stock."""
    return product_service.create(ProductCreate(name="Widget", category="Hardware", unit_price=100.0))


@pytest.fixture
def supplier(supplier_service):
    return supplier_service.create(SupplierCreate(name="Acme Supply", email="sales@acme.com"))


@pytest.fixture
def make_stock_in(stock_in_service, product, supplier):
    """Factory recording a delivery of the default product from the default supplier."""
    def _make(quantity=10, unit_price=80.0, **fields):
        apply_counters = fields.pop("apply_counters", True)
        payload = StockInCreate(
            product=fields.pop("product_id", product["id"]),
            supplier=fields.pop("supplier_id", supplier["id"]),
            quantity=quantity,
            unit_price=unit_price,
            delivery_date=fields.pop("delivery_date", DELIVERY_DATE),
            **fields
        )
        return stock_in_service.create(payload, created_by="tester", apply_counters=apply_counters)
    return _make


@pytest.fixture
def make_stock_out(stock_out_service, product):
    """Factory recording a sale of the default product."""
    def _make(quantity=4, sale_price=100.0, **fields):
        apply_counters = fields.pop("apply_counters", True)
        payload = StockOutCreate(
            product=fields.pop("product_id", product["id"]),
            quantity=quantity,
            sale_price=sale_price,
            sale_date=fields.pop("sale_date", SALE_DATE),
            **fields
        )
        return stock_out_service.create(payload, created_by="tester", apply_counters=apply_counters)
    return _make
