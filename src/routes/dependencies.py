"""Shared FastAPI dependencies and response helpers for the API routes."""

from typing import Any, Dict, List

from fastapi import Depends

from ..services.product_service import ProductService
from ..services.report_service import ReportService
from ..services.stock_in_service import StockInService
from ..services.stock_out_service import StockOutService
from ..services.supplier_service import SupplierService
from ..store.database import Database, get_database


def get_db() -> Database:
    """Application database; tests override this dependency."""
    return get_database()


def get_product_service(db: Database = Depends(get_db)) -> ProductService:
    return ProductService(db)


def get_supplier_service(db: Database = Depends(get_db)) -> SupplierService:
    return SupplierService(db)


def get_stock_in_service(db: Database = Depends(get_db)) -> StockInService:
    return StockInService(db)


def get_stock_out_service(db: Database = Depends(get_db)) -> StockOutService:
    return StockOutService(db)


def get_report_service(db: Database = Depends(get_db)) -> ReportService:
    return ReportService(db)


def success(**payload: Any) -> Dict[str, Any]:
    """Success envelope: ``{"success": true, ...payload}``."""
    return {"success": True, **payload}


def listing(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    return success(count=len(rows), data=rows)
