"""Report routes. Each report is returned flat inside the success envelope."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..middleware.admin_auth import require_admin
from ..services.report_service import ReportService
from .dependencies import get_report_service, success

router = APIRouter(prefix="/reports", tags=["reports"], dependencies=[Depends(require_admin)])


@router.get("/sales")
def sales_report(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    service: ReportService = Depends(get_report_service)
):
    return success(**service.sales_report(start_date, end_date))


@router.get("/stock-status")
def stock_status_report(service: ReportService = Depends(get_report_service)):
    return success(**service.stock_status_report())


@router.get("/supplier-deliveries")
def supplier_deliveries_report(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    supplier_id: Optional[str] = Query(default=None, alias="supplierId"),
    service: ReportService = Depends(get_report_service)
):
    return success(**service.supplier_deliveries_report(start_date, end_date, supplier_id))


@router.get("/profit")
def profit_report(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    service: ReportService = Depends(get_report_service)
):
    return success(**service.profit_report(start_date, end_date))


@router.get("/outstanding-debts")
def outstanding_debts_report(service: ReportService = Depends(get_report_service)):
    return success(**service.outstanding_debts_report())


@router.get("/product-sales")
def product_sales_report(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    service: ReportService = Depends(get_report_service)
):
    return success(**service.product_sales_report(start_date, end_date))
