"""Stock-Out ledger routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..middleware.admin_auth import require_admin
from ..schemas.requests import StockOutCreate, StockOutUpdate
from ..services.stock_out_service import StockOutService
from .dependencies import get_stock_out_service, listing, success

router = APIRouter(prefix="/stock-out", tags=["stock-out"])


@router.get("", dependencies=[Depends(require_admin)])
def list_stock_out(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    product: Optional[str] = None,
    customer: Optional[str] = None,
    service: StockOutService = Depends(get_stock_out_service)
):
    return listing(service.list(start_date, end_date, product, customer))


@router.post("", status_code=201)
def create_stock_out(
    payload: StockOutCreate,
    user_id: str = Depends(require_admin),
    service: StockOutService = Depends(get_stock_out_service)
):
    """Record a sale; rejected when the product has too little stock."""
    return success(data=service.create(payload, created_by=user_id))


@router.get("/today", dependencies=[Depends(require_admin)])
def todays_sales(service: StockOutService = Depends(get_stock_out_service)):
    return success(**service.today())


@router.get("/{entry_id}", dependencies=[Depends(require_admin)])
def get_stock_out(entry_id: str, service: StockOutService = Depends(get_stock_out_service)):
    return success(data=service.get(entry_id))


@router.put("/{entry_id}", dependencies=[Depends(require_admin)])
def update_stock_out(
    entry_id: str,
    payload: StockOutUpdate,
    service: StockOutService = Depends(get_stock_out_service)
):
    return success(data=service.update(entry_id, payload))


@router.delete("/{entry_id}", dependencies=[Depends(require_admin)])
def delete_stock_out(entry_id: str, service: StockOutService = Depends(get_stock_out_service)):
    service.delete(entry_id)
    return success(data={})
