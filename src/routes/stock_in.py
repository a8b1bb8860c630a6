"""Stock-In ledger routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..middleware.admin_auth import require_admin
from ..schemas.requests import StockInCreate, StockInUpdate
from ..services.stock_in_service import StockInService
from .dependencies import get_stock_in_service, listing, success

router = APIRouter(prefix="/stock-in", tags=["stock-in"])


@router.get("", dependencies=[Depends(require_admin)])
def list_stock_in(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    supplier: Optional[str] = None,
    product: Optional[str] = None,
    payment_status: Optional[str] = Query(default=None, alias="paymentStatus"),
    service: StockInService = Depends(get_stock_in_service)
):
    return listing(service.list(start_date, end_date, supplier, product, payment_status))


@router.post("", status_code=201)
def create_stock_in(
    payload: StockInCreate,
    user_id: str = Depends(require_admin),
    service: StockInService = Depends(get_stock_in_service)
):
    """Record a delivery; adds to product stock and supplier debt."""
    return success(data=service.create(payload, created_by=user_id))


@router.get("/{entry_id}", dependencies=[Depends(require_admin)])
def get_stock_in(entry_id: str, service: StockInService = Depends(get_stock_in_service)):
    return success(data=service.get(entry_id))


@router.put("/{entry_id}", dependencies=[Depends(require_admin)])
def update_stock_in(
    entry_id: str,
    payload: StockInUpdate,
    service: StockInService = Depends(get_stock_in_service)
):
    return success(data=service.update(entry_id, payload))


@router.delete("/{entry_id}", dependencies=[Depends(require_admin)])
def delete_stock_in(entry_id: str, service: StockInService = Depends(get_stock_in_service)):
    service.delete(entry_id)
    return success(data={})
