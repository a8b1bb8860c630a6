"""Supplier registry routes."""

from fastapi import APIRouter, Depends

from ..middleware.admin_auth import require_admin
from ..schemas.requests import SupplierCreate, SupplierUpdate
from ..services.supplier_service import SupplierService
from .dependencies import get_supplier_service, listing, success

router = APIRouter(prefix="/suppliers", tags=["suppliers"], dependencies=[Depends(require_admin)])


@router.get("")
def list_suppliers(service: SupplierService = Depends(get_supplier_service)):
    return listing(service.list())


@router.post("", status_code=201)
def create_supplier(payload: SupplierCreate, service: SupplierService = Depends(get_supplier_service)):
    return success(data=service.create(payload))


@router.get("/with-debt")
def suppliers_with_debt(service: SupplierService = Depends(get_supplier_service)):
    return listing(service.with_debt())


@router.get("/{supplier_id}")
def get_supplier(supplier_id: str, service: SupplierService = Depends(get_supplier_service)):
    """Supplier with its deliveries."""
    return success(data=service.get(supplier_id))


@router.put("/{supplier_id}")
def update_supplier(
    supplier_id: str,
    payload: SupplierUpdate,
    service: SupplierService = Depends(get_supplier_service)
):
    return success(data=service.update(supplier_id, payload))


@router.delete("/{supplier_id}")
def delete_supplier(supplier_id: str, service: SupplierService = Depends(get_supplier_service)):
    service.delete(supplier_id)
    return success(data={})
