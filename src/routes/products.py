"""Product registry routes."""

from typing import Optional

from fastapi import APIRouter, Depends

from ..middleware.admin_auth import require_admin
from ..schemas.requests import ProductCreate, ProductUpdate
from ..services.product_service import ProductService
from .dependencies import get_product_service, listing, success

router = APIRouter(prefix="/products", tags=["products"], dependencies=[Depends(require_admin)])


@router.get("")
def list_products(category: Optional[str] = None, service: ProductService = Depends(get_product_service)):
    return listing(service.list(category))


@router.post("", status_code=201)
def create_product(payload: ProductCreate, service: ProductService = Depends(get_product_service)):
    return success(data=service.create(payload))


@router.get("/low-stock")
def low_stock_products(service: ProductService = Depends(get_product_service)):
    """Products below their minimum stock level."""
    return listing(service.low_stock())


@router.get("/{product_id}")
def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    return success(data=service.get(product_id))


@router.put("/{product_id}")
def update_product(
    product_id: str,
    payload: ProductUpdate,
    service: ProductService = Depends(get_product_service)
):
    return success(data=service.update(product_id, payload))


@router.delete("/{product_id}")
def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    service.delete(product_id)
    return success(data={})
