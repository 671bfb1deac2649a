from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.tenant_context import TenantContext
from app.schemas.common import SuccessResponse
from app.schemas.product_schemas import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from app.services.product_service import ProductService

router = APIRouter()


@router.get("", response_model=ProductListResponse)
def list_products(
    search: Optional[str] = Query(None, description="Matches name, SKU or description"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    products, total = ProductService(db).list_products(context, search, page, page_size)
    return ProductListResponse(items=products, total=total)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    return ProductService(db, invalidator).create_product(product_data, context)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return ProductService(db).get_product(product_id, context)


@router.patch("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_update: ProductUpdate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    return ProductService(db, invalidator).update_product(product_id, product_update, context)


@router.delete("/{product_id}", response_model=SuccessResponse)
def delete_product(
    product_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """Returns 409 if the product appears on any sale"""
    ProductService(db, invalidator).delete_product(product_id, context)
    return SuccessResponse()
