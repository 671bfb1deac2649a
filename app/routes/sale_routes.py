from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.tenant_context import TenantContext
from app.schemas.common import SuccessResponse
from app.schemas.sale_schemas import SaleCreate, SaleListResponse, SaleResponse
from app.services.sale_service import SaleService

router = APIRouter()


@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
def create_sale(
    sale_data: SaleCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Record a sale.

    - Totals are computed server-side; unit prices default to the catalog price
    - Stock of managed products is checked and decremented
    - The income transaction (and freight expense, with a carrier) is created
      in the same commit
    """
    return SaleService(db, invalidator).create_sale(sale_data, context)


@router.get("", response_model=SaleListResponse)
def list_sales(
    customer_id: Optional[int] = Query(None, description="Filter by customer ID"),
    start_date: Optional[date] = Query(None, description="Start date (inclusive)"),
    end_date: Optional[date] = Query(None, description="End date (inclusive)"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    sales, total = SaleService(db).list_sales(context, customer_id, start_date, end_date, search, page, page_size)
    return SaleListResponse(items=sales, total=total)


@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return SaleService(db).get_sale(sale_id, context)


@router.delete("/{sale_id}", response_model=SuccessResponse)
def delete_sale(
    sale_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """Restores stock and removes the sale's transactions and shipment"""
    SaleService(db, invalidator).delete_sale(sale_id, context)
    return SuccessResponse()
