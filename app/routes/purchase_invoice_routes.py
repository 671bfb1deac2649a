from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.tenant_context import TenantContext
from app.schemas.common import SuccessResponse
from app.schemas.purchase_invoice_schemas import (
    PurchaseInvoiceCreate,
    PurchaseInvoiceListResponse,
    PurchaseInvoiceResponse,
)
from app.services.purchase_invoice_service import PurchaseInvoiceService

router = APIRouter()


@router.get("", response_model=PurchaseInvoiceListResponse)
def list_invoices(
    supplier_id: Optional[int] = Query(None, description="Filter by supplier ID"),
    search: Optional[str] = Query(None, description="Matches invoice number, key or notes"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    """Most recent entry date first"""
    invoices, total = PurchaseInvoiceService(db).list_invoices(context, supplier_id, search, page, page_size)
    return PurchaseInvoiceListResponse(items=invoices, total=total)


@router.post("", response_model=PurchaseInvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_data: PurchaseInvoiceCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Record goods received from a supplier.

    - Freight, other costs and tax are allocated into each unit cost
    - Stock and average cost of every product are updated
    - A pending payable due in 30 days is raised for the total cost
    """
    return PurchaseInvoiceService(db, invalidator).create_invoice(invoice_data, context)


@router.get("/{invoice_id}", response_model=PurchaseInvoiceResponse)
def get_invoice(
    invoice_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return PurchaseInvoiceService(db).get_invoice(invoice_id, context)


@router.delete("/{invoice_id}", response_model=SuccessResponse)
def delete_invoice(
    invoice_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    PurchaseInvoiceService(db, invalidator).delete_invoice(invoice_id, context)
    return SuccessResponse()
