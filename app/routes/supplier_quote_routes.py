from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.supplier_quote import QuoteStatus
from app.models.tenant_context import TenantContext
from app.schemas.common import SuccessResponse
from app.schemas.supplier_quote_schemas import (
    SupplierQuoteCreate,
    SupplierQuoteListResponse,
    SupplierQuoteResponse,
    SupplierQuoteStatusUpdate,
    SupplierQuoteUpdate,
)
from app.services.supplier_quote_service import SupplierQuoteService

router = APIRouter()


@router.get("", response_model=SupplierQuoteListResponse)
def list_quotes(
    supplier_id: Optional[int] = Query(None, description="Filter by supplier ID"),
    quote_status: Optional[QuoteStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Matches description or notes"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    quotes, total = SupplierQuoteService(db).list_quotes(context, supplier_id, quote_status, search, page, page_size)
    return SupplierQuoteListResponse(items=quotes, total=total)


@router.post("", response_model=SupplierQuoteResponse, status_code=status.HTTP_201_CREATED)
def create_quote(
    quote_data: SupplierQuoteCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Create a quote with its items.

    - The supplier must belong to the tenant
    - Item totals and the quote total are computed server-side
    """
    return SupplierQuoteService(db, invalidator).create_quote(quote_data, context)


@router.get("/{quote_id}", response_model=SupplierQuoteResponse)
def get_quote(
    quote_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return SupplierQuoteService(db).get_quote(quote_id, context)


@router.patch("/{quote_id}", response_model=SupplierQuoteResponse)
def update_quote(
    quote_id: int,
    quote_update: SupplierQuoteUpdate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """A new item list replaces the old one and the total is recomputed, atomically"""
    return SupplierQuoteService(db, invalidator).update_quote(quote_id, quote_update, context)


@router.patch("/{quote_id}/status", response_model=SupplierQuoteResponse)
def update_quote_status(
    quote_id: int,
    status_update: SupplierQuoteStatusUpdate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    return SupplierQuoteService(db, invalidator).update_status(quote_id, status_update.status, context)


@router.delete("/{quote_id}", response_model=SuccessResponse)
def delete_quote(
    quote_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    SupplierQuoteService(db, invalidator).delete_quote(quote_id, context)
    return SuccessResponse()
