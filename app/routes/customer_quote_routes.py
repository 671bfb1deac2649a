from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.customer_quote import CustomerQuoteStatus
from app.models.tenant_context import TenantContext
from app.schemas.common import SuccessResponse
from app.schemas.customer_quote_schemas import (
    CustomerQuoteCreate,
    CustomerQuoteListResponse,
    CustomerQuoteResponse,
    CustomerQuoteStatusUpdate,
    NextQuoteNumberResponse,
)
from app.services.customer_quote_service import CustomerQuoteService

router = APIRouter()


@router.get("", response_model=CustomerQuoteListResponse)
def list_quotes(
    quote_status: Optional[CustomerQuoteStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Matches client name, email or notes"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    """Draft and sent quotes past their validity are expired before listing"""
    quotes, total = CustomerQuoteService(db).list_quotes(context, quote_status, search, page, page_size)
    return CustomerQuoteListResponse(items=quotes, total=total)


@router.get("/next-number", response_model=NextQuoteNumberResponse)
def get_next_number(
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return NextQuoteNumberResponse(number=CustomerQuoteService(db).next_number(context))


@router.post("", response_model=CustomerQuoteResponse, status_code=status.HTTP_201_CREATED)
def create_quote(
    quote_data: CustomerQuoteCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Issue a quote.

    - Numbered sequentially per tenant
    - Total is the item total minus the discount, floored at zero
    """
    return CustomerQuoteService(db, invalidator).create_quote(quote_data, context)


@router.get("/{quote_id}", response_model=CustomerQuoteResponse)
def get_quote(
    quote_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return CustomerQuoteService(db).get_quote(quote_id, context)


@router.patch("/{quote_id}/status", response_model=CustomerQuoteResponse)
def update_quote_status(
    quote_id: int,
    status_update: CustomerQuoteStatusUpdate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Change the status of a quote.

    Approval takes the products out of stock, links the customer and
    raises the receivables. Leaving the approved state restores the stock.
    """
    return CustomerQuoteService(db, invalidator).update_status(quote_id, status_update.status, context)


@router.delete("/{quote_id}", response_model=SuccessResponse)
def delete_quote(
    quote_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    CustomerQuoteService(db, invalidator).delete_quote(quote_id, context)
    return SuccessResponse()
