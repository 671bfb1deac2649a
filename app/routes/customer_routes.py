from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.tenant_context import TenantContext
from app.schemas.common import SuccessResponse
from app.schemas.customer_schemas import (
    CustomerCreate,
    CustomerDetailsResponse,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
)
from app.services.customer_service import CustomerService

router = APIRouter()


@router.get("", response_model=CustomerListResponse)
def list_customers(
    search: Optional[str] = Query(None, description="Matches name, email, document or phone"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    customers, total = CustomerService(db).list_customers(context, search, page, page_size)
    return CustomerListResponse(items=customers, total=total)


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    customer_data: CustomerCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    return CustomerService(db, invalidator).create_customer(customer_data, context)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return CustomerService(db).get_customer(customer_id, context)


@router.get("/{customer_id}/details", response_model=CustomerDetailsResponse)
def get_customer_details(
    customer_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    """Customer with purchase history and totals"""
    return CustomerService(db).get_customer_details(customer_id, context)


@router.patch("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    customer_update: CustomerUpdate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    return CustomerService(db, invalidator).update_customer(customer_id, customer_update, context)


@router.delete("/{customer_id}", response_model=SuccessResponse)
def delete_customer(
    customer_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    CustomerService(db, invalidator).delete_customer(customer_id, context)
    return SuccessResponse()
