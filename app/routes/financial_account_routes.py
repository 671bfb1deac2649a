from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.tenant_context import TenantContext
from app.schemas.common import SuccessResponse
from app.schemas.financial_account_schemas import (
    FinancialAccountCreate,
    FinancialAccountListResponse,
    FinancialAccountResponse,
    FinancialAccountUpdate,
)
from app.services.financial_account_service import FinancialAccountService

router = APIRouter()


@router.get("", response_model=FinancialAccountListResponse)
def list_accounts(
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    """Default account first, then by name"""
    accounts = FinancialAccountService(db).list_accounts(context)
    return FinancialAccountListResponse(items=accounts, total=len(accounts))


@router.get("/default", response_model=Optional[FinancialAccountResponse])
def get_default_account(
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return FinancialAccountService(db).get_default_account(context)


@router.post("", response_model=FinancialAccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    account_data: FinancialAccountCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    return FinancialAccountService(db, invalidator).create_account(account_data, context)


@router.get("/{account_id}", response_model=FinancialAccountResponse)
def get_account(
    account_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return FinancialAccountService(db).get_account(account_id, context)


@router.patch("/{account_id}", response_model=FinancialAccountResponse)
def update_account(
    account_id: int,
    account_update: FinancialAccountUpdate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    return FinancialAccountService(db, invalidator).update_account(account_id, account_update, context)


@router.delete("/{account_id}", response_model=SuccessResponse)
def delete_account(
    account_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Delete a financial account.

    Returns 409 for the default account or while transactions reference it.
    """
    FinancialAccountService(db, invalidator).delete_account(account_id, context)
    return SuccessResponse()
