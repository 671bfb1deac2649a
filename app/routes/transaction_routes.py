from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from app.config import settings
from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.tenant_context import TenantContext
from app.models.transaction import TransactionStatus, TransactionType
from app.services.transaction_service import TransactionService
from app.schemas.common import SuccessResponse
from app.schemas.transaction_schemas import (
    FinancialSummary,
    PendingListResponse,
    RecurringExpenseCreate,
    RecurringExpenseResponse,
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    TransactionListResponse,
)

router = APIRouter()


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction_data: TransactionCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Create a new transaction.

    - Amount is always positive; type gives the direction
    - Category, customer and supplier must belong to the tenant
    - Created as paid stamps paid_at
    """
    service = TransactionService(db, invalidator)
    return service.create_transaction(transaction_data, context)


@router.post("/recurring", response_model=RecurringExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_recurring_expense(
    expense_data: RecurringExpenseCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Create an expense repeated monthly, weekly or split in installments.

    - All occurrences succeed or none is stored
    - Installments split the amount; other recurrences repeat it
    """
    service = TransactionService(db, invalidator)
    transactions = service.create_recurring_expense(expense_data, context)
    return RecurringExpenseResponse(count=len(transactions), items=transactions)


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    transaction_type: Optional[TransactionType] = Query(None, alias="type", description="income or expense"),
    status_filter: Optional[TransactionStatus] = Query(None, alias="status", description="pending or paid"),
    category_id: Optional[int] = Query(None, description="Filter by category ID"),
    customer_id: Optional[int] = Query(None, description="Filter by customer ID"),
    supplier_id: Optional[int] = Query(None, description="Filter by supplier ID"),
    start_date: Optional[date] = Query(None, description="Start date (inclusive)"),
    end_date: Optional[date] = Query(None, description="End date (inclusive)"),
    search: Optional[str] = Query(None, description="Matches the description"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    """
    List transactions of the tenant, newest first.
    """
    service = TransactionService(db)
    transactions, total = service.get_transactions(
        context=context,
        transaction_type=transaction_type,
        status=status_filter,
        category_id=category_id,
        customer_id=customer_id,
        supplier_id=supplier_id,
        start_date=start_date,
        end_date=end_date,
        search=search,
        page=page,
        page_size=page_size,
    )
    return TransactionListResponse(items=transactions, total=total)


@router.get("/summary", response_model=FinancialSummary)
def get_financial_summary(
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    """Paid balance, pending totals and month-over-month trends"""
    service = TransactionService(db)
    return service.get_financial_summary(context)


@router.get("/payables", response_model=PendingListResponse)
def list_payables(
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    service = TransactionService(db)
    items = service.get_pending(TransactionType.EXPENSE, context)
    return PendingListResponse(items=items, total=len(items), total_amount=round(sum(i.amount for i in items), 2))


@router.get("/receivables", response_model=PendingListResponse)
def list_receivables(
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    service = TransactionService(db)
    items = service.get_pending(TransactionType.INCOME, context)
    return PendingListResponse(items=items, total=len(items), total_amount=round(sum(i.amount for i in items), 2))


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Get a transaction by ID.

    Returns 404 if it does not exist in the tenant.
    """
    service = TransactionService(db)
    return service.get_transaction(transaction_id, context)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: int,
    transaction_update: TransactionUpdate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Update a transaction (partial update).

    Only fields present in the body change; status changes keep paid_at in step.
    """
    service = TransactionService(db, invalidator)
    return service.update_transaction(transaction_id, transaction_update, context)


@router.post("/{transaction_id}/confirm", response_model=TransactionResponse)
def confirm_payment(
    transaction_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """Mark a pending payable or receivable as paid"""
    service = TransactionService(db, invalidator)
    return service.confirm_payment(transaction_id, context)


@router.delete("/{transaction_id}", response_model=SuccessResponse)
def delete_transaction(
    transaction_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    service = TransactionService(db, invalidator)
    service.delete_transaction(transaction_id, context)
    return SuccessResponse()
