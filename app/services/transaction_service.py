import calendar
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ValidationException
from app.core.invalidation import ViewInvalidator, Views
from app.models.base import utcnow
from app.models.tenant_context import TenantContext
from app.models.transaction import Transaction, TransactionStatus, TransactionType
from app.repositories.category_repository import CategoryRepository
from app.repositories.customer_repository import CustomerRepository
from app.repositories.financial_account_repository import FinancialAccountRepository
from app.repositories.supplier_repository import SupplierRepository
from app.repositories.transaction_repository import TransactionRepository
from app.schemas.transaction_schemas import (
    FinancialSummary,
    FinancialTrends,
    PendingTransactionResponse,
    Recurrence,
    RecurringExpenseCreate,
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
)
from app.services.helpers import apply_updates, money

FINANCE_VIEWS = (Views.FINANCE, Views.TRANSACTIONS, Views.PAYABLES, Views.RECEIVABLES)


def add_months(value: date, months: int) -> date:
    """Same day N months later, clamped to the last day of shorter months"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_bounds(value: date) -> tuple[date, date]:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return value.replace(day=1), value.replace(day=last_day)


def percentage_change(current: float, previous: float) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / abs(previous) * 100, 2)


class TransactionService:
    """Service layer for transaction (payables/receivables) business logic"""

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.transaction_repo = TransactionRepository(db)
        self.category_repo = CategoryRepository(db)
        self.customer_repo = CustomerRepository(db)
        self.supplier_repo = SupplierRepository(db)
        self.account_repo = FinancialAccountRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def _check_references(
        self,
        tenant_id: int,
        category_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        supplier_id: Optional[int] = None,
        financial_account_id: Optional[int] = None,
    ) -> None:
        """Referenced records must live in the same tenant"""
        if category_id is not None and not self.category_repo.exists(category_id, tenant_id):
            raise NotFoundException(f"Category {category_id} not found")
        if customer_id is not None and not self.customer_repo.exists(customer_id, tenant_id):
            raise NotFoundException(f"Customer {customer_id} not found")
        if supplier_id is not None and not self.supplier_repo.exists(supplier_id, tenant_id):
            raise NotFoundException(f"Supplier {supplier_id} not found")
        if financial_account_id is not None and not self.account_repo.exists(financial_account_id, tenant_id):
            raise NotFoundException(f"Financial account {financial_account_id} not found")

    def create_transaction(self, data: TransactionCreate, context: TenantContext) -> Transaction:
        """
        Create a transaction.

        Raises:
            NotFoundException: If a referenced category, customer, supplier or account is not in the tenant
        """
        tenant_id = context.require_tenant()
        self._check_references(
            tenant_id, data.category_id, data.customer_id, data.supplier_id, data.financial_account_id
        )

        transaction = Transaction(
            user_id=tenant_id,
            created_by_id=context.user_id,
            description=data.description,
            amount=money(data.amount),
            type=data.type,
            status=data.status,
            date=data.date,
            paid_at=utcnow() if data.status == TransactionStatus.PAID else None,
            competence_date=data.competence_date or data.date,
            category_id=data.category_id,
            customer_id=data.customer_id,
            supplier_id=data.supplier_id,
            financial_account_id=data.financial_account_id,
        )
        transaction = self.transaction_repo.create(transaction)
        self.invalidator.invalidate(*FINANCE_VIEWS)
        return transaction

    def create_recurring_expense(self, data: RecurringExpenseCreate, context: TenantContext) -> list[Transaction]:
        """
        Create an expense repeated over several dates, in one commit.

        Descriptions get an "(i/n)" suffix when more than one record is
        created. Only the first occurrence may be paid.
        """
        tenant_id = context.require_tenant()
        self._check_references(tenant_id, category_id=data.category_id, supplier_id=data.supplier_id)

        count = 1 if data.recurrence == Recurrence.UNIQUE else data.occurrences
        amount = money(data.amount / count) if data.recurrence == Recurrence.INSTALLMENT else money(data.amount)

        transactions = []
        for index in range(count):
            if data.recurrence == Recurrence.WEEKLY:
                due = date.fromordinal(data.date.toordinal() + 7 * index)
            else:
                due = add_months(data.date, index)

            paid = index == 0 and data.status == TransactionStatus.PAID
            description = data.description if count == 1 else f"{data.description} ({index + 1}/{count})"

            transactions.append(
                self.transaction_repo.add_no_commit(
                    Transaction(
                        user_id=tenant_id,
                        created_by_id=context.user_id,
                        description=description,
                        amount=amount,
                        type=TransactionType.EXPENSE,
                        status=TransactionStatus.PAID if paid else TransactionStatus.PENDING,
                        date=due,
                        paid_at=utcnow() if paid else None,
                        competence_date=due,
                        category_id=data.category_id,
                        supplier_id=data.supplier_id,
                        installment_number=index + 1 if count > 1 else None,
                        installment_total=count if count > 1 else None,
                    )
                )
            )

        self.transaction_repo.commit()
        for transaction in transactions:
            self.db.refresh(transaction)
        self.invalidator.invalidate(*FINANCE_VIEWS)
        return transactions

    def get_transaction(self, transaction_id: int, context: TenantContext) -> Transaction:
        """
        Raises:
            NotFoundException: If the transaction does not exist in the tenant
        """
        transaction = self.transaction_repo.get(transaction_id, context.require_tenant())
        if not transaction:
            raise NotFoundException(f"Transaction {transaction_id} not found")
        return transaction

    def get_transactions(
        self,
        context: TenantContext,
        transaction_type: Optional[TransactionType] = None,
        status: Optional[TransactionStatus] = None,
        category_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        supplier_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Transaction], int]:
        return self.transaction_repo.get_with_filters(
            tenant_id=context.require_tenant(),
            transaction_type=transaction_type,
            status=status,
            category_id=category_id,
            customer_id=customer_id,
            supplier_id=supplier_id,
            start_date=start_date,
            end_date=end_date,
            search=search,
            page=page,
            page_size=page_size,
        )

    def update_transaction(
        self, transaction_id: int, data: TransactionUpdate, context: TenantContext
    ) -> Transaction:
        """Partial update. Moving to paid stamps paid_at; moving back to pending clears it."""
        transaction = self.get_transaction(transaction_id, context)
        tenant_id = context.require_tenant()
        fields = data.model_fields_set

        self._check_references(
            tenant_id,
            category_id=data.category_id if "category_id" in fields else None,
            customer_id=data.customer_id if "customer_id" in fields else None,
            supplier_id=data.supplier_id if "supplier_id" in fields else None,
            financial_account_id=data.financial_account_id if "financial_account_id" in fields else None,
        )

        previous_status = transaction.status
        apply_updates(transaction, data, required=("description", "amount", "type", "status", "date"))
        if "amount" in fields:
            transaction.amount = money(transaction.amount)

        if transaction.status != previous_status:
            transaction.paid_at = utcnow() if transaction.status == TransactionStatus.PAID else None

        transaction = self.transaction_repo.update(transaction)
        self.invalidator.invalidate(*FINANCE_VIEWS, Views.detail(Views.TRANSACTIONS, transaction.id))
        return transaction

    def confirm_payment(self, transaction_id: int, context: TenantContext) -> Transaction:
        """
        Transition a pending transaction to paid.

        Raises:
            ValidationException: If the transaction is already paid
        """
        transaction = self.get_transaction(transaction_id, context)
        if transaction.status == TransactionStatus.PAID:
            raise ValidationException("Transaction is already paid")

        transaction.status = TransactionStatus.PAID
        transaction.paid_at = utcnow()
        transaction = self.transaction_repo.update(transaction)
        self.invalidator.invalidate(*FINANCE_VIEWS)
        return transaction

    def delete_transaction(self, transaction_id: int, context: TenantContext) -> None:
        transaction = self.get_transaction(transaction_id, context)
        self.transaction_repo.delete(transaction)
        self.invalidator.invalidate(*FINANCE_VIEWS)

    def get_pending(self, transaction_type: TransactionType, context: TenantContext) -> list[PendingTransactionResponse]:
        """
        Payables (expense) or receivables (income) still pending.

        Rows carry the category and counterpart names and an overdue flag
        for due dates before today.
        """
        tenant_id = context.require_tenant()
        today = date.today()
        rows = []
        for transaction in self.transaction_repo.get_pending(tenant_id, transaction_type):
            counterpart = transaction.supplier if transaction_type == TransactionType.EXPENSE else transaction.customer
            row = PendingTransactionResponse.model_validate(
                TransactionResponse.model_validate(transaction).model_dump()
            )
            row.category_name = transaction.category.name if transaction.category else None
            row.category_code = transaction.category.code if transaction.category else None
            row.counterpart_name = counterpart.name if counterpart else None
            row.overdue = transaction.date < today
            rows.append(row)
        return rows

    def get_financial_summary(self, context: TenantContext, today: Optional[date] = None) -> FinancialSummary:
        tenant_id = context.require_tenant()
        today = today or date.today()
        repo = self.transaction_repo
        income, expense = TransactionType.INCOME, TransactionType.EXPENSE
        paid, pending = TransactionStatus.PAID, TransactionStatus.PENDING

        all_income = repo.sum_amount(tenant_id, income, paid)
        all_expense = repo.sum_amount(tenant_id, expense, paid)
        pending_income = repo.sum_amount(tenant_id, income, pending)
        pending_expenses = repo.sum_amount(tenant_id, expense, pending)

        month_start, month_end = month_bounds(today)
        last_start, last_end = month_bounds(add_months(today, -1))

        current_income = repo.sum_amount(tenant_id, income, paid, month_start, month_end)
        current_expense = repo.sum_amount(tenant_id, expense, paid, month_start, month_end)
        last_income = repo.sum_amount(tenant_id, income, paid, last_start, last_end)
        last_expense = repo.sum_amount(tenant_id, expense, paid, last_start, last_end)

        balance = money(all_income - all_expense)
        previous_balance = money(balance - (current_income - current_expense))

        income_count = (
            repo.scoped(tenant_id)
            .filter(
                Transaction.type == income,
                Transaction.status == paid,
                Transaction.date >= month_start,
                Transaction.date <= month_end,
            )
            .count()
        )

        return FinancialSummary(
            balance=balance,
            income=current_income,
            expense=current_expense,
            pending=money(pending_income + pending_expenses),
            pending_income=pending_income,
            pending_expenses=pending_expenses,
            income_count=income_count,
            trends=FinancialTrends(
                income=percentage_change(current_income, last_income),
                expense=percentage_change(current_expense, last_expense),
                balance=percentage_change(balance, previous_balance),
            ),
        )
