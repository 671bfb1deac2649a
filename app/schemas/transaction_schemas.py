import datetime
from enum import Enum
from pydantic import BaseModel, Field
from app.models.transaction import TransactionStatus, TransactionType
from app.schemas.common import Money, RequestModel, ResponseModel


class TransactionCreate(RequestModel):
    """Schema for creating a new transaction"""

    description: str = Field(..., min_length=1, max_length=500)
    amount: Money = Field(..., gt=0, description="Always positive; direction comes from type")
    type: TransactionType
    status: TransactionStatus = TransactionStatus.PENDING
    date: datetime.date
    competence_date: datetime.date | None = None
    category_id: int | None = Field(None, gt=0)
    customer_id: int | None = Field(None, gt=0)
    supplier_id: int | None = Field(None, gt=0)
    financial_account_id: int | None = Field(None, gt=0)


class TransactionUpdate(RequestModel):
    """Schema for updating a transaction"""

    description: str | None = Field(None, min_length=1, max_length=500)
    amount: Money | None = Field(None, gt=0)
    type: TransactionType | None = None
    status: TransactionStatus | None = None
    date: datetime.date | None = None
    competence_date: datetime.date | None = None
    category_id: int | None = Field(None, gt=0)
    customer_id: int | None = Field(None, gt=0)
    supplier_id: int | None = Field(None, gt=0)
    financial_account_id: int | None = Field(None, gt=0)


class Recurrence(str, Enum):
    UNIQUE = "unique"
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    INSTALLMENT = "installment"


class RecurringExpenseCreate(RequestModel):
    """
    Expense repeated over several dates.

    - monthly/weekly: one record of the full amount per occurrence
    - installment: the amount split across monthly occurrences
    Only the first occurrence can be created as paid.
    """

    description: str = Field(..., min_length=1, max_length=480)
    amount: Money = Field(..., gt=0)
    date: datetime.date
    status: TransactionStatus = TransactionStatus.PENDING
    recurrence: Recurrence = Recurrence.UNIQUE
    occurrences: int = Field(default=1, ge=1, le=120)
    category_id: int | None = Field(None, gt=0)
    supplier_id: int | None = Field(None, gt=0)


class TransactionResponse(ResponseModel):
    """Schema for transaction response"""

    id: int
    description: str
    amount: float
    type: TransactionType
    status: TransactionStatus
    date: datetime.date
    paid_at: datetime.datetime | None
    competence_date: datetime.date | None
    category_id: int | None
    customer_id: int | None
    supplier_id: int | None
    sale_id: int | None
    financial_account_id: int | None
    quote_id: int | None
    purchase_invoice_id: int | None
    external_order_id: str | None
    installment_number: int | None
    installment_total: int | None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class TransactionListResponse(ResponseModel):
    """Schema for list of transactions"""

    items: list[TransactionResponse]
    total: int


class RecurringExpenseResponse(BaseModel):
    success: bool = True
    count: int
    items: list[TransactionResponse]


class PendingTransactionResponse(TransactionResponse):
    """Payable/receivable row with the names the listing shows"""

    category_name: str | None = None
    category_code: str | None = None
    counterpart_name: str | None = None
    overdue: bool = False


class PendingListResponse(BaseModel):
    items: list[PendingTransactionResponse]
    total: int
    total_amount: float


class FinancialTrends(BaseModel):
    income: float
    expense: float
    balance: float


class FinancialSummary(BaseModel):
    """
    Tenant financial position.

    balance is all-time paid income minus paid expense; income and expense
    cover the current month; trends are percentage change against last month.
    """

    balance: float
    income: float
    expense: float
    pending: float
    pending_income: float
    pending_expenses: float
    income_count: int
    trends: FinancialTrends
