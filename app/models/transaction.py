import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, DateTime, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from app.models.base import Base, TenantOwnedMixin

if TYPE_CHECKING:
    from app.models.category import Category
    from app.models.customer import Customer
    from app.models.supplier import Supplier


class TransactionType(str, PyEnum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionStatus(str, PyEnum):
    PENDING = "pending"
    PAID = "paid"


class Transaction(Base, TenantOwnedMixin):
    """
    Financial record (receivable/payable).

    Amount is always positive; direction comes from type.
    Pending records become paid exactly once; paid_at is set on that transition.
    external_order_id links receivables imported from the marketplace.
    quote_id and purchase_invoice_id link the records generated by an
    approved customer quote or a stock entry invoice.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False
    )
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    status: Mapped[TransactionStatus] = mapped_column(
        Enum(TransactionStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TransactionStatus.PENDING,
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    paid_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    competence_date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)

    category_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    customer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("customers.id"), nullable=True, index=True
    )
    supplier_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("suppliers.id"), nullable=True, index=True
    )
    sale_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=True, index=True
    )
    financial_account_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("financial_accounts.id"), nullable=True, index=True
    )
    quote_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("quotes.id", ondelete="SET NULL"), nullable=True, index=True
    )
    purchase_invoice_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("purchase_invoices.id", ondelete="CASCADE"), nullable=True, index=True
    )
    external_order_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    installment_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    installment_total: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    category: Mapped["Category | None"] = relationship("Category")
    customer: Mapped["Customer | None"] = relationship("Customer")
    supplier: Mapped["Supplier | None"] = relationship("Supplier")

    # Composite indexes for common queries
    __table_args__ = (
        Index("ix_transactions_tenant_date", "user_id", "date"),
        Index("ix_transactions_tenant_status", "user_id", "status"),
    )
