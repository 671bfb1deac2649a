from datetime import date, datetime
from typing import Optional

from sqlalchemy import func, or_

from app.models.transaction import Transaction, TransactionStatus, TransactionType
from app.repositories.base import TenantScopedRepository


class TransactionRepository(TenantScopedRepository[Transaction]):
    """Repository for Transaction data access"""

    model = Transaction
    search_fields = ("description",)
    ordering = ("-date", "-id")

    def get_with_filters(
        self,
        tenant_id: int,
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
        """
        Get transactions with filters, ensuring multi-tenant isolation.

        Args:
            tenant_id: Tenant ID for isolation
            transaction_type: Optional income/expense filter
            status: Optional pending/paid filter
            category_id: Optional category filter
            customer_id: Optional customer filter
            supplier_id: Optional supplier filter
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            search: Optional description search (case-insensitive partial match)
            page: 1-based page number
            page_size: Page size

        Returns:
            Tuple of (transactions list, total count)
        """
        query = self.apply_search(self.scoped(tenant_id), search)

        if transaction_type is not None:
            query = query.filter(Transaction.type == transaction_type)

        if status is not None:
            query = query.filter(Transaction.status == status)

        if category_id is not None:
            query = query.filter(Transaction.category_id == category_id)

        if customer_id is not None:
            query = query.filter(Transaction.customer_id == customer_id)

        if supplier_id is not None:
            query = query.filter(Transaction.supplier_id == supplier_id)

        if start_date is not None:
            query = query.filter(Transaction.date >= start_date)

        if end_date is not None:
            query = query.filter(Transaction.date <= end_date)

        return self.paginate(query, page, page_size)

    def get_pending(self, tenant_id: int, transaction_type: TransactionType) -> list[Transaction]:
        """Pending payables or receivables, oldest due date first"""
        return (
            self.scoped(tenant_id)
            .filter(
                Transaction.type == transaction_type,
                Transaction.status == TransactionStatus.PENDING,
            )
            .order_by(Transaction.date.asc(), Transaction.id.asc())
            .all()
        )

    def get_for_sale(self, tenant_id: int, sale_id: int) -> list[Transaction]:
        return self.scoped(tenant_id).filter(Transaction.sale_id == sale_id).all()

    def get_for_quote(self, tenant_id: int, quote_id: int) -> list[Transaction]:
        return self.scoped(tenant_id).filter(Transaction.quote_id == quote_id).all()

    def get_for_purchase_invoice(self, tenant_id: int, invoice_id: int) -> list[Transaction]:
        return self.scoped(tenant_id).filter(Transaction.purchase_invoice_id == invoice_id).all()

    def sum_amount(
        self,
        tenant_id: int,
        transaction_type: TransactionType,
        status: TransactionStatus,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> float:
        """Sum of amounts for one type/status pair, optionally within a date range"""
        query = (
            self.db.query(func.sum(Transaction.amount))
            .filter(
                Transaction.user_id == tenant_id,
                Transaction.type == transaction_type,
                Transaction.status == status,
            )
        )
        if start_date is not None:
            query = query.filter(Transaction.date >= start_date)
        if end_date is not None:
            query = query.filter(Transaction.date <= end_date)

        result = query.scalar()
        return round(float(result), 2) if result is not None else 0.0

    def mark_order_paid(
        self,
        tenant_id: int,
        order_id: Optional[str],
        order_number: Optional[str],
        paid_at: datetime,
    ) -> int:
        """
        Conditionally transition the receivable of a marketplace order to paid.

        Matches on external_order_id. Receivables imported before that link
        existed are matched by the "#<number>" reference in their
        description, but only when no linked record exists for the order.
        Only pending rows are updated, so replaying the event is a no-op.

        Returns:
            Number of rows transitioned (does not commit)
        """
        base = self.scoped(tenant_id).filter(Transaction.type == TransactionType.INCOME)
        query = None

        if order_id:
            linked = base.filter(Transaction.external_order_id == order_id)
            if linked.count() > 0:
                query = linked

        if query is None and order_number:
            reference = f"#{order_number}"
            query = base.filter(
                Transaction.external_order_id.is_(None),
                or_(
                    Transaction.description.like(f"%{reference}"),
                    Transaction.description.like(f"%{reference} %"),
                ),
            )

        if query is None:
            return 0

        return query.filter(Transaction.status == TransactionStatus.PENDING).update(
            {Transaction.status: TransactionStatus.PAID, Transaction.paid_at: paid_at},
            synchronize_session="fetch",
        )
