from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from app.models.customer_quote import CustomerQuote, CustomerQuoteItem, CustomerQuoteStatus
from app.repositories.base import TenantScopedRepository


class CustomerQuoteRepository(TenantScopedRepository[CustomerQuote]):
    """Repository for CustomerQuote data access. Items load with their quote."""

    model = CustomerQuote
    search_fields = ("client_name", "client_email", "notes")
    ordering = ("-created_at", "-id")

    def get(self, entity_id: int, tenant_id: int) -> Optional[CustomerQuote]:
        return (
            self.scoped(tenant_id)
            .options(selectinload(CustomerQuote.items))
            .filter(CustomerQuote.id == entity_id)
            .first()
        )

    def get_filtered(
        self,
        tenant_id: int,
        status: Optional[CustomerQuoteStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[CustomerQuote], int]:
        query = self.apply_search(self.scoped(tenant_id), search).options(
            selectinload(CustomerQuote.items)
        )
        if status is not None:
            query = query.filter(CustomerQuote.status == status)
        return self.paginate(query, page, page_size)

    def next_number(self, tenant_id: int) -> int:
        last = (
            self.db.query(func.max(CustomerQuote.number))
            .filter(CustomerQuote.user_id == tenant_id)
            .scalar()
        )
        return (last or 0) + 1

    def expire_overdue(self, tenant_id: int, today: date) -> int:
        """
        Move draft and sent quotes past their validity to expired.

        Returns:
            Number of quotes expired (does not commit)
        """
        return (
            self.scoped(tenant_id)
            .filter(
                CustomerQuote.status.in_([CustomerQuoteStatus.DRAFT, CustomerQuoteStatus.SENT]),
                CustomerQuote.valid_until < today,
            )
            .update({CustomerQuote.status: CustomerQuoteStatus.EXPIRED}, synchronize_session="fetch")
        )

    def count_items(self, tenant_id: int, **criteria) -> int:
        """Count quote items of the tenant, e.g. count_items(t, service_id=3)"""
        return (
            self.db.query(CustomerQuoteItem)
            .join(CustomerQuote, CustomerQuoteItem.quote_id == CustomerQuote.id)
            .filter(CustomerQuote.user_id == tenant_id)
            .filter(*[getattr(CustomerQuoteItem, field) == value for field, value in criteria.items()])
            .count()
        )
