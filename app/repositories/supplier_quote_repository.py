from typing import Optional

from sqlalchemy.orm import selectinload

from app.models.supplier_quote import SupplierQuote, QuoteStatus
from app.repositories.base import TenantScopedRepository


class SupplierQuoteRepository(TenantScopedRepository[SupplierQuote]):
    """Repository for SupplierQuote data access. Items load with their quote."""

    model = SupplierQuote
    search_fields = ("description", "notes")
    ordering = ("-created_at", "-id")

    def get(self, entity_id: int, tenant_id: int) -> Optional[SupplierQuote]:
        return (
            self.scoped(tenant_id)
            .options(selectinload(SupplierQuote.items))
            .filter(SupplierQuote.id == entity_id)
            .first()
        )

    def get_filtered(
        self,
        tenant_id: int,
        supplier_id: Optional[int] = None,
        status: Optional[QuoteStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[SupplierQuote], int]:
        query = self.apply_search(self.scoped(tenant_id), search).options(
            selectinload(SupplierQuote.items)
        )
        if supplier_id is not None:
            query = query.filter(SupplierQuote.supplier_id == supplier_id)
        if status is not None:
            query = query.filter(SupplierQuote.status == status)
        return self.paginate(query, page, page_size)
