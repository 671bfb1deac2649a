from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from app.models.purchase_invoice import PurchaseInvoice, StockEntry
from app.repositories.base import TenantScopedRepository


class PurchaseInvoiceRepository(TenantScopedRepository[PurchaseInvoice]):
    """Repository for PurchaseInvoice data access. Stock entries load with their invoice."""

    model = PurchaseInvoice
    search_fields = ("invoice_number", "invoice_key", "notes")
    ordering = ("-entry_date", "-id")

    def get(self, entity_id: int, tenant_id: int) -> Optional[PurchaseInvoice]:
        return (
            self.scoped(tenant_id)
            .options(selectinload(PurchaseInvoice.items))
            .filter(PurchaseInvoice.id == entity_id)
            .first()
        )

    def get_filtered(
        self,
        tenant_id: int,
        supplier_id: Optional[int] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[PurchaseInvoice], int]:
        query = self.apply_search(self.scoped(tenant_id), search).options(
            selectinload(PurchaseInvoice.items)
        )
        if supplier_id is not None:
            query = query.filter(PurchaseInvoice.supplier_id == supplier_id)
        return self.paginate(query, page, page_size)


class StockEntryRepository(TenantScopedRepository[StockEntry]):
    """Repository for StockEntry data access"""

    model = StockEntry

    def average_cost(self, tenant_id: int, product_id: int, exclude_invoice_id: Optional[int] = None) -> float:
        """Quantity-weighted unit cost over the product's stock entries, 0 without entries"""
        query = (
            self.db.query(
                func.sum(StockEntry.quantity),
                func.sum(StockEntry.quantity * StockEntry.unit_cost),
            )
            .filter(StockEntry.user_id == tenant_id, StockEntry.product_id == product_id)
        )
        if exclude_invoice_id is not None:
            query = query.filter(StockEntry.purchase_invoice_id != exclude_invoice_id)

        quantity, value = query.one()
        if not quantity:
            return 0.0
        return round(float(value) / float(quantity), 2)

    def count_for_product(self, tenant_id: int, product_id: int) -> int:
        return self.count_where(tenant_id, product_id=product_id)
