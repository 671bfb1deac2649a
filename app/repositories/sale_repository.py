from datetime import date
from typing import Optional

from sqlalchemy.orm import selectinload

from app.models.sale import Sale, SaleItem
from app.repositories.base import TenantScopedRepository


class SaleRepository(TenantScopedRepository[Sale]):
    """Repository for Sale data access. Sale items are reached through their sale."""

    model = Sale
    search_fields = ("external_order_id", "payment_method")
    ordering = ("-date", "-id")

    def get(self, entity_id: int, tenant_id: int) -> Optional[Sale]:
        return (
            self.scoped(tenant_id)
            .options(selectinload(Sale.items))
            .filter(Sale.id == entity_id)
            .first()
        )

    def get_by_external_order_id(self, tenant_id: int, external_order_id: str) -> Optional[Sale]:
        return self.scoped(tenant_id).filter(Sale.external_order_id == external_order_id).first()

    def get_filtered(
        self,
        tenant_id: int,
        customer_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Sale], int]:
        query = self.apply_search(self.scoped(tenant_id), search).options(selectinload(Sale.items))
        if customer_id is not None:
            query = query.filter(Sale.customer_id == customer_id)
        if start_date is not None:
            query = query.filter(Sale.date >= start_date)
        if end_date is not None:
            query = query.filter(Sale.date <= end_date)
        return self.paginate(query, page, page_size)

    def get_for_customer(self, tenant_id: int, customer_id: int) -> list[Sale]:
        return self._order(self.scoped(tenant_id).filter(Sale.customer_id == customer_id)).all()

    def count_items(self, tenant_id: int, **criteria) -> int:
        """Count sale items of the tenant, e.g. count_items(t, product_id=3)"""
        return (
            self.db.query(SaleItem)
            .join(Sale, SaleItem.sale_id == Sale.id)
            .filter(Sale.user_id == tenant_id)
            .filter(*[getattr(SaleItem, field) == value for field, value in criteria.items()])
            .count()
        )
