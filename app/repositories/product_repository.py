from typing import Optional

from sqlalchemy import func

from app.models.product import Product
from app.repositories.base import TenantScopedRepository


class ProductRepository(TenantScopedRepository[Product]):
    """Repository for Product data access"""

    model = Product
    search_fields = ("name", "sku", "description")
    ordering = ("name", "id")

    def get_by_sku(self, tenant_id: int, sku: str) -> Optional[Product]:
        return self.scoped(tenant_id).filter(Product.sku == sku).first()

    def get_by_name(self, tenant_id: int, name: str) -> Optional[Product]:
        """Case-insensitive exact name match"""
        return (
            self.scoped(tenant_id)
            .filter(func.lower(Product.name) == name.strip().lower())
            .first()
        )

    def get_many(self, tenant_id: int, product_ids: set[int]) -> dict[int, Product]:
        if not product_ids:
            return {}
        products = self.scoped(tenant_id).filter(Product.id.in_(product_ids)).all()
        return {product.id: product for product in products}
