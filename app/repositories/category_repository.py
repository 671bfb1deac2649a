from typing import Optional

from sqlalchemy import func

from app.models.category import Category, CategoryType
from app.repositories.base import TenantScopedRepository


class CategoryRepository(TenantScopedRepository[Category]):
    """Repository for Category data access"""

    model = Category
    search_fields = ("name", "code")
    ordering = ("code", "name", "id")

    def get_filtered(self, tenant_id: int, category_type: Optional[CategoryType] = None) -> list[Category]:
        query = self.scoped(tenant_id)
        if category_type is not None:
            query = query.filter(Category.type == category_type)
        return self._order(query).all()

    def get_by_code(self, tenant_id: int, code: str) -> Optional[Category]:
        return self.scoped(tenant_id).filter(Category.code == code).first()

    def get_by_name(self, tenant_id: int, name: str, category_type: CategoryType) -> Optional[Category]:
        """Case-insensitive name lookup within one category type"""
        return (
            self.scoped(tenant_id)
            .filter(func.lower(Category.name) == name.lower(), Category.type == category_type)
            .first()
        )

    def count_children(self, category_id: int, tenant_id: int) -> int:
        return self.count_where(tenant_id, parent_id=category_id)
