from app.models.supplier import Supplier
from app.repositories.base import TenantScopedRepository


class SupplierRepository(TenantScopedRepository[Supplier]):
    """Repository for Supplier data access"""

    model = Supplier
    search_fields = ("name", "email", "document", "phone")
    ordering = ("name", "id")
