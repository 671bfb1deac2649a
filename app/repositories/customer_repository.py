from typing import Optional

from sqlalchemy import func

from app.models.customer import Customer
from app.repositories.base import TenantScopedRepository


class CustomerRepository(TenantScopedRepository[Customer]):
    """Repository for Customer data access"""

    model = Customer
    search_fields = ("name", "email", "document", "phone")
    ordering = ("name", "id")

    def get_by_email(self, tenant_id: int, email: str) -> Optional[Customer]:
        """Case-insensitive email lookup (marketplace imports match on it)"""
        return (
            self.scoped(tenant_id)
            .filter(func.lower(Customer.email) == email.strip().lower())
            .first()
        )

    def get_by_phone(self, tenant_id: int, phone: str) -> Optional[Customer]:
        return self.scoped(tenant_id).filter(Customer.phone == phone.strip()).first()

    def get_by_name(self, tenant_id: int, name: str) -> Optional[Customer]:
        return self.scoped(tenant_id).filter(Customer.name == name.strip()).first()
