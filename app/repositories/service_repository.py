from typing import Optional

from app.models.service import Service
from app.repositories.base import TenantScopedRepository


class ServiceRepository(TenantScopedRepository[Service]):
    """Repository for Service (catalog) data access"""

    model = Service
    search_fields = ("name", "category", "description")
    ordering = ("name", "id")

    def get_filtered(
        self,
        tenant_id: int,
        search: Optional[str] = None,
        active: Optional[bool] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Service], int]:
        query = self.apply_search(self.scoped(tenant_id), search)
        if active is not None:
            query = query.filter(Service.active == active)
        return self.paginate(query, page, page_size)

    def get_many(self, tenant_id: int, service_ids: set[int]) -> dict[int, Service]:
        if not service_ids:
            return {}
        services = self.scoped(tenant_id).filter(Service.id.in_(service_ids)).all()
        return {service.id: service for service in services}
