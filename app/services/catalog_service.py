from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ReferentialConflictException
from app.core.invalidation import ViewInvalidator, Views
from app.models.service import Service
from app.models.tenant_context import TenantContext
from app.repositories.customer_quote_repository import CustomerQuoteRepository
from app.repositories.sale_repository import SaleRepository
from app.repositories.service_repository import ServiceRepository
from app.schemas.service_schemas import ServiceCreate, ServiceUpdate
from app.services.helpers import apply_updates


class CatalogService:
    """Business logic for the services a tenant sells (the Service entity)"""

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.service_repo = ServiceRepository(db)
        self.sale_repo = SaleRepository(db)
        self.quote_repo = CustomerQuoteRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def list_services(
        self,
        context: TenantContext,
        search: Optional[str] = None,
        active: Optional[bool] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Service], int]:
        return self.service_repo.get_filtered(context.require_tenant(), search, active, page, page_size)

    def get_service(self, service_id: int, context: TenantContext) -> Service:
        service = self.service_repo.get(service_id, context.require_tenant())
        if not service:
            raise NotFoundException(f"Service {service_id} not found")
        return service

    def create_service(self, data: ServiceCreate, context: TenantContext) -> Service:
        service = Service(
            user_id=context.require_tenant(),
            created_by_id=context.user_id,
            **data.model_dump(),
        )
        service = self.service_repo.create(service)
        self.invalidator.invalidate(Views.SERVICES)
        return service

    def update_service(self, service_id: int, data: ServiceUpdate, context: TenantContext) -> Service:
        service = self.get_service(service_id, context)
        apply_updates(service, data, required=("name", "price", "active"))
        service = self.service_repo.update(service)
        self.invalidator.invalidate(Views.SERVICES)
        return service

    def delete_service(self, service_id: int, context: TenantContext) -> None:
        service = self.get_service(service_id, context)
        tenant_id = context.require_tenant()

        if self.sale_repo.count_items(tenant_id, service_id=service.id) > 0:
            raise ReferentialConflictException("Service appears on existing sales and cannot be deleted")
        if self.quote_repo.count_items(tenant_id, service_id=service.id) > 0:
            raise ReferentialConflictException("Service appears on existing quotes and cannot be deleted")

        self.service_repo.delete(service)
        self.invalidator.invalidate(Views.SERVICES)
