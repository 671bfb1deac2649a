from typing import Optional

from app.models.shipment import ShipmentOrder, ShipmentStatus
from app.repositories.base import TenantScopedRepository


class ShipmentRepository(TenantScopedRepository[ShipmentOrder]):
    """Repository for ShipmentOrder data access"""

    model = ShipmentOrder
    search_fields = ("tracking_code", "shipping_method", "notes")
    ordering = ("-created_at", "-id")

    def get_by_sale(self, tenant_id: int, sale_id: int) -> Optional[ShipmentOrder]:
        return self.scoped(tenant_id).filter(ShipmentOrder.sale_id == sale_id).first()

    def get_filtered(
        self,
        tenant_id: int,
        status: Optional[ShipmentStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[ShipmentOrder], int]:
        query = self.apply_search(self.scoped(tenant_id), search)
        if status is not None:
            query = query.filter(ShipmentOrder.status == status)
        return self.paginate(query, page, page_size)
