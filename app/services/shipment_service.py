import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ValidationException
from app.core.invalidation import ViewInvalidator, Views
from app.models.base import utcnow
from app.models.shipment import STATUS_TIMESTAMPS, ShipmentOrder, ShipmentStatus
from app.models.tenant_context import TenantContext
from app.repositories.sale_repository import SaleRepository
from app.repositories.shipment_repository import ShipmentRepository
from app.repositories.supplier_repository import SupplierRepository
from app.schemas.shipment_schemas import ShipmentDetailsUpdate
from app.services.helpers import apply_updates

logger = logging.getLogger(__name__)


class ShipmentService:
    """Service layer for the logistics pipeline (one shipment per sale)"""

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.shipment_repo = ShipmentRepository(db)
        self.sale_repo = SaleRepository(db)
        self.supplier_repo = SupplierRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def list_shipments(
        self,
        context: TenantContext,
        status: Optional[ShipmentStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[ShipmentOrder], int]:
        return self.shipment_repo.get_filtered(context.require_tenant(), status, search, page, page_size)

    def get_shipment(self, shipment_id: int, context: TenantContext) -> ShipmentOrder:
        shipment = self.shipment_repo.get(shipment_id, context.require_tenant())
        if not shipment:
            raise NotFoundException(f"Shipment {shipment_id} not found")
        return shipment

    def create_from_sale(self, sale_id: int, context: TenantContext) -> ShipmentOrder:
        """
        Open a pending shipment for a sale, copying its carrier and shipping cost.

        Raises:
            NotFoundException: If the sale is not in the tenant
            ValidationException: If the sale already has a shipment
        """
        tenant_id = context.require_tenant()
        sale = self.sale_repo.get(sale_id, tenant_id)
        if not sale:
            raise NotFoundException(f"Sale {sale_id} not found")
        if self.shipment_repo.get_by_sale(tenant_id, sale.id) is not None:
            raise ValidationException("Sale already has a shipment", fields={"sale_id": "Already shipped"})

        shipment = ShipmentOrder(
            user_id=tenant_id,
            created_by_id=context.user_id,
            sale_id=sale.id,
            carrier_id=sale.carrier_id,
            shipping_cost=sale.shipping_cost,
            status=ShipmentStatus.PENDING,
        )
        shipment = self.shipment_repo.create(shipment)
        self.invalidator.invalidate(Views.LOGISTICS)
        return shipment

    def update_status(self, shipment_id: int, status: ShipmentStatus, context: TenantContext) -> ShipmentOrder:
        """Move a shipment to a status, stamping that status's timestamp"""
        shipment = self.get_shipment(shipment_id, context)
        shipment.status = status
        timestamp_field = STATUS_TIMESTAMPS.get(status)
        if timestamp_field:
            setattr(shipment, timestamp_field, utcnow())

        shipment = self.shipment_repo.update(shipment)
        logger.info("Shipment status changed", extra={"shipment_id": shipment.id, "status": status.value})
        self.invalidator.invalidate(Views.LOGISTICS)
        return shipment

    def update_details(self, shipment_id: int, data: ShipmentDetailsUpdate, context: TenantContext) -> ShipmentOrder:
        shipment = self.get_shipment(shipment_id, context)
        tenant_id = context.require_tenant()
        if data.carrier_id is not None and not self.supplier_repo.exists(data.carrier_id, tenant_id):
            raise NotFoundException(f"Carrier {data.carrier_id} not found")

        apply_updates(shipment, data)
        shipment = self.shipment_repo.update(shipment)
        self.invalidator.invalidate(Views.LOGISTICS)
        return shipment

    def delete_shipment(self, shipment_id: int, context: TenantContext) -> None:
        shipment = self.get_shipment(shipment_id, context)
        self.shipment_repo.delete(shipment)
        self.invalidator.invalidate(Views.LOGISTICS)
