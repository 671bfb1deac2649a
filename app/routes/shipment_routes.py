from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.shipment import ShipmentStatus
from app.models.tenant_context import TenantContext
from app.schemas.common import SuccessResponse
from app.schemas.shipment_schemas import (
    ShipmentCreate,
    ShipmentDetailsUpdate,
    ShipmentListResponse,
    ShipmentResponse,
    ShipmentStatusUpdate,
)
from app.services.shipment_service import ShipmentService

router = APIRouter()


@router.get("", response_model=ShipmentListResponse)
def list_shipments(
    shipment_status: Optional[ShipmentStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Matches tracking code, method or notes"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    shipments, total = ShipmentService(db).list_shipments(context, shipment_status, search, page, page_size)
    return ShipmentListResponse(items=shipments, total=total)


@router.post("", response_model=ShipmentResponse, status_code=status.HTTP_201_CREATED)
def create_shipment(
    shipment_data: ShipmentCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """Open a pending shipment for a sale (one per sale)"""
    return ShipmentService(db, invalidator).create_from_sale(shipment_data.sale_id, context)


@router.get("/{shipment_id}", response_model=ShipmentResponse)
def get_shipment(
    shipment_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return ShipmentService(db).get_shipment(shipment_id, context)


@router.patch("/{shipment_id}/status", response_model=ShipmentResponse)
def update_shipment_status(
    shipment_id: int,
    status_update: ShipmentStatusUpdate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """Move the shipment through the pipeline, stamping the stage timestamp"""
    return ShipmentService(db, invalidator).update_status(shipment_id, status_update.status, context)


@router.patch("/{shipment_id}", response_model=ShipmentResponse)
def update_shipment(
    shipment_id: int,
    shipment_update: ShipmentDetailsUpdate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    return ShipmentService(db, invalidator).update_details(shipment_id, shipment_update, context)


@router.delete("/{shipment_id}", response_model=SuccessResponse)
def delete_shipment(
    shipment_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    ShipmentService(db, invalidator).delete_shipment(shipment_id, context)
    return SuccessResponse()
