from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.tenant_context import TenantContext
from app.schemas.common import SuccessResponse
from app.schemas.service_schemas import (
    ServiceCreate,
    ServiceListResponse,
    ServiceResponse,
    ServiceUpdate,
)
from app.services.catalog_service import CatalogService

router = APIRouter()


@router.get("", response_model=ServiceListResponse)
def list_services(
    search: Optional[str] = Query(None),
    active: Optional[bool] = Query(None, description="Only active or inactive services"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    services, total = CatalogService(db).list_services(context, search, active, page, page_size)
    return ServiceListResponse(items=services, total=total)


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(
    service_data: ServiceCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    return CatalogService(db, invalidator).create_service(service_data, context)


@router.get("/{service_id}", response_model=ServiceResponse)
def get_service(
    service_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return CatalogService(db).get_service(service_id, context)


@router.patch("/{service_id}", response_model=ServiceResponse)
def update_service(
    service_id: int,
    service_update: ServiceUpdate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    return CatalogService(db, invalidator).update_service(service_id, service_update, context)


@router.delete("/{service_id}", response_model=SuccessResponse)
def delete_service(
    service_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    CatalogService(db, invalidator).delete_service(service_id, context)
    return SuccessResponse()
