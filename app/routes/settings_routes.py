from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.tenant_context import TenantContext
from app.schemas.company_schemas import CompanyResponse, CompanySave
from app.schemas.integration_config_schemas import (
    IntegrationConfigResponse,
    IntegrationConfigSave,
    IntegrationSyncToggle,
)
from app.services.company_service import CompanyService
from app.services.integration_config_service import IntegrationConfigService

router = APIRouter()


@router.get("/company", response_model=Optional[CompanyResponse])
def get_company(
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    """The tenant's business profile, or null before it is first saved"""
    return CompanyService(db).get_company(context)


@router.put("/company", response_model=CompanyResponse)
def save_company(
    company_data: CompanySave,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    return CompanyService(db, invalidator).save_company(company_data, context)


@router.get("/integrations/nuvemshop", response_model=Optional[IntegrationConfigResponse])
def get_integration(
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return IntegrationConfigService(db).get_config(context)


@router.put("/integrations/nuvemshop", response_model=IntegrationConfigResponse)
def save_integration(
    config_data: IntegrationConfigSave,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Connect the tenant to a Nuvemshop store.

    The access token is stored but never returned.
    """
    return IntegrationConfigService(db, invalidator).save_config(config_data, context)


@router.patch("/integrations/nuvemshop/sync", response_model=IntegrationConfigResponse)
def toggle_integration_sync(
    toggle: IntegrationSyncToggle,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """Webhooks for the store are ignored while sync is disabled"""
    return IntegrationConfigService(db, invalidator).toggle_sync(toggle.enabled, context)
