import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ReferentialConflictException
from app.core.invalidation import ViewInvalidator, Views
from app.models.integration_config import IntegrationConfig
from app.models.tenant_context import TenantContext
from app.repositories.integration_config_repository import IntegrationConfigRepository
from app.schemas.integration_config_schemas import IntegrationConfigSave

logger = logging.getLogger(__name__)


class IntegrationConfigService:
    """Marketplace connection settings, one record per tenant"""

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.config_repo = IntegrationConfigRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def get_config(self, context: TenantContext) -> Optional[IntegrationConfig]:
        return self.config_repo.get_for_tenant(context.require_tenant())

    def save_config(self, data: IntegrationConfigSave, context: TenantContext) -> IntegrationConfig:
        """
        Upsert keyed on the tenant id.

        Raises:
            ReferentialConflictException: If another tenant already connected the store
        """
        tenant_id = context.require_tenant()
        owner = self.config_repo.get_by_store_id(data.store_id)
        if owner is not None and owner.user_id != tenant_id:
            logger.warning(
                "Store already connected to another tenant",
                extra={"tenant_id": tenant_id, "store_id": data.store_id},
            )
            raise ReferentialConflictException("Store is already connected to another account")

        config = self.config_repo.get_for_tenant(tenant_id)

        if config is None:
            config = self.config_repo.create(
                IntegrationConfig(
                    user_id=tenant_id,
                    created_by_id=context.user_id,
                    store_id=data.store_id,
                    access_token=data.access_token,
                    sync_enabled=data.sync_enabled,
                )
            )
        else:
            config.store_id = data.store_id
            config.access_token = data.access_token
            config.sync_enabled = data.sync_enabled
            config = self.config_repo.update(config)

        logger.info("Integration config saved", extra={"tenant_id": tenant_id, "store_id": config.store_id})
        self.invalidator.invalidate(Views.INTEGRATIONS)
        return config

    def toggle_sync(self, enabled: bool, context: TenantContext) -> IntegrationConfig:
        """
        Raises:
            NotFoundException: If the tenant has not configured the integration
        """
        config = self.get_config(context)
        if config is None:
            raise NotFoundException("Integration is not configured")

        config.sync_enabled = enabled
        config = self.config_repo.update(config)
        self.invalidator.invalidate(Views.INTEGRATIONS)
        return config
