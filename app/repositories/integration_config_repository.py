from typing import Optional

from app.models.integration_config import IntegrationConfig
from app.repositories.base import TenantScopedRepository


class IntegrationConfigRepository(TenantScopedRepository[IntegrationConfig]):
    """Repository for IntegrationConfig data access"""

    model = IntegrationConfig

    def get_for_tenant(self, tenant_id: int) -> Optional[IntegrationConfig]:
        return self.scoped(tenant_id).first()

    def find_enabled_by_store_id(self, store_id: str) -> Optional[IntegrationConfig]:
        """
        Reverse lookup used by webhook ingress, which has no session.

        The returned config's user_id is the tenant the event belongs to.
        Disabled configs are treated as unknown stores.
        """
        return (
            self.db.query(IntegrationConfig)
            .filter(
                IntegrationConfig.store_id == store_id,
                IntegrationConfig.sync_enabled.is_(True),
            )
            .first()
        )

    def get_by_store_id(self, store_id: str) -> Optional[IntegrationConfig]:
        """Owner of a store regardless of tenant or sync state"""
        return self.db.query(IntegrationConfig).filter(IntegrationConfig.store_id == store_id).first()
