from typing import Optional

from app.models.company import Company
from app.repositories.base import TenantScopedRepository


class CompanyRepository(TenantScopedRepository[Company]):
    model = Company

    def get_for_tenant(self, tenant_id: int) -> Optional[Company]:
        return self.scoped(tenant_id).first()
