from typing import Optional

from app.models.financial_account import FinancialAccount
from app.repositories.base import TenantScopedRepository


class FinancialAccountRepository(TenantScopedRepository[FinancialAccount]):
    """Repository for FinancialAccount data access. The default account lists first."""

    model = FinancialAccount
    search_fields = ("name",)
    ordering = ("-is_default", "name", "id")

    def get_default(self, tenant_id: int) -> Optional[FinancialAccount]:
        return self.scoped(tenant_id).filter(FinancialAccount.is_default.is_(True)).first()

    def clear_default(self, tenant_id: int) -> int:
        """Unset the default flag on every account of the tenant (does not commit)"""
        return (
            self.scoped(tenant_id)
            .filter(FinancialAccount.is_default.is_(True))
            .update({FinancialAccount.is_default: False}, synchronize_session="fetch")
        )
