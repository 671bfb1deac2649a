from typing import Optional
from sqlalchemy.orm import Session

from app.core.invalidation import ViewInvalidator, Views
from app.models.company import Company
from app.models.tenant_context import TenantContext
from app.repositories.company_repository import CompanyRepository
from app.schemas.company_schemas import CompanySave


class CompanyService:
    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.company_repo = CompanyRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def get_company(self, context: TenantContext) -> Optional[Company]:
        return self.company_repo.get_for_tenant(context.require_tenant())

    def save_company(self, data: CompanySave, context: TenantContext) -> Company:
        """Create or replace the tenant's business profile"""
        tenant_id = context.require_tenant()
        company = self.company_repo.get_for_tenant(tenant_id)

        if company is None:
            company = self.company_repo.create(
                Company(user_id=tenant_id, created_by_id=context.user_id, **data.model_dump())
            )
        else:
            for field, value in data.model_dump().items():
                setattr(company, field, value)
            company = self.company_repo.update(company)

        self.invalidator.invalidate(Views.SETTINGS)
        return company
