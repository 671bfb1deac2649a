from pydantic import BaseModel
from app.schemas.auth_schemas import SessionUser
from app.schemas.transaction_schemas import FinancialSummary


class DashboardResponse(BaseModel):
    area: str = "dashboard"
    section: str | None = None
    user: SessionUser | None
    tenant_id: int | None
    summary: FinancialSummary


class AuthPageResponse(BaseModel):
    area: str
    callback_url: str | None = None
