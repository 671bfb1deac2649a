from datetime import datetime
from pydantic import BaseModel
from app.models.role import Role
from app.schemas.common import ResponseModel


class TenantAccountResponse(ResponseModel):
    """A tenant root as seen from the operator area"""

    id: int
    name: str | None
    email: str
    role: Role
    created_at: datetime
    team_size: int = 0


class TenantAccountListResponse(BaseModel):
    items: list[TenantAccountResponse]
    total: int


class OperatorHomeResponse(BaseModel):
    area: str
    tenant_accounts: int
