from datetime import datetime
from pydantic import Field, field_validator
from app.models.role import Role, TEAM_ASSIGNABLE_ROLES
from app.schemas.common import EMAIL_PATTERN, RequestModel, ResponseModel


def _assignable(role: Role) -> Role:
    if role not in TEAM_ASSIGNABLE_ROLES:
        raise ValueError(f"Role '{role.value}' cannot be assigned to team members")
    return role


class TeamMemberCreate(RequestModel):
    """Invite a team member into the caller's tenant (administrators only)"""

    name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6, max_length=64)
    role: Role = Role.SALESPERSON

    @field_validator("role")
    @classmethod
    def check_role(cls, role: Role) -> Role:
        return _assignable(role)


class TeamRoleUpdate(RequestModel):
    role: Role

    @field_validator("role")
    @classmethod
    def check_role(cls, role: Role) -> Role:
        return _assignable(role)


class TeamMemberResponse(ResponseModel):
    id: int
    name: str | None
    email: str
    role: Role
    parent_admin_id: int | None
    phone: str | None
    position: str | None
    created_at: datetime


class TeamListResponse(ResponseModel):
    items: list[TeamMemberResponse]
    total: int
