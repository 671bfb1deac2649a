from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import (
    get_view_invalidator,
    require_administrator_context,
    require_tenant_context,
)
from app.models.tenant_context import TenantContext
from app.schemas.common import SuccessResponse
from app.schemas.team_schemas import (
    TeamListResponse,
    TeamMemberCreate,
    TeamMemberResponse,
    TeamRoleUpdate,
)
from app.services.team_service import TeamService

router = APIRouter()


@router.get("", response_model=TeamListResponse)
def list_team(
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    """
    List the members of the current tenant.

    Available to every member of the tenant.
    """
    members = TeamService(db).list_members(context)
    return TeamListResponse(items=members, total=len(members))


@router.post("", response_model=TeamMemberResponse, status_code=status.HTTP_201_CREATED)
def create_member(
    member_data: TeamMemberCreate,
    context: TenantContext = Depends(require_administrator_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Add a team member to the tenant.

    - **Requires ADMINISTRATOR role**
    - Operator and administrator roles cannot be assigned
    """
    return TeamService(db, invalidator).create_member(member_data, context)


@router.patch("/{member_id}/role", response_model=TeamMemberResponse)
def update_member_role(
    member_id: int,
    role_update: TeamRoleUpdate,
    context: TenantContext = Depends(require_administrator_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Change a member's role.

    - **Requires ADMINISTRATOR role**
    - Takes effect on the member's next request
    """
    return TeamService(db, invalidator).update_role(member_id, role_update, context)


@router.delete("/{member_id}", response_model=SuccessResponse)
def remove_member(
    member_id: int,
    context: TenantContext = Depends(require_administrator_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Remove a member from the tenant.

    - **Requires ADMINISTRATOR role**
    - Administrators cannot remove themselves
    """
    TeamService(db, invalidator).delete_member(member_id, context)
    return SuccessResponse()
