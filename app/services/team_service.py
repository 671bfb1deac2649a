import logging
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, UnauthorizedException, ValidationException
from app.core.invalidation import ViewInvalidator, Views
from app.core.security import hash_password
from app.models.role import Role
from app.models.tenant_context import TenantContext
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.team_schemas import TeamMemberCreate, TeamRoleUpdate

logger = logging.getLogger(__name__)

ADMIN_ONLY_MESSAGE = "Only administrators can manage the team"


class TeamService:
    """Service layer for team management inside a tenant"""

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def list_members(self, context: TenantContext) -> list[User]:
        """
        All users of the tenant, the administrator first.

        Any member of the tenant may list the team.
        """
        return self.user_repo.get_team(context.require_tenant())

    def create_member(self, data: TeamMemberCreate, context: TenantContext) -> User:
        """
        Create a team member linked to the caller's tenant (administrators only).

        Raises:
            UnauthorizedException: If the caller is not an administrator
            ValidationException: If the email is already in use
        """
        tenant_id = context.require_administrator(ADMIN_ONLY_MESSAGE)

        if self.user_repo.email_exists(data.email):
            raise ValidationException("Email already in use", fields={"email": "Email already in use"})

        member = User(
            name=data.name,
            email=data.email.lower(),
            password_hash=hash_password(data.password),
            role=data.role,
            parent_admin_id=tenant_id,
        )
        member = self.user_repo.create(member)
        logger.info(
            "Team member created",
            extra={"tenant_id": tenant_id, "member_id": member.id, "role": member.role.value},
        )
        self.invalidator.invalidate(Views.SETTINGS)
        return member

    def _get_member(self, member_id: int, tenant_id: int) -> User:
        member = self.user_repo.get_team_member(member_id, tenant_id)
        if not member:
            raise NotFoundException(f"Team member {member_id} not found")
        return member

    def update_role(self, member_id: int, data: TeamRoleUpdate, context: TenantContext) -> User:
        """
        Raises:
            UnauthorizedException: If the caller is not an administrator
            NotFoundException: If the member does not belong to the tenant
        """
        tenant_id = context.require_administrator(ADMIN_ONLY_MESSAGE)
        member = self._get_member(member_id, tenant_id)

        member.role = data.role
        member = self.user_repo.update(member)
        logger.info(
            "Team member role changed",
            extra={"tenant_id": tenant_id, "member_id": member.id, "role": data.role.value},
        )
        self.invalidator.invalidate(Views.SETTINGS)
        return member

    def delete_member(self, member_id: int, context: TenantContext) -> None:
        tenant_id = context.require_administrator(ADMIN_ONLY_MESSAGE)
        if member_id == context.user_id:
            raise UnauthorizedException("Administrators cannot remove themselves")

        member = self._get_member(member_id, tenant_id)
        if member.role == Role.OPERATOR:
            raise UnauthorizedException("Operator accounts cannot be removed from a team")

        self.user_repo.delete(member)
        logger.info("Team member removed", extra={"tenant_id": tenant_id, "member_id": member_id})
        self.invalidator.invalidate(Views.SETTINGS)
