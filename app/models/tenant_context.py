"""Tenant context for request authorization."""

from dataclasses import dataclass

from app.core.exceptions import UnauthenticatedException, UnauthorizedException
from app.models.role import Role


@dataclass(frozen=True)
class TenantContext:
    """
    Tenant context for one request or operation.

    Derived from the resolved identity and never cached across requests:
    role and parent linkage can change between calls.

    Attributes:
        user_id: The acting principal (may be a team member)
        tenant_id: The data partition; the parent admin id for team members
        role: The acting principal's role
    """

    user_id: int | None
    tenant_id: int | None
    role: Role | None

    @property
    def is_authenticated(self) -> bool:
        return self.tenant_id is not None

    def require_tenant(self) -> int:
        """
        Return the tenant id or refuse the operation.

        Raises:
            UnauthenticatedException: If no tenant could be resolved
        """
        if self.tenant_id is None:
            raise UnauthenticatedException("Not authenticated")
        return self.tenant_id

    def is_administrator(self) -> bool:
        return self.role == Role.ADMINISTRATOR

    def is_operator(self) -> bool:
        return self.role == Role.OPERATOR

    def require_administrator(self, message: str = "Only administrators can perform this action") -> int:
        """Return the tenant id when the principal is an administrator."""
        tenant_id = self.require_tenant()
        if not self.is_administrator():
            raise UnauthorizedException(message)
        return tenant_id

    def __repr__(self) -> str:
        role = self.role.value if self.role else None
        return f"<TenantContext(user_id={self.user_id}, tenant_id={self.tenant_id}, role={role})>"


ANONYMOUS_CONTEXT = TenantContext(user_id=None, tenant_id=None, role=None)
