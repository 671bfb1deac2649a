"""Session identity and tenant resolution."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import UnauthenticatedException
from app.core.security import decode_jwt
from app.models.role import Role
from app.models.tenant_context import ANONYMOUS_CONTEXT, TenantContext
from app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Authenticated principal as read from the store for one request."""

    user_id: int | None
    role: Role | None
    parent_admin_id: int | None
    email: str | None = None
    name: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = Identity(user_id=None, role=None, parent_admin_id=None)


def resolve_identity(token: str | None, db: Session) -> Identity:
    """
    Resolve the principal behind a session token.

    Never raises for the not-logged-in case: a missing, invalid or expired
    token, an unknown user, or a failed lookup all yield ANONYMOUS.

    Role and parent linkage come from the database, not from the token
    claims, so a demoted or re-parented team member takes effect on the
    next request.
    """
    if not token:
        return ANONYMOUS

    try:
        payload = decode_jwt(token)
    except UnauthenticatedException as e:
        logger.debug("Rejected session token", extra={"reason": str(e)})
        return ANONYMOUS

    user_repo = UserRepository(db)
    try:
        sub = payload.get("sub")
        if sub is not None:
            try:
                user = user_repo.get_by_id(int(sub))
            except (TypeError, ValueError):
                logger.info("Session token has a non-numeric subject", extra={"sub": sub})
                return ANONYMOUS
        else:
            # Legacy sessions carry only the email claim
            user = user_repo.get_by_email(payload["email"])
    except SQLAlchemyError:
        logger.exception("Identity lookup failed")
        return ANONYMOUS

    if user is None:
        logger.info("Session token refers to an unknown user", extra={"sub": payload.get("sub")})
        return ANONYMOUS

    return Identity(
        user_id=user.id,
        role=user.role,
        parent_admin_id=user.parent_admin_id,
        email=user.email,
        name=user.name,
    )


def resolve_tenant(identity: Identity) -> TenantContext:
    """Team members work inside their parent administrator's tenant."""
    if not identity.is_authenticated:
        return ANONYMOUS_CONTEXT

    tenant_id = identity.parent_admin_id if identity.parent_admin_id is not None else identity.user_id
    return TenantContext(user_id=identity.user_id, tenant_id=tenant_id, role=identity.role)
