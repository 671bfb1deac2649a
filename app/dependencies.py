from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.exceptions import RedirectException, UnauthorizedException
from app.core.identity import Identity, resolve_identity, resolve_tenant
from app.core.invalidation import ViewInvalidator
from app.core.route_guard import Deny, RedirectTo, decide, login_redirect
from app.database import get_db
from app.models.tenant_context import TenantContext
from app.services.team_service import ADMIN_ONLY_MESSAGE

# Anonymous requests reach the handlers; each dependency decides what that means
bearer = HTTPBearer(auto_error=False)


async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> Identity:
    """
    FastAPI dependency resolving the session principal.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using shared SECRET_KEY
    3. Re-read the user's role and parent admin from the database

    Returns ANONYMOUS instead of raising when there is no valid session.
    """
    token = credentials.credentials if credentials else None
    return resolve_identity(token, db)


async def get_tenant_context(identity: Identity = Depends(get_identity)) -> TenantContext:
    """Tenant context for the request; anonymous context when not logged in."""
    return resolve_tenant(identity)


async def require_tenant_context(context: TenantContext = Depends(get_tenant_context)) -> TenantContext:
    """
    Tenant context for endpoints that read or write tenant data.

    Raises:
        UnauthenticatedException: If no tenant could be resolved (401)
    """
    context.require_tenant()
    return context


async def require_administrator_context(
    context: TenantContext = Depends(require_tenant_context),
) -> TenantContext:
    """
    Administrator gate for team mutations.

    Resolved before the request body is validated, so non-administrators
    get 403 whatever they send.
    """
    context.require_administrator(ADMIN_ONLY_MESSAGE)
    return context


async def require_operator_context(
    context: TenantContext = Depends(require_tenant_context),
) -> TenantContext:
    if not context.is_operator():
        raise UnauthorizedException("Operator access required")
    return context


def get_view_invalidator(response: Response) -> ViewInvalidator:
    return ViewInvalidator(response)


async def enforce_route_guard(request: Request, identity: Identity = Depends(get_identity)) -> Identity:
    """
    Apply the page-area access rules to the request path.

    Raises:
        RedirectException: To the login page (with callbackUrl) or the principal's home
    """
    path = request.url.path
    decision = decide(path, identity.is_authenticated, identity.role)

    if isinstance(decision, Deny):
        raise RedirectException(login_redirect(path))
    if isinstance(decision, RedirectTo):
        raise RedirectException(decision.target)
    return identity
