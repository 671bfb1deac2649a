"""Page areas behind the route guard: dashboard, operator area and the auth pages."""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.identity import Identity, resolve_tenant
from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import enforce_route_guard, get_view_invalidator, require_operator_context
from app.models.tenant_context import TenantContext
from app.schemas.common import SuccessResponse
from app.schemas.operator_schemas import OperatorHomeResponse, TenantAccountListResponse
from app.schemas.page_schemas import AuthPageResponse, DashboardResponse
from app.services.auth_service import AuthService
from app.services.operator_service import OperatorService
from app.services.transaction_service import TransactionService

dashboard_router = APIRouter(dependencies=[Depends(enforce_route_guard)])
operator_router = APIRouter(dependencies=[Depends(enforce_route_guard)])
auth_pages_router = APIRouter(dependencies=[Depends(enforce_route_guard)])


def _dashboard(identity: Identity, db: Session, section: Optional[str] = None) -> DashboardResponse:
    session = AuthService(db).get_session(identity)
    summary = TransactionService(db).get_financial_summary(resolve_tenant(identity))
    return DashboardResponse(user=session.user, tenant_id=session.tenant_id, section=section, summary=summary)


@dashboard_router.get("", response_model=DashboardResponse)
def dashboard_home(
    identity: Identity = Depends(enforce_route_guard),
    db: Session = Depends(get_db),
):
    """Business dashboard: session user and the financial summary"""
    return _dashboard(identity, db)


@dashboard_router.get("/{section:path}", response_model=DashboardResponse)
def dashboard_section(
    section: str,
    identity: Identity = Depends(enforce_route_guard),
    db: Session = Depends(get_db),
):
    return _dashboard(identity, db, section)


@operator_router.get("", response_model=OperatorHomeResponse)
def operator_home(
    context: TenantContext = Depends(require_operator_context),
    db: Session = Depends(get_db),
):
    accounts = OperatorService(db).list_accounts(context)
    return OperatorHomeResponse(area="oraculo", tenant_accounts=len(accounts))


@operator_router.get("/users", response_model=TenantAccountListResponse)
def list_tenant_accounts(
    context: TenantContext = Depends(require_operator_context),
    db: Session = Depends(get_db),
):
    """All tenant roots with their team sizes (operators only)"""
    accounts = OperatorService(db).list_accounts(context)
    return TenantAccountListResponse(items=accounts, total=len(accounts))


@operator_router.delete("/users/{account_id}", response_model=SuccessResponse)
def delete_tenant_account(
    account_id: int,
    context: TenantContext = Depends(require_operator_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Delete a tenant and all of its data.

    - **Requires OPERATOR role**
    - Removes the team and every business record of the tenant
    """
    OperatorService(db, invalidator).delete_account(account_id, context)
    return SuccessResponse()


@auth_pages_router.get("/login", response_model=AuthPageResponse)
def login_page(callback_url: Optional[str] = Query(None, alias="callbackUrl")):
    """Reached only when not logged in; signed-in principals are sent home"""
    return AuthPageResponse(area="login", callback_url=callback_url)


@auth_pages_router.get("/register", response_model=AuthPageResponse)
def register_page():
    return AuthPageResponse(area="register")
