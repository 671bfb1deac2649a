"""Page-area access decisions. Stateless; evaluated before any tenant data is read."""

from dataclasses import dataclass
from urllib.parse import quote

from app.config import settings
from app.models.role import Role


@dataclass(frozen=True)
class Allow:
    pass


@dataclass(frozen=True)
class Deny:
    """Not authenticated; the caller sends the client to the login page."""

    pass


@dataclass(frozen=True)
class RedirectTo:
    target: str


Decision = Allow | Deny | RedirectTo


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def role_home(role: Role | None) -> str:
    return settings.OPERATOR_PATH if role == Role.OPERATOR else settings.DASHBOARD_PATH


def decide(path: str, is_authenticated: bool, role: Role | None) -> Decision:
    """
    Map (path, authentication state, role) to an access decision.

    Rules, first match wins:
    1. Operator area: operators only, everyone else goes to the dashboard.
    2. Dashboard: must be authenticated; operators go to the operator area.
    3. Login/register: authenticated principals go to their home.
    4. Anything else is allowed.
    """
    is_operator = is_authenticated and role == Role.OPERATOR

    if _under(path, settings.OPERATOR_PATH):
        return Allow() if is_operator else RedirectTo(settings.DASHBOARD_PATH)

    if _under(path, settings.DASHBOARD_PATH):
        if not is_authenticated:
            return Deny()
        return RedirectTo(settings.OPERATOR_PATH) if is_operator else Allow()

    if _under(path, settings.LOGIN_PATH) or _under(path, settings.REGISTER_PATH):
        return RedirectTo(role_home(role)) if is_authenticated else Allow()

    return Allow()


def login_redirect(path: str) -> str:
    return f"{settings.LOGIN_PATH}?callbackUrl={quote(path, safe='')}"
