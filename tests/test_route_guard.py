import pytest
from urllib.parse import quote

from app.core.route_guard import Allow, Deny, RedirectTo, decide, login_redirect, role_home
from app.models.role import Role

TENANT_ROLES = [Role.ADMINISTRATOR, Role.MANAGER, Role.SALESPERSON, Role.FINANCE, Role.VIEWER]


class TestDecide:
    """Access decisions per path, authentication state and role"""

    @pytest.mark.parametrize("role", TENANT_ROLES + [None])
    def test_operator_area_redirects_non_operators(self, role):
        assert decide("/oraculo", role is not None, role) == RedirectTo("/dashboard")
        assert decide("/oraculo/users", role is not None, role) == RedirectTo("/dashboard")

    def test_operator_area_allows_operator(self):
        assert decide("/oraculo", True, Role.OPERATOR) == Allow()
        assert decide("/oraculo/users/5", True, Role.OPERATOR) == Allow()

    def test_dashboard_denies_anonymous(self):
        assert decide("/dashboard", False, None) == Deny()
        assert decide("/dashboard/finance", False, None) == Deny()

    @pytest.mark.parametrize("role", TENANT_ROLES)
    def test_dashboard_allows_tenant_roles(self, role):
        assert decide("/dashboard/sales", True, role) == Allow()

    def test_dashboard_sends_operator_to_operator_area(self):
        assert decide("/dashboard", True, Role.OPERATOR) == RedirectTo("/oraculo")

    @pytest.mark.parametrize("path", ["/login", "/register"])
    def test_auth_pages_send_signed_in_users_home(self, path):
        assert decide(path, True, Role.MANAGER) == RedirectTo("/dashboard")
        assert decide(path, True, Role.OPERATOR) == RedirectTo("/oraculo")

    @pytest.mark.parametrize("path", ["/login", "/register"])
    def test_auth_pages_allow_anonymous(self, path):
        assert decide(path, False, None) == Allow()

    @pytest.mark.parametrize("path", ["/", "/health", "/pricing", "/dashboards", "/oraculo-docs"])
    def test_other_paths_allowed(self, path):
        assert decide(path, False, None) == Allow()

    def test_decide_is_pure(self):
        first = decide("/dashboard/finance", True, Role.FINANCE)
        second = decide("/dashboard/finance", True, Role.FINANCE)
        assert first == second == Allow()

    def test_role_home(self):
        assert role_home(Role.OPERATOR) == "/oraculo"
        assert role_home(Role.VIEWER) == "/dashboard"

    def test_login_redirect_encodes_callback(self):
        assert login_redirect("/dashboard/finance") == f"/login?callbackUrl={quote('/dashboard/finance', safe='')}"


class TestGuardedPages:
    """Guard applied to the page areas over HTTP"""

    def test_anonymous_dashboard_redirects_to_login(self, client):
        response = client.get("/dashboard/sales")

        assert response.status_code == 307
        assert response.headers["location"] == "/login?callbackUrl=%2Fdashboard%2Fsales"

    def test_invalid_token_is_anonymous(self, client):
        response = client.get("/dashboard", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 307
        assert response.headers["location"].startswith("/login")

    def test_admin_reaches_dashboard(self, client, admin_headers, admin_user):
        response = client.get("/dashboard", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["area"] == "dashboard"
        assert data["user"]["id"] == admin_user.id
        assert data["summary"]["balance"] == 0.0

    def test_team_member_sees_parent_tenant(self, client, member_headers, admin_user):
        response = client.get("/dashboard/finance", headers=member_headers)

        assert response.status_code == 200
        assert response.json()["tenant_id"] == admin_user.id
        assert response.json()["section"] == "finance"

    def test_operator_dashboard_redirects_to_operator_area(self, client, operator_headers):
        response = client.get("/dashboard", headers=operator_headers)

        assert response.status_code == 307
        assert response.headers["location"] == "/oraculo"

    def test_admin_operator_area_redirects_to_dashboard(self, client, admin_headers):
        response = client.get("/oraculo", headers=admin_headers)

        assert response.status_code == 307
        assert response.headers["location"] == "/dashboard"

    def test_anonymous_operator_area_redirects_to_dashboard(self, client):
        response = client.get("/oraculo/users")

        assert response.status_code == 307
        assert response.headers["location"] == "/dashboard"

    def test_signed_in_login_page_redirects_home(self, client, admin_headers):
        response = client.get("/login", headers=admin_headers)

        assert response.status_code == 307
        assert response.headers["location"] == "/dashboard"

    def test_anonymous_login_page(self, client):
        response = client.get("/login", params={"callbackUrl": "/dashboard/sales"})

        assert response.status_code == 200
        assert response.json() == {"area": "login", "callback_url": "/dashboard/sales"}
