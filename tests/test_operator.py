import pytest

from app.core.exceptions import UnauthorizedException
from app.core.identity import Identity, resolve_tenant
from app.models.role import Role
from app.models.supplier import Supplier
from app.models.user import User
from app.services.operator_service import OperatorService
from tests.conftest import make_user


class TestOperatorArea:
    """Platform support area"""

    def test_home(self, client, operator_headers, admin_user, other_admin):
        response = client.get("/oraculo", headers=operator_headers)

        assert response.status_code == 200
        assert response.json() == {"area": "oraculo", "tenant_accounts": 2}

    def test_list_accounts(self, client, operator_headers, admin_user, team_member, other_admin):
        response = client.get("/oraculo/users", headers=operator_headers)

        body = response.json()
        assert body["total"] == 2
        team_sizes = {item["email"]: item["team_size"] for item in body["items"]}
        assert team_sizes == {"alice@shop-a.com": 1, "bob@shop-b.com": 0}

    def test_delete_account_cascades(self, client, operator_headers, admin_headers, admin_user, team_member, db_session):
        client.post("/api/suppliers", headers=admin_headers, json={"name": "FastShip"})
        client.post("/api/transactions", headers=admin_headers, json={"description": "Rent", "amount": 10, "type": "expense", "date": "2024-05-01"})

        response = client.delete(f"/oraculo/users/{admin_user.id}", headers=operator_headers)

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.query(User).filter(User.email.in_(["alice@shop-a.com", "carol@shop-a.com"])).count() == 0
        assert db_session.query(Supplier).count() == 0

    def test_delete_leaves_other_tenants(self, client, operator_headers, admin_user, other_admin, other_headers):
        client.post("/api/suppliers", headers=other_headers, json={"name": "Keep me"})

        client.delete(f"/oraculo/users/{admin_user.id}", headers=operator_headers)

        assert client.get("/api/suppliers", headers=other_headers).json()["total"] == 1

    def test_team_member_is_not_an_account(self, client, operator_headers, team_member):
        response = client.delete(f"/oraculo/users/{team_member.id}", headers=operator_headers)

        assert response.status_code == 404

    def test_operator_cannot_be_deleted(self, client, operator_headers, db_session):
        colleague = make_user(db_session, "help@platform.com", Role.OPERATOR)

        response = client.delete(f"/oraculo/users/{colleague.id}", headers=operator_headers)

        assert response.status_code == 403

    def test_admin_is_redirected(self, client, admin_headers, other_admin):
        response = client.delete(f"/oraculo/users/{other_admin.id}", headers=admin_headers)

        assert response.status_code == 307
        assert response.headers["location"] == "/dashboard"


class TestOperatorService:
    def test_requires_operator_role(self, db_session, admin_user):
        context = resolve_tenant(Identity(user_id=admin_user.id, role=Role.ADMINISTRATOR, parent_admin_id=None))

        with pytest.raises(UnauthorizedException):
            OperatorService(db_session).list_accounts(context)
