from app.models.role import Role
from app.models.user import User
from tests.conftest import bearer, make_user


def member_payload(**overrides):
    data = {"name": "Frank Dias", "email": "frank@shop-a.com", "password": "secret123", "role": "manager"}
    data.update(overrides)
    return data


class TestTeamListing:
    """Any member of the tenant may read the team"""

    def test_admin_lists_team(self, client, admin_headers, admin_user, team_member):
        response = client.get("/api/team", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["items"][0]["id"] == admin_user.id

    def test_member_lists_team(self, client, member_headers, team_member):
        response = client.get("/api/team", headers=member_headers)

        assert response.status_code == 200
        assert {m["email"] for m in response.json()["items"]} == {"alice@shop-a.com", "carol@shop-a.com"}

    def test_other_tenant_does_not_see_team(self, client, other_headers, team_member):
        response = client.get("/api/team", headers=other_headers)

        assert [m["email"] for m in response.json()["items"]] == ["bob@shop-b.com"]


class TestTeamMutations:
    """Only administrators change the team"""

    def test_admin_creates_member(self, client, admin_headers, admin_user, db_session):
        response = client.post("/api/team", headers=admin_headers, json=member_payload())

        assert response.status_code == 201
        member = response.json()
        assert member["role"] == "manager"
        assert member["parent_admin_id"] == admin_user.id
        assert response.headers["x-invalidated-views"] == "/dashboard/settings"

    def test_new_member_can_log_in(self, client, admin_headers):
        client.post("/api/team", headers=admin_headers, json=member_payload())

        response = client.post("/api/auth/login", json={"email": "frank@shop-a.com", "password": "secret123"})

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "manager"

    def test_member_cannot_create(self, client, member_headers, db_session):
        response = client.post("/api/team", headers=member_headers, json=member_payload())

        assert response.status_code == 403
        assert db_session.query(User).filter(User.email == "frank@shop-a.com").count() == 0

    def test_member_gets_403_even_with_invalid_body(self, client, member_headers):
        response = client.post("/api/team", headers=member_headers, json={"name": ""})

        assert response.status_code == 403

    def test_operator_role_not_assignable(self, client, admin_headers):
        response = client.post("/api/team", headers=admin_headers, json=member_payload(role="operator"))

        assert response.status_code == 422
        assert "role" in response.json()["fields"]

    def test_duplicate_email(self, client, admin_headers, other_admin):
        response = client.post("/api/team", headers=admin_headers, json=member_payload(email="bob@shop-b.com"))

        assert response.status_code == 400

    def test_admin_changes_role(self, client, admin_headers, team_member):
        response = client.patch(f"/api/team/{team_member.id}/role", headers=admin_headers, json={"role": "finance"})

        assert response.status_code == 200
        assert response.json()["role"] == "finance"

    def test_role_change_applies_on_next_request(self, client, admin_headers, member_headers, team_member):
        client.patch(f"/api/team/{team_member.id}/role", headers=admin_headers, json={"role": "viewer"})

        response = client.get("/api/auth/session", headers=member_headers)

        assert response.json()["user"]["role"] == "viewer"

    def test_member_cannot_change_roles(self, client, member_headers, team_member):
        response = client.patch(
            f"/api/team/{team_member.id}/role", headers=member_headers, json={"role": "administrator"}
        )

        assert response.status_code == 403

    def test_admin_cannot_touch_other_tenant_member(self, client, other_headers, team_member):
        response = client.patch(f"/api/team/{team_member.id}/role", headers=other_headers, json={"role": "viewer"})

        assert response.status_code == 404

    def test_admin_removes_member(self, client, admin_headers, team_member, db_session):
        response = client.delete(f"/api/team/{team_member.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert db_session.get(User, team_member.id) is None

    def test_admin_cannot_remove_self(self, client, admin_headers, admin_user):
        response = client.delete(f"/api/team/{admin_user.id}", headers=admin_headers)

        assert response.status_code == 403

    def test_removed_member_loses_session(self, client, admin_headers, team_member):
        headers = bearer(team_member)
        client.delete(f"/api/team/{team_member.id}", headers=admin_headers)

        response = client.get("/api/customers", headers=headers)

        assert response.status_code == 401

    def test_member_of_manager_role_cannot_delete(self, client, db_session, admin_user, team_member):
        manager = make_user(db_session, "gina@shop-a.com", Role.MANAGER, parent=admin_user)

        response = client.delete(f"/api/team/{team_member.id}", headers=bearer(manager))

        assert response.status_code == 403
