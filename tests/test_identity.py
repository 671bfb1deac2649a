from app.core.identity import ANONYMOUS, resolve_identity, resolve_tenant
from app.models.role import Role
from app.models.tenant_context import ANONYMOUS_CONTEXT
from tests.conftest import create_test_token, make_user


class TestResolveIdentity:
    """Session token to principal"""

    def test_no_token_is_anonymous(self, db_session):
        assert resolve_identity(None, db_session) == ANONYMOUS
        assert resolve_identity("", db_session) == ANONYMOUS

    def test_garbage_token_is_anonymous(self, db_session):
        assert resolve_identity("abc.def.ghi", db_session) == ANONYMOUS

    def test_expired_token_is_anonymous(self, db_session, admin_user):
        token = create_test_token(admin_user.id, expired=True)
        assert resolve_identity(token, db_session) == ANONYMOUS

    def test_wrong_secret_is_anonymous(self, db_session, admin_user):
        token = create_test_token(admin_user.id, secret="another-secret")
        assert resolve_identity(token, db_session) == ANONYMOUS

    def test_unknown_user_is_anonymous(self, db_session):
        assert resolve_identity(create_test_token(9999), db_session) == ANONYMOUS

    def test_non_numeric_subject_is_anonymous(self, db_session, admin_user):
        assert resolve_identity(create_test_token("user-abc"), db_session) == ANONYMOUS

    def test_resolves_user(self, db_session, admin_user):
        identity = resolve_identity(create_test_token(admin_user.id), db_session)

        assert identity.is_authenticated
        assert identity.user_id == admin_user.id
        assert identity.role == Role.ADMINISTRATOR
        assert identity.parent_admin_id is None

    def test_legacy_email_only_token(self, db_session, admin_user):
        token = create_test_token(None, email="ALICE@shop-a.com")
        identity = resolve_identity(token, db_session)

        assert identity.user_id == admin_user.id

    def test_role_is_read_from_store(self, db_session, team_member):
        token = create_test_token(team_member.id)
        assert resolve_identity(token, db_session).role == Role.SALESPERSON

        team_member.role = Role.VIEWER
        db_session.commit()

        # Same token, new role on the next resolution
        assert resolve_identity(token, db_session).role == Role.VIEWER


class TestResolveTenant:
    """Principal to data partition"""

    def test_anonymous_has_no_tenant(self):
        context = resolve_tenant(ANONYMOUS)

        assert context == ANONYMOUS_CONTEXT
        assert not context.is_authenticated

    def test_root_is_its_own_tenant(self, db_session, admin_user):
        context = resolve_tenant(resolve_identity(create_test_token(admin_user.id), db_session))

        assert context.tenant_id == admin_user.id
        assert context.user_id == admin_user.id

    def test_team_member_uses_parent_tenant(self, db_session, admin_user, team_member):
        context = resolve_tenant(resolve_identity(create_test_token(team_member.id), db_session))

        assert context.tenant_id == admin_user.id
        assert context.user_id == team_member.id
        assert context.role == Role.SALESPERSON

    def test_reparented_member_moves_tenant(self, db_session, admin_user, other_admin):
        member = make_user(db_session, "dave@shop-a.com", Role.MANAGER, parent=admin_user)
        token = create_test_token(member.id)
        assert resolve_tenant(resolve_identity(token, db_session)).tenant_id == admin_user.id

        member.parent_admin_id = other_admin.id
        db_session.commit()

        assert resolve_tenant(resolve_identity(token, db_session)).tenant_id == other_admin.id


class TestUnauthenticatedApi:
    """Tenant data endpoints without a session"""

    def test_list_without_token_is_401(self, client):
        response = client.get("/api/customers")

        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_expired_token_is_401(self, client, admin_user):
        headers = {"Authorization": f"Bearer {create_test_token(admin_user.id, expired=True)}"}
        response = client.post("/api/suppliers", headers=headers, json={"name": "Acme"})

        assert response.status_code == 401

    def test_session_endpoint_anonymous(self, client):
        response = client.get("/api/auth/session")

        assert response.status_code == 200
        assert response.json()["authenticated"] is False
