import logging
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, UnauthenticatedException, ValidationException
from app.core.identity import Identity, resolve_tenant
from app.core.route_guard import role_home
from app.core.security import create_session_token, hash_password, verify_password
from app.models.role import Role
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.auth_schemas import (
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    SessionResponse,
    SessionUser,
    TokenResponse,
)
from app.services.category_service import CategoryService

logger = logging.getLogger(__name__)


def issue_token(user: User) -> TokenResponse:
    """Embed the principal's current role and parent linkage in a fresh token"""
    token = create_session_token(
        user_id=user.id,
        role=user.role.value,
        parent_admin_id=user.parent_admin_id,
        name=user.name,
        email=user.email,
    )
    return TokenResponse(access_token=token, user=SessionUser.model_validate(user))


class AuthService:
    """Registration, login and session profile"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)

    def register(self, data: RegisterRequest) -> TokenResponse:
        """
        Create a new tenant root (administrator) and sign it in.

        The default chart of accounts is seeded for the new tenant.

        Raises:
            ValidationException: If the email is already registered
        """
        if self.user_repo.email_exists(data.email):
            raise ValidationException("Email already in use", fields={"email": "Email already in use"})

        user = self.user_repo.create(
            User(
                name=data.name,
                email=data.email.lower(),
                password_hash=hash_password(data.password),
                role=Role.ADMINISTRATOR,
            )
        )
        CategoryService(self.db).ensure_system_categories(user.id, created_by_id=user.id)
        logger.info("Tenant registered", extra={"user_id": user.id})
        return issue_token(user)

    def login(self, data: LoginRequest) -> TokenResponse:
        """
        Raises:
            UnauthenticatedException: If the credentials do not match
        """
        user = self.user_repo.get_by_email(data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Login failed")
            raise UnauthenticatedException("Invalid email or password")

        logger.info("Login succeeded", extra={"user_id": user.id})
        return issue_token(user)

    def get_session(self, identity: Identity) -> SessionResponse:
        if not identity.is_authenticated:
            return SessionResponse(authenticated=False)

        user = self.user_repo.get_by_id(identity.user_id)
        if user is None:
            return SessionResponse(authenticated=False)

        return SessionResponse(
            authenticated=True,
            user=SessionUser.model_validate(user),
            tenant_id=resolve_tenant(identity).tenant_id,
            home=role_home(user.role),
        )

    def update_profile(self, data: ProfileUpdate, identity: Identity) -> TokenResponse:
        """
        Update the caller's own profile and return a refreshed token.

        Raises:
            UnauthenticatedException: If there is no session
        """
        if not identity.is_authenticated:
            raise UnauthenticatedException("Not authenticated")

        user = self.user_repo.get_by_id(identity.user_id)
        if user is None:
            raise NotFoundException("User not found")

        changes = data.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is None:
            raise ValidationException("Invalid fields", fields={"name": "This field cannot be empty"})
        for field, value in changes.items():
            setattr(user, field, value)

        user = self.user_repo.update(user)
        return issue_token(user)
