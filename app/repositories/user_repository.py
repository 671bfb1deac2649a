import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import PersistenceException
from app.models.role import Role
from app.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """
    Repository for User model operations.

    Users are not tenant rows: team queries are scoped by parent_admin_id.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by internal ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)"""
        return self.db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def get_team(self, tenant_id: int) -> list[User]:
        """All users working inside the tenant, root first"""
        return (
            self.db.query(User)
            .filter((User.id == tenant_id) | (User.parent_admin_id == tenant_id))
            .order_by(User.parent_admin_id.isnot(None), User.name.asc(), User.id.asc())
            .all()
        )

    def get_team_member(self, member_id: int, tenant_id: int) -> Optional[User]:
        """Get a team member linked to the tenant root"""
        return (
            self.db.query(User)
            .filter(User.id == member_id, User.parent_admin_id == tenant_id)
            .first()
        )

    def get_tenant_roots(self) -> list[User]:
        """Top-level accounts (operators excluded)"""
        return (
            self.db.query(User)
            .filter(User.parent_admin_id.is_(None), User.role != Role.OPERATOR)
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )

    def count_team_members(self, tenant_id: int) -> int:
        return self.db.query(User).filter(User.parent_admin_id == tenant_id).count()

    def create(self, user: User) -> User:
        self.db.add(user)
        self._commit("create")
        self.db.refresh(user)
        return user

    def update(self, user: User) -> User:
        self._commit("update")
        self.db.refresh(user)
        return user

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self._commit("delete")

    def commit(self) -> None:
        """Commit a composite mutation as one unit"""
        self._commit("commit")

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Database commit failed", extra={"operation": operation, "table": "users"})
            raise PersistenceException()
