from sqlalchemy import String, Integer, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin
from app.models.role import Role


class User(Base, TimestampMixin):
    """
    Authenticated principal.

    A user with parent_admin_id = NULL is a tenant root: its id is the
    tenant id stamped on every business row it owns. A user linked to a
    parent administrator is a team member and works inside the parent's
    tenant.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=Role.ADMINISTRATOR,
    )
    parent_admin_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Relationships
    team_members: Mapped[list["User"]] = relationship(
        "User",
        back_populates="parent_admin",
        cascade="all, delete-orphan",
    )
    parent_admin: Mapped["User | None"] = relationship(
        "User", back_populates="team_members", remote_side=[id]
    )

    @property
    def is_tenant_root(self) -> bool:
        return self.parent_admin_id is None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role={self.role.value})>"
