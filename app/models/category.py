from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Boolean, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base, TenantOwnedMixin


class CategoryType(str, PyEnum):
    """Category type enumeration"""

    INCOME = "income"
    EXPENSE = "expense"


class Category(Base, TenantOwnedMixin):
    """
    Chart-of-accounts entry used to classify transactions.

    Categories form a two-level tree (level 0 groups, level 1 children).
    System categories are seeded per tenant and can only be renamed or
    recoloured.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[CategoryType] = mapped_column(
        Enum(CategoryType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    children: Mapped[list["Category"]] = relationship("Category", back_populates="parent")
    parent: Mapped["Category | None"] = relationship(
        "Category", back_populates="children", remote_side=[id]
    )
