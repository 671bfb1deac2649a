from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TenantOwnedMixin
from app.models.supplier import AddressMixin


class Customer(Base, TenantOwnedMixin, AddressMixin):
    """Customer record (CRM). Marketplace imports match customers by email."""

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    document: Mapped[str | None] = mapped_column(String(50), nullable=True)
