from sqlalchemy import String, Integer, Numeric, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TenantOwnedMixin


class Service(Base, TenantOwnedMixin):
    """Service offered by the tenant and sellable at the point of sale."""

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
