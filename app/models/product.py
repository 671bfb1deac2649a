from sqlalchemy import String, Integer, Numeric, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TenantOwnedMixin


class Product(Base, TenantOwnedMixin):
    """
    Inventory item.

    stock_quantity is only enforced and decremented when manage_stock is set.
    average_cost is the quantity-weighted unit cost of its stock entries.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    manage_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    ncm: Mapped[str | None] = mapped_column(String(20), nullable=True)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    average_cost: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )
