import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from app.models.base import Base, TenantOwnedMixin

if TYPE_CHECKING:
    from app.models.customer import Customer
    from app.models.supplier import Supplier
    from app.models.product import Product
    from app.models.service import Service


class SaleStatus(str, PyEnum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ShippingStatus(str, PyEnum):
    PAID = "paid"
    PENDING = "pending"


class SaleItemType(str, PyEnum):
    PRODUCT = "product"
    SERVICE = "service"


class Sale(Base, TenantOwnedMixin):
    """
    Point-of-sale or marketplace sale.

    total_amount = sum(item quantity * unit price) + shipping_cost, always
    computed server-side.
    """

    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("customers.id"), nullable=True, index=True
    )
    carrier_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("suppliers.id"), nullable=True
    )
    shipping_cost: Mapped[float | None] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=True
    )
    shipping_status: Mapped[ShippingStatus | None] = mapped_column(
        Enum(ShippingStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )
    total_amount: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[SaleStatus] = mapped_column(
        Enum(SaleStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=SaleStatus.COMPLETED,
    )
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    external_order_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)

    # Relationships
    items: Mapped[list["SaleItem"]] = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
    )
    customer: Mapped["Customer | None"] = relationship("Customer")
    carrier: Mapped["Supplier | None"] = relationship("Supplier")


class SaleItem(Base):
    """Line item of a sale. Owned through its sale; never queried on its own."""

    __tablename__ = "sale_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sale_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_type: Mapped[SaleItemType] = mapped_column(
        Enum(SaleItemType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    product_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("products.id"), nullable=True, index=True
    )
    service_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("services.id"), nullable=True, index=True
    )
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False
    )
    total_price: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False
    )

    # Relationships
    sale: Mapped["Sale"] = relationship("Sale", back_populates="items")
    product: Mapped["Product | None"] = relationship("Product")
    service: Mapped["Service | None"] = relationship("Service")
