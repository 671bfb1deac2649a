import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, DateTime, Text, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from app.models.base import Base, TenantOwnedMixin

if TYPE_CHECKING:
    from app.models.sale import Sale


class ShipmentStatus(str, PyEnum):
    """Logistics pipeline, in order."""

    PENDING = "pending"
    PICKING = "picking"
    PACKED = "packed"
    LABELED = "labeled"
    POSTED = "posted"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"


# Status -> timestamp column stamped when the shipment enters that status
STATUS_TIMESTAMPS = {
    ShipmentStatus.PICKING: "picked_at",
    ShipmentStatus.PACKED: "packed_at",
    ShipmentStatus.LABELED: "labeled_at",
    ShipmentStatus.POSTED: "posted_at",
    ShipmentStatus.DELIVERED: "delivered_at",
}


class ShipmentOrder(Base, TenantOwnedMixin):
    """Shipment of one sale (at most one per sale)."""

    __tablename__ = "shipment_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sale_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    carrier_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[ShipmentStatus] = mapped_column(
        Enum(ShipmentStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ShipmentStatus.PENDING,
        index=True,
    )
    tracking_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    shipping_method: Mapped[str | None] = mapped_column(String(100), nullable=True)
    shipping_cost: Mapped[float | None] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=True
    )
    weight: Mapped[float | None] = mapped_column(
        Numeric(precision=10, scale=3, asdecimal=False), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    picked_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    packed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    labeled_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    posted_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    sale: Mapped["Sale"] = relationship("Sale")
