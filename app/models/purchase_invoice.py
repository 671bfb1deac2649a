import datetime
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from app.models.base import Base, TenantOwnedMixin
from app.models.transaction import TransactionStatus

if TYPE_CHECKING:
    from app.models.product import Product
    from app.models.supplier import Supplier


class PurchaseInvoice(Base, TenantOwnedMixin):
    """
    Goods received from a supplier (stock entry).

    Freight and other costs are spread over the items in proportion to
    their subtotal, then tax_percent (a fraction, 0.15 = 15%) is applied.
    total_cost is the sum of the allocated item costs and is what the
    generated payable charges.
    """

    __tablename__ = "purchase_invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invoice_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    invoice_key: Mapped[str | None] = mapped_column(String(60), nullable=True)
    supplier_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("suppliers.id"), nullable=True, index=True
    )
    entry_date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    subtotal: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )
    freight_cost: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )
    tax_percent: Mapped[float] = mapped_column(
        Numeric(precision=7, scale=4, asdecimal=False), nullable=False, default=0.0
    )
    other_costs: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )
    total_cost: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_status: Mapped[TransactionStatus] = mapped_column(
        Enum(TransactionStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TransactionStatus.PENDING,
    )

    # Relationships
    items: Mapped[list["StockEntry"]] = relationship(
        "StockEntry",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="StockEntry.id",
    )
    supplier: Mapped["Supplier | None"] = relationship("Supplier")


class StockEntry(Base, TenantOwnedMixin):
    """Units of one product received on an invoice, at their allocated unit cost"""

    __tablename__ = "stock_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    purchase_invoice_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("purchase_invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    raw_unit_cost: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False
    )
    unit_cost: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False
    )

    # Relationships
    invoice: Mapped["PurchaseInvoice"] = relationship("PurchaseInvoice", back_populates="items")
    product: Mapped["Product"] = relationship("Product")
