import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base, TenantOwnedMixin


class QuoteStatus(str, PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SupplierQuote(Base, TenantOwnedMixin):
    """Price quote received from a supplier. total_amount is derived from items."""

    __tablename__ = "supplier_quotes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    supplier_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    valid_until: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)
    status: Mapped[QuoteStatus] = mapped_column(
        Enum(QuoteStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=QuoteStatus.PENDING,
    )
    total_amount: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )

    # Relationships
    items: Mapped[list["SupplierQuoteItem"]] = relationship(
        "SupplierQuoteItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="SupplierQuoteItem.id",
    )


class SupplierQuoteItem(Base):
    __tablename__ = "supplier_quote_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    supplier_quote_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("supplier_quotes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=3, asdecimal=False), nullable=False
    )
    unit_price: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False
    )
    total_price: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False
    )

    # Relationships
    quote: Mapped["SupplierQuote"] = relationship("SupplierQuote", back_populates="items")
