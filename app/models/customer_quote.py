import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, Boolean, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base, TenantOwnedMixin


class CustomerQuoteStatus(str, PyEnum):
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


class CustomerQuote(Base, TenantOwnedMixin):
    """
    Quote issued to a client.

    number is sequential per tenant. total_amount is the item total minus
    the discount, never below zero. Approval moves stock and raises the
    receivables; leaving the approved state gives the stock back.
    """

    __tablename__ = "quotes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    client_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    customer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    valid_until: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)
    status: Mapped[CustomerQuoteStatus] = mapped_column(
        Enum(CustomerQuoteStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=CustomerQuoteStatus.DRAFT,
    )
    discount: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )
    total_amount: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    installments: Mapped[int | None] = mapped_column(Integer, nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Relationships
    items: Mapped[list["CustomerQuoteItem"]] = relationship(
        "CustomerQuoteItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="CustomerQuoteItem.id",
    )

    __table_args__ = (UniqueConstraint("user_id", "number", name="uq_quote_tenant_number"),)


class CustomerQuoteItem(Base):
    __tablename__ = "quote_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quote_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("products.id"), nullable=True, index=True
    )
    service_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("services.id"), nullable=True, index=True
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False
    )
    total_price: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False
    )

    # Relationships
    quote: Mapped["CustomerQuote"] = relationship("CustomerQuote", back_populates="items")
