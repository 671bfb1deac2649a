from sqlalchemy import String, Integer, Numeric, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TenantOwnedMixin


class FinancialAccount(Base, TenantOwnedMixin):
    """
    Bank account, cash box or wallet that transactions settle through.

    At most one account per tenant is the default.
    """

    __tablename__ = "financial_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    balance: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2, asdecimal=False), nullable=False, default=0.00
    )
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
