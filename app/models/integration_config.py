import datetime
from sqlalchemy import String, Integer, Boolean, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TenantOwnedMixin


class IntegrationConfig(Base, TenantOwnedMixin):
    """
    Marketplace (Nuvemshop) connection settings, one per tenant.

    Written by the tenant (upsert keyed on user_id) and read by the webhook
    ingress through a reverse lookup on store_id.
    """

    __tablename__ = "integration_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[str] = mapped_column(String(100), nullable=False)
    access_token: Mapped[str] = mapped_column(String(500), nullable=False)
    sync_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_sync_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # A store routes webhooks to exactly one tenant
    __table_args__ = (
        UniqueConstraint("user_id", name="uq_integration_config_tenant"),
        UniqueConstraint("store_id", name="uq_integration_config_store"),
    )
