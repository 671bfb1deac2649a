"""Inbound Nuvemshop webhook payloads.

The store sends more than we read; unknown fields are ignored and prices
arrive as decimal strings.
"""

import datetime
from pydantic import BaseModel, Field, field_validator


class NuvemshopModel(BaseModel):
    model_config = {"extra": "ignore"}


class NuvemshopAddress(NuvemshopModel):
    address: str | None = None
    number: str | None = None
    floor: str | None = None
    apartment: str | None = None
    locality: str | None = None
    city: str | None = None
    province: str | None = None
    zipcode: str | None = Field(None, alias="zip")
    phone: str | None = None


class NuvemshopCustomer(NuvemshopModel):
    id: int | str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    billing_address: NuvemshopAddress | None = None
    default_address: NuvemshopAddress | None = None

    @property
    def address(self) -> NuvemshopAddress | None:
        return self.billing_address or self.default_address


class NuvemshopLineItem(NuvemshopModel):
    product_id: int | str | None = None
    name: str = ""
    quantity: int = Field(1, ge=0)
    price: float = Field(0, ge=0)
    sku: str | None = None


class NuvemshopShipping(NuvemshopModel):
    cost: float | None = Field(None, ge=0)


class NuvemshopOrder(NuvemshopModel):
    """Order body of order/* events (everything except event and store_id)"""

    id: int | str
    number: int | str | None = None
    payment_status: str | None = None
    gateway: str | None = None
    total: float | None = None
    shipping: NuvemshopShipping | None = None
    products: list[NuvemshopLineItem] = Field(default_factory=list)
    customer: NuvemshopCustomer | None = None
    shipping_address: NuvemshopAddress | None = None
    shipping_tracking_number: str | None = None
    created_at: datetime.datetime | None = None

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, value):
        # "2024-05-01T12:30:00+0000" and friends; unparseable dates fall back to today
        if isinstance(value, str):
            try:
                return datetime.datetime.fromisoformat(value)
            except ValueError:
                return None
        return value

    @property
    def external_id(self) -> str:
        return str(self.id)

    @property
    def reference(self) -> str | None:
        return str(self.number) if self.number is not None else None

    @property
    def shipping_cost(self) -> float | None:
        return self.shipping.cost if self.shipping else None

    @property
    def is_paid(self) -> bool:
        return (self.payment_status or "").lower() in ("paid", "authorized")
