import datetime
from pydantic import Field, model_validator
from app.models.sale import SaleItemType, SaleStatus, ShippingStatus
from app.schemas.common import Money, RequestModel, ResponseModel


class SaleItemInput(RequestModel):
    """
    One line of a sale.

    unit_price defaults to the catalog price when omitted; the line total is
    always computed server-side.
    """

    item_type: SaleItemType
    product_id: int | None = Field(None, gt=0)
    service_id: int | None = Field(None, gt=0)
    quantity: int = Field(..., gt=0)
    unit_price: Money | None = Field(None, ge=0)

    @model_validator(mode="after")
    def check_reference(self):
        if self.item_type == SaleItemType.PRODUCT and self.product_id is None:
            raise ValueError("product_id is required for product items")
        if self.item_type == SaleItemType.SERVICE and self.service_id is None:
            raise ValueError("service_id is required for service items")
        return self


class SaleCreate(RequestModel):
    """Schema for a point-of-sale sale"""

    customer_id: int | None = Field(None, gt=0)
    carrier_id: int | None = Field(None, gt=0)
    shipping_cost: Money | None = Field(None, ge=0)
    shipping_status: ShippingStatus | None = None
    payment_method: str | None = Field(None, max_length=50)
    date: datetime.date | None = None
    items: list[SaleItemInput] = Field(..., min_length=1, max_length=200)


class SaleItemResponse(ResponseModel):
    id: int
    item_type: SaleItemType
    product_id: int | None
    service_id: int | None
    description: str | None
    quantity: int
    unit_price: float
    total_price: float


class SaleResponse(ResponseModel):
    id: int
    customer_id: int | None
    carrier_id: int | None
    shipping_cost: float | None
    shipping_status: ShippingStatus | None
    total_amount: float
    date: datetime.date
    status: SaleStatus
    payment_method: str | None
    external_order_id: str | None
    items: list[SaleItemResponse]
    created_at: datetime.datetime


class SaleListResponse(ResponseModel):
    items: list[SaleResponse]
    total: int
