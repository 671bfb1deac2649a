import datetime
from pydantic import Field
from app.models.shipment import ShipmentStatus
from app.schemas.common import Money, RequestModel, ResponseModel


class ShipmentCreate(RequestModel):
    """Create a shipment for an existing sale"""

    sale_id: int = Field(..., gt=0)


class ShipmentStatusUpdate(RequestModel):
    status: ShipmentStatus


class ShipmentDetailsUpdate(RequestModel):
    tracking_code: str | None = Field(None, max_length=100)
    carrier_id: int | None = Field(None, gt=0)
    shipping_method: str | None = Field(None, max_length=100)
    shipping_cost: Money | None = Field(None, ge=0)
    weight: float | None = Field(None, ge=0)
    notes: str | None = Field(None, max_length=5000)


class ShipmentResponse(ResponseModel):
    id: int
    sale_id: int
    carrier_id: int | None
    status: ShipmentStatus
    tracking_code: str | None
    shipping_method: str | None
    shipping_cost: float | None
    weight: float | None
    notes: str | None
    picked_at: datetime.datetime | None
    packed_at: datetime.datetime | None
    labeled_at: datetime.datetime | None
    posted_at: datetime.datetime | None
    delivered_at: datetime.datetime | None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class ShipmentListResponse(ResponseModel):
    items: list[ShipmentResponse]
    total: int
