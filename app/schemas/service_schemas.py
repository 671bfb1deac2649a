from datetime import datetime
from pydantic import Field
from app.schemas.common import Money, RequestModel, ResponseModel


class ServiceCreate(RequestModel):
    """Schema for creating a catalog service"""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    price: Money = Field(default=0.00, ge=0)
    duration: int | None = Field(None, gt=0, description="Duration in minutes")
    category: str | None = Field(None, max_length=100)
    active: bool = True


class ServiceUpdate(RequestModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    price: Money | None = Field(None, ge=0)
    duration: int | None = Field(None, gt=0)
    category: str | None = Field(None, max_length=100)
    active: bool | None = None


class ServiceResponse(ResponseModel):
    id: int
    name: str
    description: str | None
    price: float
    duration: int | None
    category: str | None
    active: bool
    created_at: datetime
    updated_at: datetime


class ServiceListResponse(ResponseModel):
    items: list[ServiceResponse]
    total: int
