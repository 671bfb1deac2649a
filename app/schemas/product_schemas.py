from datetime import datetime
from pydantic import Field
from app.schemas.common import Money, RequestModel, ResponseModel


class ProductCreate(RequestModel):
    """Schema for creating a product"""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    price: Money = Field(default=0.00, ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    manage_stock: bool = True
    ncm: str | None = Field(None, max_length=20)
    sku: str | None = Field(None, max_length=100)


class ProductUpdate(RequestModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    price: Money | None = Field(None, ge=0)
    stock_quantity: int | None = Field(None, ge=0)
    manage_stock: bool | None = None
    ncm: str | None = Field(None, max_length=20)
    sku: str | None = Field(None, max_length=100)


class ProductResponse(ResponseModel):
    id: int
    name: str
    description: str | None
    price: float
    stock_quantity: int
    manage_stock: bool
    ncm: str | None
    sku: str | None
    average_cost: float
    created_at: datetime
    updated_at: datetime


class ProductListResponse(ResponseModel):
    items: list[ProductResponse]
    total: int
