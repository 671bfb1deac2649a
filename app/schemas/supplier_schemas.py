from datetime import datetime
from pydantic import Field
from app.schemas.common import EMAIL_PATTERN, AddressFields, AddressResponseFields, ResponseModel


class SupplierCreate(AddressFields):
    """Schema for creating a supplier or carrier"""

    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    phone: str | None = Field(None, max_length=50)
    document: str | None = Field(None, max_length=50)
    supplier_type: str | None = Field(None, max_length=50)


class SupplierUpdate(AddressFields):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    phone: str | None = Field(None, max_length=50)
    document: str | None = Field(None, max_length=50)
    supplier_type: str | None = Field(None, max_length=50)


class SupplierResponse(AddressResponseFields):
    id: int
    name: str
    email: str | None
    phone: str | None
    document: str | None
    supplier_type: str | None
    created_at: datetime
    updated_at: datetime


class SupplierListResponse(ResponseModel):
    items: list[SupplierResponse]
    total: int
