import datetime
from pydantic import Field
from app.schemas.common import EMAIL_PATTERN, AddressFields, AddressResponseFields, ResponseModel


class CustomerCreate(AddressFields):
    """Schema for creating a customer"""

    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    phone: str | None = Field(None, max_length=50)
    document: str | None = Field(None, max_length=50)


class CustomerUpdate(AddressFields):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    phone: str | None = Field(None, max_length=50)
    document: str | None = Field(None, max_length=50)


class CustomerResponse(AddressResponseFields):
    id: int
    name: str
    email: str | None
    phone: str | None
    document: str | None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class CustomerListResponse(ResponseModel):
    items: list[CustomerResponse]
    total: int


class CustomerStats(ResponseModel):
    total_purchases: int
    total_spent: float
    scheduled_revenue: float
    last_purchase: datetime.date | None
    average_ticket: float


class CustomerSaleSummary(ResponseModel):
    id: int
    date: datetime.date
    total_amount: float
    payment_method: str | None


class CustomerDetailsResponse(ResponseModel):
    """Customer with purchase history and derived stats"""

    customer: CustomerResponse
    sales: list[CustomerSaleSummary]
    stats: CustomerStats
