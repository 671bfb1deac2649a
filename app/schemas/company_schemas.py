from datetime import datetime
from pydantic import Field
from app.schemas.common import EMAIL_PATTERN, AddressFields, AddressResponseFields


class CompanySave(AddressFields):
    """Business profile; saving replaces the tenant's profile"""

    name: str = Field(..., min_length=1, max_length=255)
    trading_name: str | None = Field(None, max_length=255)
    document: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    phone: str | None = Field(None, max_length=50)
    mobile: str | None = Field(None, max_length=50)
    logo_url: str | None = Field(None, max_length=500)
    quote_notes: str | None = Field(None, max_length=5000)


class CompanyResponse(AddressResponseFields):
    id: int
    name: str
    trading_name: str | None
    document: str | None
    email: str | None
    phone: str | None
    mobile: str | None
    logo_url: str | None
    quote_notes: str | None
    updated_at: datetime
