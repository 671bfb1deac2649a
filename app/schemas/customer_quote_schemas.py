import datetime
from pydantic import Field, model_validator
from app.models.customer_quote import CustomerQuoteStatus
from app.schemas.common import EMAIL_PATTERN, Money, RequestModel, ResponseModel


class CustomerQuoteItemInput(RequestModel):
    """Free-text line, optionally tied to a catalog product or service"""

    description: str = Field(..., min_length=1, max_length=500)
    quantity: int = Field(..., gt=0)
    unit_price: Money = Field(..., ge=0)
    product_id: int | None = Field(None, gt=0)
    service_id: int | None = Field(None, gt=0)

    @model_validator(mode="after")
    def check_reference(self):
        if self.product_id is not None and self.service_id is not None:
            raise ValueError("An item references a product or a service, not both")
        return self


class CustomerQuoteCreate(RequestModel):
    """
    Schema for issuing a quote to a client.

    The number and totals are assigned server-side. Recurring quotes with
    more than one installment are billed monthly on approval.
    """

    client_name: str = Field(..., min_length=1, max_length=255)
    client_email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    client_phone: str | None = Field(None, max_length=50)
    notes: str | None = Field(None, max_length=5000)
    valid_until: datetime.date | None = None
    discount: Money = Field(default=0.00, ge=0)
    is_recurring: bool = False
    installments: int | None = Field(None, ge=1, le=120)
    payment_method: str | None = Field(None, max_length=50)
    status: CustomerQuoteStatus = CustomerQuoteStatus.DRAFT
    items: list[CustomerQuoteItemInput] = Field(..., min_length=1, max_length=200)

    @model_validator(mode="after")
    def check_status(self):
        if self.status not in (CustomerQuoteStatus.DRAFT, CustomerQuoteStatus.SENT):
            raise ValueError("A new quote is either draft or sent")
        return self


class CustomerQuoteStatusUpdate(RequestModel):
    status: CustomerQuoteStatus


class CustomerQuoteItemResponse(ResponseModel):
    id: int
    description: str
    quantity: int
    unit_price: float
    total_price: float
    product_id: int | None
    service_id: int | None


class CustomerQuoteResponse(ResponseModel):
    id: int
    number: int
    client_name: str
    client_email: str | None
    client_phone: str | None
    customer_id: int | None
    notes: str | None
    valid_until: datetime.date | None
    status: CustomerQuoteStatus
    discount: float
    total_amount: float
    is_recurring: bool
    installments: int | None
    payment_method: str | None
    items: list[CustomerQuoteItemResponse]
    created_at: datetime.datetime
    updated_at: datetime.datetime


class CustomerQuoteListResponse(ResponseModel):
    items: list[CustomerQuoteResponse]
    total: int


class NextQuoteNumberResponse(ResponseModel):
    number: int
