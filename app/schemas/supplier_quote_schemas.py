import datetime
from pydantic import Field
from app.models.supplier_quote import QuoteStatus
from app.schemas.common import Money, RequestModel, ResponseModel


class QuoteItemInput(RequestModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: float = Field(..., gt=0)
    unit_price: Money = Field(..., ge=0)


class SupplierQuoteCreate(RequestModel):
    """
    Schema for creating a supplier quote.

    Totals are computed server-side from items; the payload cannot carry them.
    """

    supplier_id: int = Field(..., gt=0)
    description: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=5000)
    valid_until: datetime.date | None = None
    status: QuoteStatus = QuoteStatus.PENDING
    items: list[QuoteItemInput] = Field(..., min_length=1, max_length=200)


class SupplierQuoteUpdate(RequestModel):
    """When items is given the whole item set is replaced"""

    description: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=5000)
    valid_until: datetime.date | None = None
    status: QuoteStatus | None = None
    items: list[QuoteItemInput] | None = Field(None, min_length=1, max_length=200)


class SupplierQuoteStatusUpdate(RequestModel):
    status: QuoteStatus


class QuoteItemResponse(ResponseModel):
    id: int
    description: str
    quantity: float
    unit_price: float
    total_price: float


class SupplierQuoteResponse(ResponseModel):
    id: int
    supplier_id: int
    description: str | None
    notes: str | None
    valid_until: datetime.date | None
    status: QuoteStatus
    total_amount: float
    items: list[QuoteItemResponse]
    created_at: datetime.datetime
    updated_at: datetime.datetime


class SupplierQuoteListResponse(ResponseModel):
    items: list[SupplierQuoteResponse]
    total: int
