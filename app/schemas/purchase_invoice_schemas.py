import datetime
from pydantic import Field, model_validator
from app.models.transaction import TransactionStatus
from app.schemas.common import Money, RequestModel, ResponseModel


class NewProductInput(RequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    sku: str | None = Field(None, max_length=100)
    ncm: str | None = Field(None, max_length=20)


class PurchaseItemInput(RequestModel):
    """
    One received product: an existing catalog product or a new one.

    raw_unit_cost is the unit price printed on the invoice, before
    freight, other costs and tax are allocated.
    """

    product_id: int | None = Field(None, gt=0)
    new_product: NewProductInput | None = None
    quantity: int = Field(..., gt=0)
    raw_unit_cost: Money = Field(..., ge=0)

    @model_validator(mode="after")
    def check_product(self):
        if (self.product_id is None) == (self.new_product is None):
            raise ValueError("Give either product_id or new_product")
        return self


class PurchaseInvoiceCreate(RequestModel):
    invoice_number: str | None = Field(None, max_length=50)
    invoice_key: str | None = Field(None, max_length=60)
    supplier_id: int | None = Field(None, gt=0)
    entry_date: datetime.date
    freight_cost: Money = Field(default=0.00, ge=0)
    tax_percent: float = Field(default=0.0, ge=0, le=1, description="Fraction, 0.15 = 15%")
    other_costs: Money = Field(default=0.00, ge=0)
    notes: str | None = Field(None, max_length=5000)
    items: list[PurchaseItemInput] = Field(..., min_length=1, max_length=500)


class StockEntryResponse(ResponseModel):
    id: int
    product_id: int
    quantity: int
    raw_unit_cost: float
    unit_cost: float


class PurchaseInvoiceResponse(ResponseModel):
    id: int
    invoice_number: str | None
    invoice_key: str | None
    supplier_id: int | None
    entry_date: datetime.date
    subtotal: float
    freight_cost: float
    tax_percent: float
    other_costs: float
    total_cost: float
    notes: str | None
    payment_status: TransactionStatus
    items: list[StockEntryResponse]
    created_at: datetime.datetime
    updated_at: datetime.datetime


class PurchaseInvoiceListResponse(ResponseModel):
    items: list[PurchaseInvoiceResponse]
    total: int
