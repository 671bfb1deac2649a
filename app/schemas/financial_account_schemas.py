from datetime import datetime
from pydantic import Field
from app.schemas.common import Money, RequestModel, ResponseModel


class FinancialAccountCreate(RequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=50, description="e.g. checking, savings, cash")
    balance: Money = 0.00
    is_default: bool = False


class FinancialAccountUpdate(RequestModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    type: str | None = Field(None, min_length=1, max_length=50)
    balance: Money | None = None
    is_default: bool | None = None
    active: bool | None = None


class FinancialAccountResponse(ResponseModel):
    id: int
    name: str
    type: str
    balance: float
    is_default: bool
    active: bool
    created_at: datetime
    updated_at: datetime


class FinancialAccountListResponse(ResponseModel):
    items: list[FinancialAccountResponse]
    total: int
