from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

# One "@", a dotted domain, no whitespace
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def check_cents(value: float) -> float:
    if round(value, 2) != value:
        raise ValueError("Amount must be in whole cents")
    return value


# Money accepted from clients; stored columns hold two decimal places
Money = Annotated[float, AfterValidator(check_cents)]


class RequestModel(BaseModel):
    """Base for request payloads. Unknown fields are rejected."""

    model_config = {"extra": "forbid", "str_strip_whitespace": True}


class ResponseModel(BaseModel):
    model_config = {"from_attributes": True}


class SuccessResponse(BaseModel):
    success: bool = True


class AddressFields(RequestModel):
    zip_code: str | None = Field(None, max_length=20)
    address: str | None = Field(None, max_length=255)
    number: str | None = Field(None, max_length=20)
    complement: str | None = Field(None, max_length=255)
    neighborhood: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=255)
    state: str | None = Field(None, max_length=50)


class AddressResponseFields(ResponseModel):
    zip_code: str | None = None
    address: str | None = None
    number: str | None = None
    complement: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = None
