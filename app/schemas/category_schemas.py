from datetime import datetime
from pydantic import Field
from app.models.category import CategoryType
from app.schemas.common import RequestModel, ResponseModel


class CategoryCreate(RequestModel):
    """Schema for creating a category"""

    name: str = Field(..., min_length=1, max_length=255)
    type: CategoryType
    color: str | None = Field(None, max_length=20)
    code: str | None = Field(None, max_length=20)
    parent_id: int | None = Field(None, gt=0)


class CategoryUpdate(RequestModel):
    """Schema for updating a category. System categories accept name and color only."""

    name: str | None = Field(None, min_length=1, max_length=255)
    type: CategoryType | None = None
    color: str | None = Field(None, max_length=20)
    code: str | None = Field(None, max_length=20)
    parent_id: int | None = Field(None, gt=0)


class CategoryResponse(ResponseModel):
    id: int
    name: str
    type: CategoryType
    color: str | None
    code: str | None
    parent_id: int | None
    level: int
    is_system: bool
    created_at: datetime
    updated_at: datetime


class CategoryTreeNode(CategoryResponse):
    children: list["CategoryTreeNode"] = []


class CategoryListResponse(ResponseModel):
    items: list[CategoryResponse]
    total: int
