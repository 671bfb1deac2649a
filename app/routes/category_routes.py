from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.invalidation import ViewInvalidator
from app.database import get_db
from app.dependencies import get_view_invalidator, require_tenant_context
from app.models.category import CategoryType
from app.models.tenant_context import TenantContext
from app.schemas.category_schemas import (
    CategoryCreate,
    CategoryListResponse,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
)
from app.schemas.common import SuccessResponse
from app.services.category_service import CategoryService

router = APIRouter()


@router.get("", response_model=CategoryListResponse)
def list_categories(
    category_type: Optional[CategoryType] = Query(None, alias="type", description="income or expense"),
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    """List the tenant's chart of accounts ordered by code"""
    categories = CategoryService(db).list_categories(context, category_type)
    return CategoryListResponse(items=categories, total=len(categories))


@router.get("/tree", response_model=list[CategoryTreeNode])
def get_category_tree(
    category_type: Optional[CategoryType] = Query(None, alias="type"),
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return CategoryService(db).get_tree(context, category_type)


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Create a category.

    - Codes are unique inside the tenant
    - A parent must have the same type; level is derived from it
    """
    return CategoryService(db, invalidator).create_category(category_data, context)


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: int,
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
):
    return CategoryService(db).get_category(category_id, context)


@router.patch("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_update: CategoryUpdate,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """System categories only accept name and color changes"""
    return CategoryService(db, invalidator).update_category(category_id, category_update, context)


@router.delete("/{category_id}", response_model=SuccessResponse)
def delete_category(
    category_id: int,
    context: TenantContext = Depends(require_tenant_context),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
    db: Session = Depends(get_db),
):
    """
    Delete a user-defined category.

    Returns 409 while subcategories or transactions still reference it.
    """
    CategoryService(db, invalidator).delete_category(category_id, context)
    return SuccessResponse()
