import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ReferentialConflictException, ValidationException
from app.core.invalidation import ViewInvalidator, Views
from app.models.category import Category, CategoryType
from app.models.tenant_context import TenantContext
from app.repositories.category_repository import CategoryRepository
from app.repositories.transaction_repository import TransactionRepository
from app.schemas.category_schemas import CategoryCreate, CategoryTreeNode, CategoryUpdate, CategoryResponse
from app.services.helpers import apply_updates

logger = logging.getLogger(__name__)

# Default chart of accounts seeded for every tenant
DEFAULT_CHART = [
    {
        "code": "1",
        "name": "Revenue",
        "type": CategoryType.INCOME,
        "color": "#10b981",
        "children": [
            ("1.1", "Product sales", "#34d399"),
            ("1.2", "Service revenue", "#6ee7b7"),
            ("1.3", "Freight charged to customers", "#a7f3d0"),
        ],
    },
    {
        "code": "2",
        "name": "Variable costs",
        "type": CategoryType.EXPENSE,
        "color": "#f59e0b",
        "children": [
            ("2.1", "Cost of goods sold", "#fbbf24"),
            ("2.2", "Sales taxes", "#fcd34d"),
            ("2.3", "Card and payment fees", "#fde68a"),
            ("2.4", "Freight and logistics", "#fef3c7"),
            ("2.5", "Packaging", "#fed7aa"),
        ],
    },
    {
        "code": "3",
        "name": "Fixed expenses",
        "type": CategoryType.EXPENSE,
        "color": "#ef4444",
        "children": [
            ("3.1", "Payroll", "#f87171"),
            ("3.2", "Rent and utilities", "#fca5a5"),
            ("3.3", "Marketing and software", "#fecaca"),
        ],
    },
]

# Fields a system category accepts on update
SYSTEM_EDITABLE_FIELDS = {"name", "color"}


class CategoryService:
    """Service layer for category (chart of accounts) business logic"""

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.category_repo = CategoryRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def list_categories(
        self, context: TenantContext, category_type: Optional[CategoryType] = None
    ) -> list[Category]:
        tenant_id = context.require_tenant()
        return self.category_repo.get_filtered(tenant_id, category_type)

    def get_tree(self, context: TenantContext, category_type: Optional[CategoryType] = None) -> list[CategoryTreeNode]:
        """Categories nested under their parents, roots ordered by code"""
        categories = self.list_categories(context, category_type)
        nodes = {
            category.id: CategoryTreeNode(**CategoryResponse.model_validate(category).model_dump())
            for category in categories
        }

        roots = []
        for category in categories:
            node = nodes[category.id]
            parent = nodes.get(category.parent_id) if category.parent_id else None
            if parent is not None:
                parent.children.append(node)
            else:
                roots.append(node)
        return roots

    def get_category(self, category_id: int, context: TenantContext) -> Category:
        tenant_id = context.require_tenant()
        category = self.category_repo.get(category_id, tenant_id)
        if not category:
            raise NotFoundException(f"Category {category_id} not found")
        return category

    def _resolve_parent(self, parent_id: int, tenant_id: int, category_type: CategoryType) -> Category:
        parent = self.category_repo.get(parent_id, tenant_id)
        if not parent:
            raise NotFoundException(f"Parent category {parent_id} not found")
        if parent.type != category_type:
            raise ValidationException(
                "Invalid fields", fields={"parent_id": "Parent category must have the same type"}
            )
        return parent

    def _check_code(self, tenant_id: int, code: Optional[str], exclude_id: Optional[int] = None) -> None:
        if not code:
            return
        existing = self.category_repo.get_by_code(tenant_id, code)
        if existing and existing.id != exclude_id:
            raise ValidationException("Invalid fields", fields={"code": "Code already in use"})

    def create_category(self, data: CategoryCreate, context: TenantContext) -> Category:
        """
        Create a category, deriving its level from the parent.

        Raises:
            NotFoundException: If the parent is not in the tenant
            ValidationException: If the code is taken or the parent type differs
        """
        tenant_id = context.require_tenant()
        self._check_code(tenant_id, data.code)

        level = 0
        if data.parent_id is not None:
            level = self._resolve_parent(data.parent_id, tenant_id, data.type).level + 1

        category = Category(
            user_id=tenant_id,
            created_by_id=context.user_id,
            name=data.name,
            type=data.type,
            color=data.color,
            code=data.code,
            parent_id=data.parent_id,
            level=level,
            is_system=False,
        )
        category = self.category_repo.create(category)
        self.invalidator.invalidate(Views.CATEGORIES, Views.TRANSACTIONS)
        return category

    def update_category(self, category_id: int, data: CategoryUpdate, context: TenantContext) -> Category:
        category = self.get_category(category_id, context)
        tenant_id = context.require_tenant()

        if category.is_system:
            locked = data.model_fields_set - SYSTEM_EDITABLE_FIELDS
            if locked:
                raise ValidationException(
                    "System categories can only be renamed or recolored",
                    fields={field: "Not editable on system categories" for field in sorted(locked)},
                )

        if "code" in data.model_fields_set:
            self._check_code(tenant_id, data.code, exclude_id=category.id)

        category_type = data.type or category.type
        if "parent_id" in data.model_fields_set:
            if data.parent_id is None:
                category.level = 0
            else:
                if data.parent_id == category.id:
                    raise ValidationException(
                        "Invalid fields", fields={"parent_id": "A category cannot be its own parent"}
                    )
                category.level = self._resolve_parent(data.parent_id, tenant_id, category_type).level + 1

        apply_updates(category, data, required=("name", "type"))
        category = self.category_repo.update(category)
        self.invalidator.invalidate(Views.CATEGORIES, Views.detail(Views.CATEGORIES, category.id))
        return category

    def delete_category(self, category_id: int, context: TenantContext) -> None:
        """
        Delete a user-defined category.

        Raises:
            ValidationException: For system categories
            ReferentialConflictException: If it has children or transactions
        """
        category = self.get_category(category_id, context)
        tenant_id = context.require_tenant()

        if category.is_system:
            raise ValidationException("System categories cannot be deleted")

        if self.category_repo.count_children(category.id, tenant_id) > 0:
            raise ReferentialConflictException("Category has subcategories. Move or delete them first.")

        linked = self.transaction_repo.count_where(tenant_id, category_id=category.id)
        if linked > 0:
            raise ReferentialConflictException(
                f"Category is used by {linked} transaction(s) and cannot be deleted"
            )

        self.category_repo.delete(category)
        self.invalidator.invalidate(Views.CATEGORIES)

    def ensure_system_categories(self, tenant_id: int, created_by_id: Optional[int] = None) -> int:
        """
        Seed the default chart of accounts for a tenant.

        Groups that already exist (matched by code) are skipped, so calling
        this repeatedly is safe.

        Returns:
            Number of categories created
        """
        created = 0
        for group in DEFAULT_CHART:
            parent = self.category_repo.get_by_code(tenant_id, group["code"])
            if parent is None:
                parent = self.category_repo.add_no_commit(
                    Category(
                        user_id=tenant_id,
                        created_by_id=created_by_id,
                        code=group["code"],
                        name=group["name"],
                        type=group["type"],
                        color=group["color"],
                        level=0,
                        is_system=True,
                    )
                )
                created += 1

            for code, name, color in group["children"]:
                if self.category_repo.get_by_code(tenant_id, code) is not None:
                    continue
                self.category_repo.add_no_commit(
                    Category(
                        user_id=tenant_id,
                        created_by_id=created_by_id,
                        code=code,
                        name=name,
                        type=group["type"],
                        color=color,
                        parent_id=parent.id,
                        level=1,
                        is_system=True,
                    )
                )
                created += 1

        if created:
            self.category_repo.commit()
            logger.info("Seeded chart of accounts", extra={"tenant_id": tenant_id, "categories_created": created})
            self.invalidator.invalidate(Views.CATEGORIES)
        return created
