from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ReferentialConflictException
from app.core.invalidation import ViewInvalidator, Views
from app.models.product import Product
from app.models.tenant_context import TenantContext
from app.repositories.customer_quote_repository import CustomerQuoteRepository
from app.repositories.product_repository import ProductRepository
from app.repositories.purchase_invoice_repository import StockEntryRepository
from app.repositories.sale_repository import SaleRepository
from app.schemas.product_schemas import ProductCreate, ProductUpdate
from app.services.helpers import apply_updates


class ProductService:
    """Service layer for product (inventory) business logic"""

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.product_repo = ProductRepository(db)
        self.sale_repo = SaleRepository(db)
        self.quote_repo = CustomerQuoteRepository(db)
        self.stock_entry_repo = StockEntryRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def list_products(
        self, context: TenantContext, search: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> tuple[list[Product], int]:
        return self.product_repo.get_page(context.require_tenant(), search, page, page_size)

    def get_product(self, product_id: int, context: TenantContext) -> Product:
        product = self.product_repo.get(product_id, context.require_tenant())
        if not product:
            raise NotFoundException(f"Product {product_id} not found")
        return product

    def create_product(self, data: ProductCreate, context: TenantContext) -> Product:
        product = Product(
            user_id=context.require_tenant(),
            created_by_id=context.user_id,
            **data.model_dump(),
        )
        product = self.product_repo.create(product)
        self.invalidator.invalidate(Views.PRODUCTS)
        return product

    def update_product(self, product_id: int, data: ProductUpdate, context: TenantContext) -> Product:
        product = self.get_product(product_id, context)
        apply_updates(product, data, required=("name", "price", "stock_quantity", "manage_stock"))
        product = self.product_repo.update(product)
        self.invalidator.invalidate(Views.PRODUCTS, Views.detail(Views.PRODUCTS, product.id))
        return product

    def delete_product(self, product_id: int, context: TenantContext) -> None:
        """
        Raises:
            ReferentialConflictException: If the product appears on a sale, quote or stock entry
        """
        product = self.get_product(product_id, context)
        tenant_id = context.require_tenant()

        if self.sale_repo.count_items(tenant_id, product_id=product.id) > 0:
            raise ReferentialConflictException("Product appears on existing sales and cannot be deleted")
        if self.quote_repo.count_items(tenant_id, product_id=product.id) > 0:
            raise ReferentialConflictException("Product appears on existing quotes and cannot be deleted")
        if self.stock_entry_repo.count_for_product(tenant_id, product.id) > 0:
            raise ReferentialConflictException("Product has stock entries and cannot be deleted")

        self.product_repo.delete(product)
        self.invalidator.invalidate(Views.PRODUCTS)
