import logging
from collections import defaultdict
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ValidationException
from app.core.invalidation import ViewInvalidator, Views
from app.models.base import utcnow
from app.models.category import Category, CategoryType
from app.models.sale import Sale, SaleItem, SaleItemType, ShippingStatus
from app.models.tenant_context import TenantContext
from app.models.transaction import Transaction, TransactionStatus, TransactionType
from app.repositories.category_repository import CategoryRepository
from app.repositories.customer_repository import CustomerRepository
from app.repositories.product_repository import ProductRepository
from app.repositories.sale_repository import SaleRepository
from app.repositories.service_repository import ServiceRepository
from app.repositories.shipment_repository import ShipmentRepository
from app.repositories.supplier_repository import SupplierRepository
from app.repositories.transaction_repository import TransactionRepository
from app.schemas.sale_schemas import SaleCreate
from app.services.helpers import money

logger = logging.getLogger(__name__)

SALE_VIEWS = (Views.SALES, Views.TRANSACTIONS, Views.FINANCE, Views.PRODUCTS)

SALES_CATEGORY = ("Sales", CategoryType.INCOME, "#10b981")
FREIGHT_CATEGORY = ("Freight", CategoryType.EXPENSE, "#f59e0b")


def sale_reference(sale_id: int) -> str:
    return f"#{sale_id:06d}"


class SaleService:
    """
    Service layer for point-of-sale sales.

    A sale is recorded together with its items, the stock decrements, the
    income transaction and (when a carrier charges shipping) the freight
    expense, in a single commit.
    """

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.sale_repo = SaleRepository(db)
        self.product_repo = ProductRepository(db)
        self.service_repo = ServiceRepository(db)
        self.customer_repo = CustomerRepository(db)
        self.supplier_repo = SupplierRepository(db)
        self.category_repo = CategoryRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.shipment_repo = ShipmentRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def ensure_category(self, tenant_id: int, default: tuple[str, CategoryType, str], created_by_id: Optional[int]) -> Category:
        """Find a category by name and type, creating it (uncommitted) if missing"""
        category_name, category_type, color = default
        category = self.category_repo.get_by_name(tenant_id, category_name, category_type)
        if category is None:
            category = self.category_repo.add_no_commit(
                Category(
                    user_id=tenant_id,
                    created_by_id=created_by_id,
                    name=category_name,
                    type=category_type,
                    color=color,
                    level=0,
                    is_system=False,
                )
            )
        return category

    def create_sale(self, data: SaleCreate, context: TenantContext) -> Sale:
        """
        Record a sale.

        Raises:
            NotFoundException: If a customer, carrier, product or service is not in the tenant
            ValidationException: If a stock-managed product has insufficient stock
        """
        tenant_id = context.require_tenant()

        if data.customer_id is not None and not self.customer_repo.exists(data.customer_id, tenant_id):
            raise NotFoundException(f"Customer {data.customer_id} not found")
        if data.carrier_id is not None and not self.supplier_repo.exists(data.carrier_id, tenant_id):
            raise NotFoundException(f"Carrier {data.carrier_id} not found")

        products = self.product_repo.get_many(
            tenant_id, {item.product_id for item in data.items if item.item_type == SaleItemType.PRODUCT}
        )
        services = self.service_repo.get_many(
            tenant_id, {item.service_id for item in data.items if item.item_type == SaleItemType.SERVICE}
        )

        requested = defaultdict(int)
        items = []
        items_total = 0.0
        for item in data.items:
            if item.item_type == SaleItemType.PRODUCT:
                catalog = products.get(item.product_id)
                if catalog is None:
                    raise NotFoundException(f"Product {item.product_id} not found")
                requested[catalog.id] += item.quantity
            else:
                catalog = services.get(item.service_id)
                if catalog is None:
                    raise NotFoundException(f"Service {item.service_id} not found")

            unit_price = item.unit_price if item.unit_price is not None else catalog.price
            line_total = money(item.quantity * unit_price)
            items_total += line_total
            items.append(
                SaleItem(
                    item_type=item.item_type,
                    product_id=item.product_id if item.item_type == SaleItemType.PRODUCT else None,
                    service_id=item.service_id if item.item_type == SaleItemType.SERVICE else None,
                    description=catalog.name,
                    quantity=item.quantity,
                    unit_price=money(unit_price),
                    total_price=line_total,
                )
            )

        shortages = {
            f"product_{product_id}": f"Insufficient stock for {products[product_id].name}. Available: {products[product_id].stock_quantity}"
            for product_id, quantity in requested.items()
            if products[product_id].manage_stock and products[product_id].stock_quantity < quantity
        }
        if shortages:
            raise ValidationException("Insufficient stock", fields=shortages)

        shipping_cost = money(data.shipping_cost or 0)
        total = money(items_total + shipping_cost)
        sale_date = data.date or date.today()

        sales_category = self.ensure_category(tenant_id, SALES_CATEGORY, context.user_id)
        sale = self.sale_repo.add_no_commit(
            Sale(
                user_id=tenant_id,
                created_by_id=context.user_id,
                customer_id=data.customer_id,
                carrier_id=data.carrier_id,
                shipping_cost=data.shipping_cost,
                shipping_status=data.shipping_status,
                total_amount=total,
                date=sale_date,
                payment_method=data.payment_method,
                items=items,
            )
        )

        for product_id, quantity in requested.items():
            product = products[product_id]
            if product.manage_stock:
                product.stock_quantity -= quantity

        self.transaction_repo.add_no_commit(
            Transaction(
                user_id=tenant_id,
                created_by_id=context.user_id,
                description=f"Sale {sale_reference(sale.id)}",
                amount=total,
                type=TransactionType.INCOME,
                status=TransactionStatus.PAID,
                date=sale_date,
                paid_at=utcnow(),
                competence_date=sale_date,
                customer_id=data.customer_id,
                sale_id=sale.id,
                category_id=sales_category.id,
            )
        )

        if data.carrier_id is not None and shipping_cost > 0:
            freight_paid = data.shipping_status == ShippingStatus.PAID
            freight_category = self.ensure_category(tenant_id, FREIGHT_CATEGORY, context.user_id)
            self.transaction_repo.add_no_commit(
                Transaction(
                    user_id=tenant_id,
                    created_by_id=context.user_id,
                    description=f"Freight for sale {sale_reference(sale.id)}",
                    amount=shipping_cost,
                    type=TransactionType.EXPENSE,
                    status=TransactionStatus.PAID if freight_paid else TransactionStatus.PENDING,
                    date=sale_date,
                    paid_at=utcnow() if freight_paid else None,
                    competence_date=sale_date,
                    supplier_id=data.carrier_id,
                    sale_id=sale.id,
                    category_id=freight_category.id,
                )
            )

        self.sale_repo.commit()
        self.db.refresh(sale)
        logger.info("Sale recorded", extra={"tenant_id": tenant_id, "sale_id": sale.id, "total": total})
        self.invalidator.invalidate(*SALE_VIEWS)
        return sale

    def list_sales(
        self,
        context: TenantContext,
        customer_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Sale], int]:
        return self.sale_repo.get_filtered(
            context.require_tenant(), customer_id, start_date, end_date, search, page, page_size
        )

    def get_sale(self, sale_id: int, context: TenantContext) -> Sale:
        sale = self.sale_repo.get(sale_id, context.require_tenant())
        if not sale:
            raise NotFoundException(f"Sale {sale_id} not found")
        return sale

    def delete_sale(self, sale_id: int, context: TenantContext) -> None:
        """
        Delete a sale, restoring stock and removing its transactions and shipment.

        All of it is committed together.
        """
        sale = self.get_sale(sale_id, context)
        tenant_id = context.require_tenant()

        product_ids = {item.product_id for item in sale.items if item.product_id is not None}
        products = self.product_repo.get_many(tenant_id, product_ids)
        for item in sale.items:
            product = products.get(item.product_id)
            if product is not None and product.manage_stock:
                product.stock_quantity += item.quantity

        for transaction in self.transaction_repo.get_for_sale(tenant_id, sale.id):
            self.db.delete(transaction)

        shipment = self.shipment_repo.get_by_sale(tenant_id, sale.id)
        if shipment is not None:
            self.db.delete(shipment)

        self.sale_repo.delete(sale)
        self.invalidator.invalidate(*SALE_VIEWS, Views.LOGISTICS)
