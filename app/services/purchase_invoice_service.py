import logging
from collections import defaultdict
from datetime import timedelta
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException
from app.core.invalidation import ViewInvalidator, Views
from app.models.category import Category, CategoryType
from app.models.product import Product
from app.models.purchase_invoice import PurchaseInvoice, StockEntry
from app.models.tenant_context import TenantContext
from app.models.transaction import Transaction, TransactionStatus, TransactionType
from app.repositories.category_repository import CategoryRepository
from app.repositories.product_repository import ProductRepository
from app.repositories.purchase_invoice_repository import PurchaseInvoiceRepository, StockEntryRepository
from app.repositories.supplier_repository import SupplierRepository
from app.repositories.transaction_repository import TransactionRepository
from app.schemas.purchase_invoice_schemas import PurchaseInvoiceCreate, PurchaseItemInput
from app.services.helpers import money

logger = logging.getLogger(__name__)

INVOICE_VIEWS = (Views.STOCK_ENTRIES, Views.PRODUCTS, Views.FINANCE, Views.TRANSACTIONS, Views.PAYABLES)

COGS_CODE = "2.1"
COGS_CATEGORY = ("Cost of goods sold", CategoryType.EXPENSE, "#fbbf24")
PAYMENT_TERM_DAYS = 30


def allocate_costs(
    items: list[PurchaseItemInput], freight_cost: float, tax_percent: float, other_costs: float
) -> list[tuple[float, float]]:
    """
    Spread freight and other costs over the items by their share of the
    subtotal, then apply the tax.

    Returns:
        (unit_cost, total_item_cost) per item, both rounded to cents
    """
    subtotal = sum(item.quantity * item.raw_unit_cost for item in items)
    allocated = []
    for item in items:
        item_subtotal = item.quantity * item.raw_unit_cost
        proportion = item_subtotal / subtotal if subtotal > 0 else 0
        total_item_cost = (item_subtotal + (freight_cost + other_costs) * proportion) * (1 + tax_percent)
        allocated.append((money(total_item_cost / item.quantity), money(total_item_cost)))
    return allocated


def invoice_label(invoice: PurchaseInvoice) -> str:
    if invoice.invoice_number:
        return f"Invoice {invoice.invoice_number}"
    return f"Entry #{invoice.id:06d}"


class PurchaseInvoiceService:
    """
    Service layer for goods received from suppliers.

    Recording an invoice creates any new products, the stock entries,
    the stock increase and new average cost of each product, and a
    pending payable due 30 days after entry, all in one commit.
    """

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.invoice_repo = PurchaseInvoiceRepository(db)
        self.stock_entry_repo = StockEntryRepository(db)
        self.product_repo = ProductRepository(db)
        self.supplier_repo = SupplierRepository(db)
        self.category_repo = CategoryRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def list_invoices(
        self,
        context: TenantContext,
        supplier_id: Optional[int] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[PurchaseInvoice], int]:
        return self.invoice_repo.get_filtered(context.require_tenant(), supplier_id, search, page, page_size)

    def get_invoice(self, invoice_id: int, context: TenantContext) -> PurchaseInvoice:
        invoice = self.invoice_repo.get(invoice_id, context.require_tenant())
        if not invoice:
            raise NotFoundException(f"Purchase invoice {invoice_id} not found")
        return invoice

    def _cogs_category(self, tenant_id: int, created_by_id: Optional[int]) -> Category:
        category = self.category_repo.get_by_code(tenant_id, COGS_CODE)
        category_name, category_type, color = COGS_CATEGORY
        if category is None:
            category = self.category_repo.get_by_name(tenant_id, category_name, category_type)
        if category is None:
            category = self.category_repo.add_no_commit(
                Category(
                    user_id=tenant_id,
                    created_by_id=created_by_id,
                    name=category_name,
                    type=category_type,
                    code=COGS_CODE,
                    color=color,
                    level=0,
                    is_system=False,
                )
            )
        return category

    def create_invoice(self, data: PurchaseInvoiceCreate, context: TenantContext) -> PurchaseInvoice:
        """
        Record received goods.

        Raises:
            NotFoundException: If the supplier or an existing product is not in the tenant
        """
        tenant_id = context.require_tenant()
        if data.supplier_id is not None and not self.supplier_repo.exists(data.supplier_id, tenant_id):
            raise NotFoundException(f"Supplier {data.supplier_id} not found")

        products = self.product_repo.get_many(
            tenant_id, {item.product_id for item in data.items if item.product_id is not None}
        )
        for item in data.items:
            if item.product_id is not None and item.product_id not in products:
                raise NotFoundException(f"Product {item.product_id} not found")

        allocated = allocate_costs(data.items, data.freight_cost, data.tax_percent, data.other_costs)

        entries = []
        received: dict[int, int] = defaultdict(int)
        for item, (unit_cost, _) in zip(data.items, allocated):
            product = products.get(item.product_id) if item.product_id is not None else None
            if product is None:
                product = self.product_repo.add_no_commit(
                    Product(
                        user_id=tenant_id,
                        created_by_id=context.user_id,
                        name=item.new_product.name,
                        sku=item.new_product.sku,
                        ncm=item.new_product.ncm,
                        price=0.0,
                        stock_quantity=0,
                        manage_stock=True,
                    )
                )
                products[product.id] = product
                logger.info("Product created from stock entry", extra={"tenant_id": tenant_id, "product_id": product.id})

            received[product.id] += item.quantity
            entries.append(
                StockEntry(
                    user_id=tenant_id,
                    created_by_id=context.user_id,
                    product_id=product.id,
                    quantity=item.quantity,
                    raw_unit_cost=item.raw_unit_cost,
                    unit_cost=unit_cost,
                )
            )

        total_cost = money(sum(item_total for _, item_total in allocated))
        invoice = self.invoice_repo.add_no_commit(
            PurchaseInvoice(
                user_id=tenant_id,
                created_by_id=context.user_id,
                invoice_number=data.invoice_number,
                invoice_key=data.invoice_key,
                supplier_id=data.supplier_id,
                entry_date=data.entry_date,
                subtotal=money(sum(item.quantity * item.raw_unit_cost for item in data.items)),
                freight_cost=data.freight_cost,
                tax_percent=data.tax_percent,
                other_costs=data.other_costs,
                total_cost=total_cost,
                notes=data.notes,
                items=entries,
            )
        )

        for product_id, quantity in received.items():
            product = products[product_id]
            if product.manage_stock:
                product.stock_quantity += quantity
            product.average_cost = self.stock_entry_repo.average_cost(tenant_id, product_id)

        self.transaction_repo.add_no_commit(
            Transaction(
                user_id=tenant_id,
                created_by_id=context.user_id,
                description=f"Goods purchase - {invoice_label(invoice)}",
                amount=total_cost,
                type=TransactionType.EXPENSE,
                status=TransactionStatus.PENDING,
                date=data.entry_date + timedelta(days=PAYMENT_TERM_DAYS),
                competence_date=data.entry_date,
                supplier_id=data.supplier_id,
                purchase_invoice_id=invoice.id,
                category_id=self._cogs_category(tenant_id, context.user_id).id,
            )
        )

        self.invoice_repo.commit()
        self.db.refresh(invoice)
        logger.info(
            "Purchase invoice recorded",
            extra={"tenant_id": tenant_id, "invoice_id": invoice.id, "total_cost": total_cost},
        )
        self.invalidator.invalidate(*INVOICE_VIEWS)
        return invoice

    def delete_invoice(self, invoice_id: int, context: TenantContext) -> None:
        """
        Delete an invoice with its stock entries and payables.

        Received quantities leave stock (never below zero) and the average
        cost is recomputed from the remaining entries.
        """
        invoice = self.get_invoice(invoice_id, context)
        tenant_id = context.require_tenant()

        received: dict[int, int] = defaultdict(int)
        for entry in invoice.items:
            received[entry.product_id] += entry.quantity

        products = self.product_repo.get_many(tenant_id, set(received))
        for product_id, product in products.items():
            if product.manage_stock:
                product.stock_quantity = max(product.stock_quantity - received[product_id], 0)
            product.average_cost = self.stock_entry_repo.average_cost(
                tenant_id, product_id, exclude_invoice_id=invoice.id
            )

        for transaction in self.transaction_repo.get_for_purchase_invoice(tenant_id, invoice.id):
            self.db.delete(transaction)

        self.invoice_repo.delete(invoice)
        self.invalidator.invalidate(*INVOICE_VIEWS)
