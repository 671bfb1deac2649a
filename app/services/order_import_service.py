import logging
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from app.core.invalidation import ViewInvalidator, Views
from app.models.base import utcnow
from app.models.customer import Customer
from app.models.integration_config import IntegrationConfig
from app.models.sale import Sale, SaleItem, SaleItemType, ShippingStatus
from app.models.shipment import ShipmentOrder, ShipmentStatus
from app.models.transaction import Transaction, TransactionStatus, TransactionType
from app.repositories.customer_repository import CustomerRepository
from app.repositories.product_repository import ProductRepository
from app.repositories.sale_repository import SaleRepository
from app.repositories.shipment_repository import ShipmentRepository
from app.repositories.transaction_repository import TransactionRepository
from app.schemas.nuvemshop_schemas import NuvemshopCustomer, NuvemshopLineItem, NuvemshopOrder
from app.services.helpers import money
from app.services.sale_service import SALES_CATEGORY, SaleService

logger = logging.getLogger(__name__)

IMPORT_VIEWS = (Views.SALES, Views.TRANSACTIONS, Views.FINANCE, Views.PRODUCTS, Views.LOGISTICS)

# Gateway name fragments, checked in order
PAYMENT_METHODS = (
    ("pix", "pix"),
    ("boleto", "boleto"),
    ("credit", "credit_card"),
    ("credito", "credit_card"),
    ("debit", "debit_card"),
    ("debito", "debit_card"),
    ("cash", "cash"),
    ("dinheiro", "cash"),
)


def map_payment_method(gateway: Optional[str]) -> str:
    if gateway:
        lowered = gateway.lower()
        for fragment, method in PAYMENT_METHODS:
            if fragment in lowered:
                return method
    return "other"


class OrderImportService:
    """
    Turns a marketplace order into a sale of the tenant that owns the store.

    Imports are keyed on the store's order id, so a redelivered
    order/created event does not create a second sale.
    """

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.sale_repo = SaleRepository(db)
        self.customer_repo = CustomerRepository(db)
        self.product_repo = ProductRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.shipment_repo = ShipmentRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def import_order(self, config: IntegrationConfig, order: NuvemshopOrder) -> dict:
        """
        Import an order for the tenant of the integration config.

        Creates (in one commit) the customer when unknown, the sale with its
        items, the stock decrements, the receivable and a pending shipment
        when the order ships.

        Returns:
            {"success": True, "sale_id": ...} or {"success": True, "skipped": True}
        """
        tenant_id = config.user_id

        existing = self.sale_repo.get_by_external_order_id(tenant_id, order.external_id)
        if existing is not None:
            logger.info(
                "Order already imported",
                extra={"tenant_id": tenant_id, "order_id": order.external_id, "sale_id": existing.id},
            )
            return {"success": True, "skipped": True, "sale_id": existing.id}

        customer = self._find_or_create_customer(tenant_id, order.customer)
        customer_id = customer.id if customer else None

        items = []
        items_total = 0.0
        for line in order.products:
            item = self._build_item(tenant_id, line)
            items_total += item.total_price
            items.append(item)

        shipping_cost = order.shipping_cost
        total = money(items_total + (shipping_cost or 0))
        sale_date = order.created_at.date() if order.created_at else date.today()
        paid = order.is_paid

        sales_category = SaleService(self.db).ensure_category(tenant_id, SALES_CATEGORY, None)
        sale = self.sale_repo.add_no_commit(
            Sale(
                user_id=tenant_id,
                customer_id=customer_id,
                shipping_cost=shipping_cost,
                shipping_status=ShippingStatus.PAID if paid else ShippingStatus.PENDING,
                total_amount=total,
                date=sale_date,
                payment_method=map_payment_method(order.gateway),
                external_order_id=order.external_id,
                items=items,
            )
        )

        self.transaction_repo.add_no_commit(
            Transaction(
                user_id=tenant_id,
                description=f"Nuvemshop order #{order.reference or order.external_id}",
                amount=total,
                type=TransactionType.INCOME,
                status=TransactionStatus.PAID if paid else TransactionStatus.PENDING,
                date=sale_date,
                paid_at=utcnow() if paid else None,
                competence_date=sale_date,
                customer_id=customer_id,
                sale_id=sale.id,
                category_id=sales_category.id,
                external_order_id=order.external_id,
            )
        )

        if shipping_cost or order.shipping_address is not None:
            self.shipment_repo.add_no_commit(
                ShipmentOrder(
                    user_id=tenant_id,
                    sale_id=sale.id,
                    shipping_cost=shipping_cost,
                    status=ShipmentStatus.PENDING,
                )
            )

        config.last_sync_at = utcnow()
        self.sale_repo.commit()

        logger.info(
            "Order imported",
            extra={"tenant_id": tenant_id, "order_id": order.external_id, "sale_id": sale.id, "total": total},
        )
        self.invalidator.invalidate(*IMPORT_VIEWS)
        return {"success": True, "sale_id": sale.id}

    def _find_or_create_customer(self, tenant_id: int, data: Optional[NuvemshopCustomer]) -> Optional[Customer]:
        if data is None or not data.email:
            return None

        customer = self.customer_repo.get_by_email(tenant_id, data.email)
        if customer is not None:
            return customer

        address = data.address
        complement = None
        if address is not None:
            complement = f"Floor {address.floor}" if address.floor else address.apartment

        return self.customer_repo.add_no_commit(
            Customer(
                user_id=tenant_id,
                name=data.name or f"Nuvemshop customer #{data.id}",
                email=data.email.strip().lower(),
                phone=data.phone or (address.phone if address else None),
                address=address.address if address else None,
                number=address.number if address else None,
                complement=complement,
                neighborhood=address.locality if address else None,
                city=address.city if address else None,
                state=address.province if address else None,
                zip_code=address.zipcode if address else None,
            )
        )

    def _build_item(self, tenant_id: int, line: NuvemshopLineItem) -> SaleItem:
        """Match the line to a catalog product by SKU, then by name; unmatched lines keep only the name"""
        product = self.product_repo.get_by_sku(tenant_id, line.sku) if line.sku else None
        if product is None and line.name:
            product = self.product_repo.get_by_name(tenant_id, line.name)

        # The store already sold it; stock is floored at zero rather than rejecting the order
        if product is not None and product.manage_stock:
            product.stock_quantity = max(product.stock_quantity - line.quantity, 0)

        return SaleItem(
            item_type=SaleItemType.PRODUCT,
            product_id=product.id if product else None,
            description=line.name or (product.name if product else None),
            quantity=line.quantity,
            unit_price=money(line.price),
            total_price=money(line.quantity * line.price),
        )
