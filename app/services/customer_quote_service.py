import logging
from collections import defaultdict
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ValidationException
from app.core.invalidation import ViewInvalidator, Views
from app.models.customer import Customer
from app.models.customer_quote import CustomerQuote, CustomerQuoteItem, CustomerQuoteStatus
from app.models.tenant_context import TenantContext
from app.models.transaction import Transaction, TransactionStatus, TransactionType
from app.repositories.customer_quote_repository import CustomerQuoteRepository
from app.repositories.customer_repository import CustomerRepository
from app.repositories.product_repository import ProductRepository
from app.repositories.service_repository import ServiceRepository
from app.repositories.transaction_repository import TransactionRepository
from app.schemas.customer_quote_schemas import CustomerQuoteCreate
from app.services.helpers import money
from app.services.transaction_service import add_months

logger = logging.getLogger(__name__)

QUOTE_VIEWS = (Views.QUOTES,)
APPROVAL_VIEWS = (Views.QUOTES, Views.FINANCE, Views.TRANSACTIONS, Views.RECEIVABLES, Views.CUSTOMERS, Views.PRODUCTS)


def quote_reference(number: int) -> str:
    return f"#{number:04d}"


class CustomerQuoteService:
    """
    Service layer for quotes issued to clients.

    Approving a quote takes its products out of stock, links (or creates)
    the customer and raises the receivables, all in one commit. The
    receivables are raised once per quote; approving again after a
    rejection does not duplicate them.
    """

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.quote_repo = CustomerQuoteRepository(db)
        self.customer_repo = CustomerRepository(db)
        self.product_repo = ProductRepository(db)
        self.service_repo = ServiceRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def next_number(self, context: TenantContext) -> int:
        return self.quote_repo.next_number(context.require_tenant())

    def list_quotes(
        self,
        context: TenantContext,
        status: Optional[CustomerQuoteStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
        today: Optional[date] = None,
    ) -> tuple[list[CustomerQuote], int]:
        """List quotes, newest first, after expiring the overdue ones"""
        tenant_id = context.require_tenant()
        expired = self.quote_repo.expire_overdue(tenant_id, today or date.today())
        if expired:
            self.quote_repo.commit()
            logger.info("Quotes expired", extra={"tenant_id": tenant_id, "count": expired})
        return self.quote_repo.get_filtered(tenant_id, status, search, page, page_size)

    def get_quote(self, quote_id: int, context: TenantContext) -> CustomerQuote:
        quote = self.quote_repo.get(quote_id, context.require_tenant())
        if not quote:
            raise NotFoundException(f"Quote {quote_id} not found")
        return quote

    def create_quote(self, data: CustomerQuoteCreate, context: TenantContext) -> CustomerQuote:
        """
        Issue a quote with the next number of the tenant.

        Raises:
            NotFoundException: If an item references a product or service outside the tenant
        """
        tenant_id = context.require_tenant()

        product_ids = {item.product_id for item in data.items if item.product_id is not None}
        service_ids = {item.service_id for item in data.items if item.service_id is not None}
        missing_products = product_ids - set(self.product_repo.get_many(tenant_id, product_ids))
        if missing_products:
            raise NotFoundException(f"Product {min(missing_products)} not found")
        missing_services = service_ids - set(self.service_repo.get_many(tenant_id, service_ids))
        if missing_services:
            raise NotFoundException(f"Service {min(missing_services)} not found")

        items = []
        items_total = 0.0
        for item in data.items:
            line_total = money(item.quantity * item.unit_price)
            items_total += line_total
            items.append(
                CustomerQuoteItem(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=line_total,
                    product_id=item.product_id,
                    service_id=item.service_id,
                )
            )

        quote = self.quote_repo.create(
            CustomerQuote(
                user_id=tenant_id,
                created_by_id=context.user_id,
                number=self.quote_repo.next_number(tenant_id),
                client_name=data.client_name,
                client_email=data.client_email,
                client_phone=data.client_phone,
                notes=data.notes,
                valid_until=data.valid_until,
                status=data.status,
                discount=money(data.discount),
                total_amount=max(money(items_total - data.discount), 0.0),
                is_recurring=data.is_recurring,
                installments=data.installments,
                payment_method=data.payment_method,
                items=items,
            )
        )
        logger.info("Quote issued", extra={"tenant_id": tenant_id, "quote_id": quote.id, "number": quote.number})
        self.invalidator.invalidate(*QUOTE_VIEWS)
        return quote

    def _quantities(self, quote: CustomerQuote) -> dict[int, int]:
        requested: dict[int, int] = defaultdict(int)
        for item in quote.items:
            if item.product_id is not None:
                requested[item.product_id] += item.quantity
        return requested

    def _move_stock(self, quote: CustomerQuote, direction: int) -> None:
        """Take (-1) or give back (+1) the quoted products; only stock-managed ones move"""
        requested = self._quantities(quote)
        products = self.product_repo.get_many(quote.user_id, set(requested))

        if direction < 0:
            shortages = {
                f"product_{product_id}": f"Insufficient stock for {product.name}. Available: {product.stock_quantity}"
                for product_id, product in products.items()
                if product.manage_stock and product.stock_quantity < requested[product_id]
            }
            if shortages:
                raise ValidationException("Insufficient stock", fields=shortages)

        for product_id, product in products.items():
            if product.manage_stock:
                product.stock_quantity += direction * requested[product_id]

    def _match_customer(self, quote: CustomerQuote, created_by_id: Optional[int]) -> Customer:
        """Find the client by phone, then email, then name; fill in missing contacts or create it"""
        tenant_id = quote.user_id
        customer = None
        if quote.client_phone:
            customer = self.customer_repo.get_by_phone(tenant_id, quote.client_phone)
        if customer is None and quote.client_email:
            customer = self.customer_repo.get_by_email(tenant_id, quote.client_email)
        if customer is None:
            customer = self.customer_repo.get_by_name(tenant_id, quote.client_name)

        if customer is None:
            return self.customer_repo.add_no_commit(
                Customer(
                    user_id=tenant_id,
                    created_by_id=created_by_id,
                    name=quote.client_name,
                    email=quote.client_email,
                    phone=quote.client_phone,
                )
            )

        if not customer.email and quote.client_email:
            customer.email = quote.client_email
        if not customer.phone and quote.client_phone:
            customer.phone = quote.client_phone
        return customer

    def _raise_receivables(self, quote: CustomerQuote, customer_id: int, created_by_id: Optional[int]) -> None:
        if self.transaction_repo.get_for_quote(quote.user_id, quote.id):
            return

        count = quote.installments if quote.is_recurring and quote.installments and quote.installments > 1 else 1
        amount = money(quote.total_amount / count)
        description = f"Quote {quote_reference(quote.number)} - {quote.client_name}"
        today = date.today()

        for index in range(count):
            due = add_months(today, index)
            self.transaction_repo.add_no_commit(
                Transaction(
                    user_id=quote.user_id,
                    created_by_id=created_by_id,
                    description=description if count == 1 else f"{description} ({index + 1}/{count})",
                    amount=amount,
                    type=TransactionType.INCOME,
                    status=TransactionStatus.PENDING,
                    date=due,
                    competence_date=due,
                    customer_id=customer_id,
                    quote_id=quote.id,
                    installment_number=index + 1 if count > 1 else None,
                    installment_total=count if count > 1 else None,
                )
            )

    def update_status(self, quote_id: int, status: CustomerQuoteStatus, context: TenantContext) -> CustomerQuote:
        """
        Move a quote to a new status.

        Raises:
            ValidationException: If approving takes more of a product than is in stock
        """
        quote = self.get_quote(quote_id, context)
        was_approved = quote.status == CustomerQuoteStatus.APPROVED
        approving = status == CustomerQuoteStatus.APPROVED and not was_approved

        if approving:
            self._move_stock(quote, -1)
            customer = self._match_customer(quote, context.user_id)
            quote.customer_id = customer.id
            self._raise_receivables(quote, customer.id, context.user_id)
        elif was_approved and status != CustomerQuoteStatus.APPROVED:
            self._move_stock(quote, 1)

        quote.status = status
        quote = self.quote_repo.update(quote)
        logger.info("Quote status changed", extra={"quote_id": quote.id, "status": status.value})
        self.invalidator.invalidate(*(APPROVAL_VIEWS if approving else QUOTE_VIEWS))
        return quote

    def delete_quote(self, quote_id: int, context: TenantContext) -> None:
        """
        Delete a quote. An approved quote gives its products back to stock.

        Receivables already raised are kept, unlinked from the quote.
        """
        quote = self.get_quote(quote_id, context)
        if quote.status == CustomerQuoteStatus.APPROVED:
            self._move_stock(quote, 1)

        for transaction in self.transaction_repo.get_for_quote(quote.user_id, quote.id):
            transaction.quote_id = None

        self.quote_repo.delete(quote)
        self.invalidator.invalidate(*QUOTE_VIEWS, Views.PRODUCTS)
