from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ReferentialConflictException
from app.core.invalidation import ViewInvalidator, Views
from app.models.customer import Customer
from app.models.tenant_context import TenantContext
from app.models.transaction import TransactionStatus, TransactionType
from app.repositories.customer_repository import CustomerRepository
from app.repositories.sale_repository import SaleRepository
from app.repositories.transaction_repository import TransactionRepository
from app.schemas.customer_schemas import (
    CustomerCreate,
    CustomerUpdate,
    CustomerDetailsResponse,
    CustomerResponse,
    CustomerSaleSummary,
    CustomerStats,
)
from app.services.helpers import apply_updates, money

# Purchase history shown on the customer page
HISTORY_LIMIT = 50


class CustomerService:
    """Service layer for customer (CRM) business logic"""

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.customer_repo = CustomerRepository(db)
        self.sale_repo = SaleRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def list_customers(
        self, context: TenantContext, search: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> tuple[list[Customer], int]:
        return self.customer_repo.get_page(context.require_tenant(), search, page, page_size)

    def get_customer(self, customer_id: int, context: TenantContext) -> Customer:
        customer = self.customer_repo.get(customer_id, context.require_tenant())
        if not customer:
            raise NotFoundException(f"Customer {customer_id} not found")
        return customer

    def get_customer_details(self, customer_id: int, context: TenantContext) -> CustomerDetailsResponse:
        """
        Customer with purchase history and stats.

        Stats cover all sales of the customer; scheduled revenue is the sum
        of the customer's pending income transactions.
        """
        customer = self.get_customer(customer_id, context)
        tenant_id = context.require_tenant()

        sales = self.sale_repo.get_for_customer(tenant_id, customer.id)
        pending, _ = self.transaction_repo.get_with_filters(
            tenant_id,
            transaction_type=TransactionType.INCOME,
            status=TransactionStatus.PENDING,
            customer_id=customer.id,
            page=1,
            page_size=1000,
        )

        total_spent = money(sum(sale.total_amount for sale in sales))
        stats = CustomerStats(
            total_purchases=len(sales),
            total_spent=total_spent,
            scheduled_revenue=money(sum(txn.amount for txn in pending)),
            last_purchase=sales[0].date if sales else None,
            average_ticket=money(total_spent / len(sales)) if sales else 0.0,
        )

        return CustomerDetailsResponse(
            customer=CustomerResponse.model_validate(customer),
            sales=[CustomerSaleSummary.model_validate(sale) for sale in sales[:HISTORY_LIMIT]],
            stats=stats,
        )

    def create_customer(self, data: CustomerCreate, context: TenantContext) -> Customer:
        customer = Customer(
            user_id=context.require_tenant(),
            created_by_id=context.user_id,
            **data.model_dump(),
        )
        customer = self.customer_repo.create(customer)
        self.invalidator.invalidate(Views.CUSTOMERS)
        return customer

    def update_customer(self, customer_id: int, data: CustomerUpdate, context: TenantContext) -> Customer:
        customer = self.get_customer(customer_id, context)
        apply_updates(customer, data, required=("name",))
        customer = self.customer_repo.update(customer)
        self.invalidator.invalidate(Views.CUSTOMERS, Views.detail(Views.CUSTOMERS, customer.id))
        return customer

    def delete_customer(self, customer_id: int, context: TenantContext) -> None:
        """
        Raises:
            ReferentialConflictException: If sales or transactions link to the customer
        """
        customer = self.get_customer(customer_id, context)
        tenant_id = context.require_tenant()

        sales = self.sale_repo.count_where(tenant_id, customer_id=customer.id)
        transactions = self.transaction_repo.count_where(tenant_id, customer_id=customer.id)
        if sales or transactions:
            raise ReferentialConflictException(
                f"Customer has {sales} sale(s) and {transactions} transaction(s) and cannot be deleted"
            )

        self.customer_repo.delete(customer)
        self.invalidator.invalidate(Views.CUSTOMERS)
