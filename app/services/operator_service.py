import logging
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, UnauthorizedException
from app.core.invalidation import ViewInvalidator, Views
from app.models.category import Category
from app.models.company import Company
from app.models.customer import Customer
from app.models.customer_quote import CustomerQuote, CustomerQuoteItem
from app.models.financial_account import FinancialAccount
from app.models.integration_config import IntegrationConfig
from app.models.product import Product
from app.models.purchase_invoice import PurchaseInvoice, StockEntry
from app.models.role import Role
from app.models.sale import Sale, SaleItem
from app.models.service import Service
from app.models.shipment import ShipmentOrder
from app.models.supplier import Supplier
from app.models.supplier_quote import SupplierQuote, SupplierQuoteItem
from app.models.tenant_context import TenantContext
from app.models.transaction import Transaction
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.operator_schemas import TenantAccountResponse

logger = logging.getLogger(__name__)

# Children before parents
TENANT_TABLES = (
    ShipmentOrder,
    Transaction,
    Sale,
    SupplierQuote,
    CustomerQuote,
    StockEntry,
    PurchaseInvoice,
    Product,
    Service,
    Customer,
    Supplier,
    FinancialAccount,
    Category,
    Company,
    IntegrationConfig,
)


class OperatorService:
    """
    Platform support operations over whole tenant accounts.

    Every method requires the operator role.
    """

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    @staticmethod
    def _require_operator(context: TenantContext) -> None:
        context.require_tenant()
        if not context.is_operator():
            raise UnauthorizedException("Operator access required")

    def list_accounts(self, context: TenantContext) -> list[TenantAccountResponse]:
        self._require_operator(context)
        return [
            TenantAccountResponse(
                id=user.id,
                name=user.name,
                email=user.email,
                role=user.role,
                created_at=user.created_at,
                team_size=self.user_repo.count_team_members(user.id),
            )
            for user in self.user_repo.get_tenant_roots()
        ]

    def delete_account(self, account_id: int, context: TenantContext) -> dict[str, int]:
        """
        Delete a tenant root together with all of its tenant data.

        Explicit privileged cascade: business rows are deleted table by
        table (items through their parents), then the team, then the root,
        in one commit.

        Returns:
            Rows deleted per table

        Raises:
            UnauthorizedException: If the caller is not an operator, or the target is one
            NotFoundException: If no tenant root has that id
        """
        self._require_operator(context)

        user = self.user_repo.get_by_id(account_id)
        if user is None or not user.is_tenant_root:
            raise NotFoundException(f"Account {account_id} not found")
        if user.role == Role.OPERATOR:
            raise UnauthorizedException("Operator accounts cannot be deleted")

        deleted: dict[str, int] = {}
        sale_ids = select(Sale.id).where(Sale.user_id == user.id)
        quote_ids = select(SupplierQuote.id).where(SupplierQuote.user_id == user.id)
        customer_quote_ids = select(CustomerQuote.id).where(CustomerQuote.user_id == user.id)
        deleted[SaleItem.__tablename__] = (
            self.db.query(SaleItem).filter(SaleItem.sale_id.in_(sale_ids)).delete(synchronize_session=False)
        )
        deleted[SupplierQuoteItem.__tablename__] = (
            self.db.query(SupplierQuoteItem)
            .filter(SupplierQuoteItem.supplier_quote_id.in_(quote_ids))
            .delete(synchronize_session=False)
        )
        deleted[CustomerQuoteItem.__tablename__] = (
            self.db.query(CustomerQuoteItem)
            .filter(CustomerQuoteItem.quote_id.in_(customer_quote_ids))
            .delete(synchronize_session=False)
        )

        # Category parent links would block deleting the groups on strict databases
        self.db.query(Category).filter(Category.user_id == user.id).update(
            {Category.parent_id: None}, synchronize_session=False
        )
        for model in TENANT_TABLES:
            deleted[model.__tablename__] = (
                self.db.query(model).filter(model.user_id == user.id).delete(synchronize_session=False)
            )

        team = self.db.query(User).filter(User.parent_admin_id == user.id).delete(synchronize_session=False)
        root = self.db.query(User).filter(User.id == user.id).delete(synchronize_session=False)
        deleted[User.__tablename__] = team + root
        self.user_repo.commit()

        logger.info(
            "Tenant account deleted",
            extra={"account_id": account_id, "operator_id": context.user_id, "rows": deleted},
        )
        self.invalidator.invalidate(Views.OPERATOR)
        return deleted
