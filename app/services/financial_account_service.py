import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ReferentialConflictException
from app.core.invalidation import ViewInvalidator, Views
from app.models.financial_account import FinancialAccount
from app.models.tenant_context import TenantContext
from app.repositories.financial_account_repository import FinancialAccountRepository
from app.repositories.transaction_repository import TransactionRepository
from app.schemas.financial_account_schemas import FinancialAccountCreate, FinancialAccountUpdate
from app.services.helpers import apply_updates, money

logger = logging.getLogger(__name__)

ACCOUNT_VIEWS = (Views.FINANCE, Views.FINANCIAL_ACCOUNTS)


class FinancialAccountService:
    """
    Service layer for financial accounts.

    Marking an account as default unsets the flag on the others in the
    same commit, so a tenant never has two defaults.
    """

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.account_repo = FinancialAccountRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def list_accounts(self, context: TenantContext) -> list[FinancialAccount]:
        return self.account_repo.get_all(context.require_tenant())

    def get_default_account(self, context: TenantContext) -> Optional[FinancialAccount]:
        return self.account_repo.get_default(context.require_tenant())

    def get_account(self, account_id: int, context: TenantContext) -> FinancialAccount:
        account = self.account_repo.get(account_id, context.require_tenant())
        if not account:
            raise NotFoundException(f"Financial account {account_id} not found")
        return account

    def create_account(self, data: FinancialAccountCreate, context: TenantContext) -> FinancialAccount:
        tenant_id = context.require_tenant()
        if data.is_default:
            self.account_repo.clear_default(tenant_id)

        account = self.account_repo.create(
            FinancialAccount(
                user_id=tenant_id,
                created_by_id=context.user_id,
                name=data.name,
                type=data.type,
                balance=money(data.balance),
                is_default=data.is_default,
            )
        )
        self.invalidator.invalidate(*ACCOUNT_VIEWS)
        return account

    def update_account(self, account_id: int, data: FinancialAccountUpdate, context: TenantContext) -> FinancialAccount:
        account = self.get_account(account_id, context)
        if data.is_default:
            self.account_repo.clear_default(context.require_tenant())

        apply_updates(account, data, required=("name", "type", "balance", "is_default", "active"))
        account = self.account_repo.update(account)
        self.invalidator.invalidate(*ACCOUNT_VIEWS)
        return account

    def delete_account(self, account_id: int, context: TenantContext) -> None:
        """
        Raises:
            ReferentialConflictException: If the account is the default or transactions link to it
        """
        account = self.get_account(account_id, context)
        if account.is_default:
            raise ReferentialConflictException("The default account cannot be deleted")

        transactions = self.transaction_repo.count_where(context.require_tenant(), financial_account_id=account.id)
        if transactions > 0:
            raise ReferentialConflictException(
                f"Account has {transactions} linked transaction(s). Move them before deleting it"
            )

        self.account_repo.delete(account)
        logger.info("Financial account deleted", extra={"tenant_id": account.user_id, "account_id": account_id})
        self.invalidator.invalidate(*ACCOUNT_VIEWS)
