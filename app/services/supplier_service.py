from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ReferentialConflictException
from app.core.invalidation import ViewInvalidator, Views
from app.models.supplier import Supplier
from app.models.tenant_context import TenantContext
from app.repositories.sale_repository import SaleRepository
from app.repositories.supplier_repository import SupplierRepository
from app.repositories.transaction_repository import TransactionRepository
from app.schemas.supplier_schemas import SupplierCreate, SupplierUpdate
from app.services.helpers import apply_updates


class SupplierService:
    """Service layer for suppliers and carriers"""

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.supplier_repo = SupplierRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.sale_repo = SaleRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def list_suppliers(
        self, context: TenantContext, search: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> tuple[list[Supplier], int]:
        return self.supplier_repo.get_page(context.require_tenant(), search, page, page_size)

    def get_supplier(self, supplier_id: int, context: TenantContext) -> Supplier:
        supplier = self.supplier_repo.get(supplier_id, context.require_tenant())
        if not supplier:
            raise NotFoundException(f"Supplier {supplier_id} not found")
        return supplier

    def create_supplier(self, data: SupplierCreate, context: TenantContext) -> Supplier:
        supplier = Supplier(
            user_id=context.require_tenant(),
            created_by_id=context.user_id,
            **data.model_dump(),
        )
        supplier = self.supplier_repo.create(supplier)
        self.invalidator.invalidate(Views.SUPPLIERS)
        return supplier

    def update_supplier(self, supplier_id: int, data: SupplierUpdate, context: TenantContext) -> Supplier:
        supplier = self.get_supplier(supplier_id, context)
        apply_updates(supplier, data, required=("name",))
        supplier = self.supplier_repo.update(supplier)
        self.invalidator.invalidate(Views.SUPPLIERS, Views.detail(Views.SUPPLIERS, supplier.id))
        return supplier

    def delete_supplier(self, supplier_id: int, context: TenantContext) -> None:
        """
        Delete a supplier that nothing references.

        Raises:
            NotFoundException: If the supplier is not in the tenant
            ReferentialConflictException: If transactions or sales (as carrier) link to it
        """
        supplier = self.get_supplier(supplier_id, context)
        tenant_id = context.require_tenant()

        transactions = self.transaction_repo.count_where(tenant_id, supplier_id=supplier.id)
        if transactions > 0:
            raise ReferentialConflictException(
                f"Supplier has {transactions} linked transaction(s) and cannot be deleted"
            )

        if self.sale_repo.count_where(tenant_id, carrier_id=supplier.id) > 0:
            raise ReferentialConflictException("Supplier is the carrier of existing sales and cannot be deleted")

        self.supplier_repo.delete(supplier)
        self.invalidator.invalidate(Views.SUPPLIERS)
