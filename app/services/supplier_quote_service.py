import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException
from app.core.invalidation import ViewInvalidator, Views
from app.models.supplier_quote import QuoteStatus, SupplierQuote, SupplierQuoteItem
from app.models.tenant_context import TenantContext
from app.repositories.supplier_quote_repository import SupplierQuoteRepository
from app.repositories.supplier_repository import SupplierRepository
from app.schemas.supplier_quote_schemas import (
    QuoteItemInput,
    SupplierQuoteCreate,
    SupplierQuoteUpdate,
)
from app.services.helpers import money

logger = logging.getLogger(__name__)


def build_quote_items(items: list[QuoteItemInput]) -> tuple[list[SupplierQuoteItem], float]:
    """Line totals and quote total, computed from quantity and unit price only"""
    built = []
    total = 0.0
    for item in items:
        line_total = money(item.quantity * item.unit_price)
        built.append(
            SupplierQuoteItem(
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=line_total,
            )
        )
        total += line_total
    return built, money(total)


class SupplierQuoteService:
    """Service layer for quotes received from suppliers"""

    def __init__(self, db: Session, invalidator: ViewInvalidator | None = None):
        self.db = db
        self.quote_repo = SupplierQuoteRepository(db)
        self.supplier_repo = SupplierRepository(db)
        self.invalidator = invalidator or ViewInvalidator()

    def _views(self, supplier_id: int) -> tuple[str, ...]:
        return (Views.SUPPLIERS, Views.detail(Views.SUPPLIERS, supplier_id))

    def list_quotes(
        self,
        context: TenantContext,
        supplier_id: Optional[int] = None,
        status: Optional[QuoteStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[SupplierQuote], int]:
        tenant_id = context.require_tenant()
        if supplier_id is not None and not self.supplier_repo.exists(supplier_id, tenant_id):
            raise NotFoundException(f"Supplier {supplier_id} not found")
        return self.quote_repo.get_filtered(tenant_id, supplier_id, status, search, page, page_size)

    def get_quote(self, quote_id: int, context: TenantContext) -> SupplierQuote:
        quote = self.quote_repo.get(quote_id, context.require_tenant())
        if not quote:
            raise NotFoundException(f"Supplier quote {quote_id} not found")
        return quote

    def create_quote(self, data: SupplierQuoteCreate, context: TenantContext) -> SupplierQuote:
        """
        Create a quote with its items.

        Raises:
            NotFoundException: If the supplier is not in the tenant
        """
        tenant_id = context.require_tenant()
        if not self.supplier_repo.exists(data.supplier_id, tenant_id):
            raise NotFoundException(f"Supplier {data.supplier_id} not found")

        items, total = build_quote_items(data.items)
        quote = SupplierQuote(
            user_id=tenant_id,
            created_by_id=context.user_id,
            supplier_id=data.supplier_id,
            description=data.description,
            notes=data.notes,
            valid_until=data.valid_until,
            status=data.status,
            total_amount=total,
            items=items,
        )
        quote = self.quote_repo.create(quote)
        self.invalidator.invalidate(*self._views(quote.supplier_id))
        return quote

    def update_quote(self, quote_id: int, data: SupplierQuoteUpdate, context: TenantContext) -> SupplierQuote:
        """
        Update a quote; a new item list replaces the old one.

        Item replacement and the new total are committed together, so a
        reader never sees the old total with the new items.
        """
        quote = self.get_quote(quote_id, context)

        if "description" in data.model_fields_set:
            quote.description = data.description
        if "notes" in data.model_fields_set:
            quote.notes = data.notes
        if "valid_until" in data.model_fields_set:
            quote.valid_until = data.valid_until
        if data.status is not None:
            quote.status = data.status

        if data.items is not None:
            items, total = build_quote_items(data.items)
            # delete-orphan cascade removes the previous rows on commit
            quote.items = items
            quote.total_amount = total

        quote = self.quote_repo.update(quote)
        self.invalidator.invalidate(*self._views(quote.supplier_id))
        return quote

    def update_status(self, quote_id: int, status: QuoteStatus, context: TenantContext) -> SupplierQuote:
        quote = self.get_quote(quote_id, context)
        quote.status = status
        quote = self.quote_repo.update(quote)
        logger.info("Supplier quote status changed", extra={"quote_id": quote.id, "status": status.value})
        self.invalidator.invalidate(*self._views(quote.supplier_id))
        return quote

    def delete_quote(self, quote_id: int, context: TenantContext) -> None:
        quote = self.get_quote(quote_id, context)
        supplier_id = quote.supplier_id
        self.quote_repo.delete(quote)
        self.invalidator.invalidate(*self._views(supplier_id))
