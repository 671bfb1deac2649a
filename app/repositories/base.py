import logging
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.core.exceptions import PersistenceException, UnauthenticatedException

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class TenantScopedRepository(Generic[ModelT]):
    """
    Data access for a table partitioned by tenant.

    Every query starts from scoped(), which filters on user_id == tenant_id
    and refuses to build a query without a tenant. Lookup by primary key
    alone is not offered.

    Subclasses set:
        model: The mapped class (must carry TenantOwnedMixin columns)
        search_fields: Column names matched case-insensitively by get_page()
        ordering: Column names for listing order, "-" prefix for descending
    """

    model: Any = None
    search_fields: tuple[str, ...] = ()
    ordering: tuple[str, ...] = ("-id",)

    def __init__(self, db: Session):
        self.db = db

    def scoped(self, tenant_id: int | None) -> Query:
        if tenant_id is None:
            raise UnauthenticatedException("Not authenticated")
        return self.db.query(self.model).filter(self.model.user_id == tenant_id)

    def get(self, entity_id: int, tenant_id: int) -> Optional[ModelT]:
        """Get a record by id inside the tenant, or None"""
        return self.scoped(tenant_id).filter(self.model.id == entity_id).first()

    def exists(self, entity_id: int, tenant_id: int) -> bool:
        return self.get(entity_id, tenant_id) is not None

    def count_where(self, tenant_id: int, **criteria) -> int:
        """Count tenant records matching column equality criteria"""
        return self.scoped(tenant_id).filter_by(**criteria).count()

    def _order(self, query: Query) -> Query:
        clauses = []
        for field in self.ordering:
            if field.startswith("-"):
                clauses.append(getattr(self.model, field[1:]).desc())
            else:
                clauses.append(getattr(self.model, field).asc())
        return query.order_by(*clauses)

    def apply_search(self, query: Query, search: Optional[str]) -> Query:
        if search and self.search_fields:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(*[getattr(self.model, field).ilike(pattern) for field in self.search_fields])
            )
        return query

    def paginate(self, query: Query, page: int, page_size: int) -> tuple[list[ModelT], int]:
        total = query.count()
        items = self._order(query).limit(page_size).offset((page - 1) * page_size).all()
        return items, total

    def get_page(
        self,
        tenant_id: int,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[ModelT], int]:
        """
        List records of the tenant with optional search and pagination.

        Returns:
            Tuple of (records on the page, total matching count)
        """
        query = self.apply_search(self.scoped(tenant_id), search)
        return self.paginate(query, page, page_size)

    def get_all(self, tenant_id: int) -> list[ModelT]:
        return self._order(self.scoped(tenant_id)).all()

    def create(self, entity: ModelT) -> ModelT:
        """Create a record. The caller stamps user_id from the tenant context."""
        self.db.add(entity)
        self._commit("create")
        self.db.refresh(entity)
        return entity

    def add_no_commit(self, entity: ModelT) -> ModelT:
        """Add without committing (for atomic ops). Assigns the id."""
        self.db.add(entity)
        self._flush("add")
        return entity

    def update(self, entity: ModelT) -> ModelT:
        self._commit("update")
        self.db.refresh(entity)
        return entity

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self._commit("delete")

    def commit(self) -> None:
        """Commit a composite mutation as one unit"""
        self._commit("commit")

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Database commit failed",
                extra={"operation": operation, "table": self.model.__tablename__},
            )
            raise PersistenceException()

    def _flush(self, operation: str) -> None:
        try:
            self.db.flush()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Database flush failed",
                extra={"operation": operation, "table": self.model.__tablename__},
            )
            raise PersistenceException()
