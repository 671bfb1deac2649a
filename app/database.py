from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from app.config import settings

_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

# SQLite pools don't accept sizing arguments
_engine_options = (
    {"connect_args": {"check_same_thread": False}}
    if _is_sqlite
    else {"pool_size": settings.DB_POOL_SIZE, "max_overflow": settings.DB_MAX_OVERFLOW}
)

# Create SQLAlchemy engine
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before using
    echo=settings.DEBUG,  # Log SQL queries in debug mode
    **_engine_options,
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """
    FastAPI dependency for database sessions.

    Yields a database session and ensures it's closed after use.

    Usage:
        @app.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables registered on the declarative base."""
    # Model imports register their tables with Base.metadata
    from app.models import (  # noqa: F401
        category,
        company,
        customer,
        customer_quote,
        financial_account,
        integration_config,
        product,
        purchase_invoice,
        sale,
        service,
        shipment,
        supplier,
        supplier_quote,
        transaction,
        user,
    )
    from app.models.base import Base

    Base.metadata.create_all(bind=engine)
