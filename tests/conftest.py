import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DB_AUTO_CREATE", "false")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from app.database import get_db
from app.models.base import Base
from app.config import settings
from app.core.security import hash_password
# Import all model classes to ensure they're registered with SQLAlchemy
from app.models.role import Role
from app.models.user import User
from app.models.category import Category
from app.models.company import Company
from app.models.customer import Customer
from app.models.customer_quote import CustomerQuote
from app.models.financial_account import FinancialAccount
from app.models.integration_config import IntegrationConfig
from app.models.product import Product
from app.models.purchase_invoice import PurchaseInvoice, StockEntry
from app.models.sale import Sale
from app.models.service import Service
from app.models.shipment import ShipmentOrder
from app.models.supplier import Supplier
from app.models.supplier_quote import SupplierQuote
from app.models.transaction import Transaction
# Import FastAPI app AFTER model imports
from app.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "secret123"


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db, email: str, role: Role = Role.ADMINISTRATOR, parent: User | None = None, password: str | None = None) -> User:
    user = User(
        name=email.split("@")[0].title(),
        email=email,
        role=role,
        parent_admin_id=parent.id if parent else None,
        password_hash=hash_password(password) if password else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_test_token(
    user_id: int | str | None,
    expired: bool = False,
    email: str | None = None,
    secret: str | None = None,
) -> str:
    """
    Generate a session token for testing.

    Args:
        user_id: Value of the 'sub' claim; None leaves it out (legacy email-only token)
        expired: If True, create expired token
        email: Optional 'email' claim
        secret: Signing key, defaults to SECRET_KEY

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"exp": exp, "iat": datetime.now(UTC)}
    if user_id is not None:
        payload["sub"] = str(user_id)
    if email is not None:
        payload["email"] = email

    return jwt.encode(payload, secret or settings.SECRET_KEY, algorithm="HS256")


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_test_token(user.id)}"}


@pytest.fixture
def admin_user(db_session):
    """Tenant A root"""
    return make_user(db_session, "alice@shop-a.com")


@pytest.fixture
def other_admin(db_session):
    """Tenant B root"""
    return make_user(db_session, "bob@shop-b.com")


@pytest.fixture
def team_member(db_session, admin_user):
    """Salesperson working inside tenant A"""
    return make_user(db_session, "carol@shop-a.com", Role.SALESPERSON, parent=admin_user)


@pytest.fixture
def operator_user(db_session):
    return make_user(db_session, "support@platform.com", Role.OPERATOR)


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def other_headers(other_admin):
    return bearer(other_admin)


@pytest.fixture
def member_headers(team_member):
    return bearer(team_member)


@pytest.fixture
def operator_headers(operator_user):
    return bearer(operator_user)
