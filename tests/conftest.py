import os

# Point the application at throwaway settings before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["API_KEY"] = "test-key"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kasir.main import app
from kasir.database import Base, get_db
from kasir.models.product import Product

# Create test database (SQLite in-memory for testing)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

# Override the dependency
app.dependency_overrides[get_db] = override_get_db

@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    # Create tables
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    # Drop tables after test
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Create database session for direct database access in tests."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def make_product(db_session):
    """Insert a product and return its id."""
    def _make(name: str, price: int, stock: int) -> int:
        product = Product(name=name, price=price, stock=stock)
        db_session.add(product)
        db_session.commit()
        return product.id
    return _make

@pytest.fixture
def stock_of(db_session):
    """Read the committed stock of a product through a separate session."""
    def _stock(product_id: int) -> int:
        session = TestingSessionLocal()
        try:
            return session.get(Product, product_id).stock
        finally:
            session.close()
    return _stock
