"""
Pytest fixtures and configuration for Storefront Platform Backend tests

This file provides shared fixtures that can be used across all test modules.
Every test gets its own file-backed SQLite database so transactions, locks
and rollbacks behave like they do against a real server.

Author: TM3
Date: 2026-10-19
"""
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update
from sqlalchemy.orm import sessionmaker

from storefront.core.auth import create_access_token
from storefront.core.config import settings
from storefront.core.database import build_engine, get_db, init_db
from storefront.domain.user import Identity, UserRole
from storefront.models import Category, Order, Product, User

TEST_AUTH_SECRET = "test-secret-do-not-use-in-production"


@pytest.fixture(autouse=True)
def auth_secret(monkeypatch):
    """
    Provides a known AUTH_SECRET for token encoding/decoding

    Scope: function (restored after each test)
    """
    monkeypatch.setattr(settings, "AUTH_SECRET", TEST_AUTH_SECRET)
    return TEST_AUTH_SECRET


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Provides a fresh SQLite database file with all tables created

    Scope: function (new database per test)
    """
    engine = build_engine(f"sqlite:///{tmp_path / 'storefront_test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    """Provides a Session factory bound to the test database"""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """
    Provides a Session for each test

    Automatically closes the session after the test
    """
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seed(session_factory):
    """
    Provides sample users, categories and products

    Products:
        bar      Keto Bar     10.00  stock 3  (min default)  -> low
        granola  Granola       4.50  stock 1  min 5          -> critical
        brew     Cold Brew     7.25  stock 20 min 10         -> normal
        tea      Matcha Tea   12.00  stock 0  min 4          -> out_of_stock
    """
    with session_factory() as session:
        snacks = Category(name="Snacks")
        drinks = Category(name="Drinks")
        alice = User(email="alice@example.com", name="Alice", role="customer")
        bob = User(email="bob@example.com", name="Bob", role="customer")
        admin = User(email="admin@example.com", name="Admin", role="admin")
        session.add_all([snacks, drinks, alice, bob, admin])
        session.flush()

        bar = Product(name="Keto Bar", price=Decimal("10.00"), stock=3, category_id=snacks.id)
        granola = Product(name="Granola", price=Decimal("4.50"), stock=1, min_stock=5, category_id=snacks.id)
        brew = Product(name="Cold Brew", price=Decimal("7.25"), stock=20, min_stock=10, category_id=drinks.id)
        tea = Product(name="Matcha Tea", price=Decimal("12.00"), stock=0, min_stock=4, category_id=drinks.id)
        session.add_all([bar, granola, brew, tea])
        session.commit()

        return SimpleNamespace(
            alice=Identity(id=alice.id, email=alice.email, name=alice.name, role=UserRole.CUSTOMER),
            bob=Identity(id=bob.id, email=bob.email, name=bob.name, role=UserRole.CUSTOMER),
            admin=Identity(id=admin.id, email=admin.email, name=admin.name, role=UserRole.ADMIN),
            snacks=snacks.id,
            drinks=drinks.id,
            bar=bar.id,
            granola=granola.id,
            brew=brew.id,
            tea=tea.id,
        )


@pytest.fixture
def stock_of(session_factory):
    """Provides a function that reads a product's committed stock"""
    def _stock_of(product_id: int) -> int:
        with session_factory() as session:
            return session.get(Product, product_id).stock

    return _stock_of


@pytest.fixture
def order_count(session_factory):
    """Provides a function that counts committed orders"""
    def _order_count() -> int:
        with session_factory() as session:
            return session.query(Order).count()

    return _order_count


@pytest.fixture
def backdate(session_factory):
    """Provides a function that moves an order's created_at (report tests)"""
    def _backdate(order_id: int, created_at: datetime) -> None:
        with session_factory() as session:
            session.execute(
                update(Order).where(Order.id == order_id).values(created_at=created_at)
            )
            session.commit()

    return _backdate


@pytest.fixture
def client(session_factory):
    """
    Provides a TestClient whose requests use the test database

    The client is not entered as a context manager, so the lifespan
    (table creation on the default engine) never runs.
    """
    from storefront.main import app

    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Provides a function that builds a Bearer header for an identity"""
    def _auth_headers(identity: Identity) -> dict:
        token = create_access_token(
            user_id=identity.id,
            email=identity.email,
            role=identity.role.value,
            name=identity.name,
        )
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
