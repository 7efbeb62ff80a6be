"""Shared fixtures: an in-memory database per test and a client wired to it."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from finance_dashboard.app.db import get_db, init_db
from finance_dashboard.app.main import app
from finance_dashboard.app.models.transaction_model import Transaction
from finance_dashboard.app.models.budget_model import Budget


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def add_transaction(db):
    """Insert a transaction row directly and return it."""
    def _add(amount, date, type="expense", category=None, description="Test"):
        txn = Transaction(amount=amount, date=date, type=type, category=category, description=description)
        db.add(txn)
        db.commit()
        db.refresh(txn)
        return txn
    return _add


@pytest.fixture
def add_budget(db):
    """Insert a budget row directly and return it."""
    def _add(month, category, amount):
        budget = Budget(month=month, category=category, amount=amount)
        db.add(budget)
        db.commit()
        db.refresh(budget)
        return budget
    return _add
