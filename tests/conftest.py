"""Pytest configuration and shared fixtures for BudgetLedger tests.

This module provides database fixtures, test data factories, and helper utilities
for testing the stores, the reconciler and transfers without touching a real
application database.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from budgetledger import create_app
from budgetledger.config import TestConfig
from budgetledger.infra.database import create_db_engine, create_session_factory, init_database
from budgetledger.models import Category, Expense
from budgetledger.services.ledger_service import LedgerFacade

# =============================================================================
# Configuration & Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def ledger_config(tmp_path, monkeypatch: pytest.MonkeyPatch) -> TestConfig:
    """Point the configuration at a throw-away SQLite file for each test."""
    monkeypatch.setenv("BUDGETLEDGER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("BUDGETLEDGER_DATABASE_URL", f"sqlite:///{tmp_path / 'ledger.db'}")
    monkeypatch.setenv("BUDGETLEDGER_TX_TIMEOUT", "10")
    monkeypatch.setenv("BUDGETLEDGER_TX_RETRIES", "2")
    monkeypatch.setenv("BUDGETLEDGER_DEV_MODE", "true")
    return TestConfig()


@pytest.fixture(scope="function")
def db_engine(ledger_config):
    """Create an isolated SQLite database with all tables for one test.

    Yields:
        Engine: engine configured exactly like the application's
    """
    engine = create_db_engine(ledger_config)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Unit-of-work factory: commits on success, rolls back on error."""
    return create_session_factory(db_engine)


@pytest.fixture(scope="function")
def ledger(session_factory) -> LedgerFacade:
    return LedgerFacade(session_factory, retries=2)


# =============================================================================
# Flask Fixtures
# =============================================================================


@pytest.fixture()
def app(ledger_config):
    app = create_app("testing")
    yield app
    app.extensions["budgetledger"]["engine"].dispose()


@pytest.fixture()
def client(app):
    with app.test_client() as test_client:
        yield test_client


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def category_factory(ledger):
    """Factory for creating persisted categories.

    Returns:
        Callable: Function that creates Category rows through the store
    """

    def _create_category(name: str = "Test Category", planned_budget: str = "100.00") -> Category:
        return ledger.categories.create(name, planned_budget)

    return _create_category


@pytest.fixture
def expense_factory(ledger):
    """Factory for posting expenses through the store (so they reconcile).

    Returns:
        Callable: Function that creates Expense rows
    """

    def _create_expense(category_id: int, amount: str = "10.00", **metadata) -> Expense:
        payload = {"category_id": category_id, "amount": amount, **metadata}
        return ledger.expenses.create(payload)

    return _create_expense


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_balanced(category: Category) -> None:
    """Assert remaining == planned - actual for a category read from the store."""
    assert category.remaining_balance == category.planned_budget - category.actual_balance, (
        f"category {category.id}: remaining {category.remaining_balance} != "
        f"{category.planned_budget} - {category.actual_balance}"
    )


def money(value: str) -> Decimal:
    return Decimal(value)
