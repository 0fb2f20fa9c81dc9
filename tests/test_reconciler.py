"""Reconciler hooks run inside the caller's unit of work."""

from __future__ import annotations

from decimal import Decimal

import pytest

from budgetledger.errors import CategoryNotFound
from budgetledger.services.reconciler import Reconciler


@pytest.fixture
def reconciler(ledger) -> Reconciler:
    return ledger.reconciler


def test_created_and_removed_are_inverse(category_factory, session_factory, reconciler, ledger):
    food = category_factory(name="Food", planned_budget="100")

    with session_factory() as session:
        reconciler.on_expense_created(session, food.id, Decimal("12.34"))
    with session_factory() as session:
        reconciler.on_expense_removed(session, food.id, Decimal("12.34"))

    after = ledger.categories.get(food.id)
    assert after.actual_balance == Decimal("0.00")
    assert after.remaining_balance == Decimal("100.00")


def test_amount_change_is_one_delta(category_factory, session_factory, reconciler, ledger):
    food = category_factory(name="Food", planned_budget="100")

    with session_factory() as session:
        reconciler.on_expense_created(session, food.id, Decimal("20"))
        category = reconciler.on_expense_amount_changed(
            session, food.id, Decimal("20"), Decimal("35")
        )
        assert category.actual_balance == Decimal("35")

    after = ledger.categories.get(food.id)
    assert after.actual_balance == Decimal("35.00")
    assert after.remaining_balance == Decimal("65.00")


def test_missing_category_aborts_the_whole_unit(category_factory, session_factory, reconciler, ledger):
    food = category_factory(name="Food", planned_budget="100")

    with pytest.raises(CategoryNotFound):
        with session_factory() as session:
            reconciler.on_expense_created(session, food.id, Decimal("5"))
            reconciler.on_expense_created(session, 404, Decimal("1"))

    after = ledger.categories.get(food.id)
    assert after.actual_balance == Decimal("0.00")
    assert after.remaining_balance == Decimal("100.00")


def test_failure_after_posting_rolls_back_balances(category_factory, session_factory, reconciler, ledger):
    food = category_factory(name="Food", planned_budget="100")

    with pytest.raises(RuntimeError):
        with session_factory() as session:
            reconciler.on_expense_created(session, food.id, Decimal("60"))
            raise RuntimeError("expense insert failed")

    assert ledger.categories.get(food.id).actual_balance == Decimal("0.00")


def test_move_locks_both_categories(category_factory, session_factory, reconciler, ledger):
    low = category_factory(name="Low", planned_budget="10")
    high = category_factory(name="High", planned_budget="10")

    with session_factory() as session:
        reconciler.on_expense_created(session, high.id, Decimal("4"))
    with session_factory() as session:
        source, target = reconciler.on_expense_moved(
            session, high.id, low.id, Decimal("4"), Decimal("4")
        )
        assert (source.id, target.id) == (high.id, low.id)

    assert ledger.categories.get(high.id).actual_balance == Decimal("0.00")
    assert ledger.categories.get(low.id).actual_balance == Decimal("4.00")
