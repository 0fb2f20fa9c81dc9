"""Keep category balances consistent with the expense ledger.

The reconciler never opens its own transaction. Every hook runs inside the
session of the expense write it accompanies, so the expense row and the
category balances commit or roll back together.
"""

from __future__ import annotations

from decimal import Decimal

from sqlmodel import Session

from ..domain.repositories import CategoryRepository
from ..logging_config import get_logger
from ..models.category import Category

logger = get_logger("services.reconciler")


class Reconciler:
    """Apply expense postings to ``actual_balance`` and ``remaining_balance``.

    Positive amounts are spend: they raise ``actual_balance`` and lower
    ``remaining_balance`` by the same value.
    """

    def __init__(self, categories: CategoryRepository):
        self.categories = categories

    def on_expense_created(self, session: Session, category_id: int, amount: Decimal) -> Category:
        return self._apply(session, category_id, amount)

    def on_expense_removed(self, session: Session, category_id: int, amount: Decimal) -> Category:
        return self._apply(session, category_id, -amount)

    def on_expense_amount_changed(
        self, session: Session, category_id: int, old_amount: Decimal, new_amount: Decimal
    ) -> Category:
        # One delta, one write: no intermediate state is ever flushed.
        return self._apply(session, category_id, new_amount - old_amount)

    def on_expense_moved(
        self,
        session: Session,
        old_category_id: int,
        new_category_id: int,
        old_amount: Decimal,
        new_amount: Decimal,
    ) -> tuple[Category, Category]:
        """Reverse the posting on the old category and post it on the new one."""
        locked = self.categories.lock_for_update(session, old_category_id, new_category_id)
        source = self._post(locked[old_category_id], -old_amount)
        target = self._post(locked[new_category_id], new_amount)
        session.add_all([source, target])
        session.flush()
        logger.info(
            "Expense moved between categories",
            extra={
                "from_category_id": old_category_id,
                "to_category_id": new_category_id,
                "old_amount": str(old_amount),
                "new_amount": str(new_amount),
            },
        )
        return source, target

    def _apply(self, session: Session, category_id: int, delta: Decimal) -> Category:
        category = self.categories.lock_for_update(session, category_id)[category_id]
        self._post(category, delta)
        session.add(category)
        session.flush()
        logger.info(
            "Category balances reconciled",
            extra={"category_id": category_id, "delta": str(delta)},
        )
        return category

    @staticmethod
    def _post(category: Category, delta: Decimal) -> Category:
        category.actual_balance = category.actual_balance + delta
        category.remaining_balance = category.remaining_balance - delta
        return category
