"""SQLModel implementation of the expense store."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...errors import ExpenseNotFound
from ...logging_config import get_logger
from ...models.expense import Expense
from ...services import validation
from ...services.reconciler import Reconciler
from ..database import SessionFactory
from .base import SessionBoundRepository

logger = get_logger("infra.repositories.expense")


class SQLModelExpenseRepository(SessionBoundRepository):
    """SQLModel-based expense repository.

    Every write that changes what a category has spent runs the matching
    Reconciler hook in the same session, before the unit of work commits.
    """

    def __init__(self, session_factory: SessionFactory, reconciler: Reconciler, *, retries: int = 0):
        super().__init__(session_factory, retries=retries)
        self.reconciler = reconciler

    def create(self, payload: Mapping[str, Any], *, session: Optional[Session] = None) -> Expense:
        """Insert an expense and post its amount to the category."""
        fields = validation.expense_create_fields(payload)

        def work(s: Session) -> Expense:
            # Reconcile first: a missing category aborts before the insert.
            self.reconciler.on_expense_created(s, fields["category_id"], fields["amount"])
            expense = Expense(**fields)
            s.add(expense)
            s.flush()
            s.refresh(expense)
            return expense

        expense = self._run(work, session)
        logger.info(
            "Expense created",
            extra={
                "expense_id": expense.id,
                "category_id": expense.category_id,
                "amount": str(expense.amount),
            },
        )
        return expense

    def get(self, expense_id: int, *, session: Optional[Session] = None) -> Expense:
        """Retrieve an expense by ID."""

        def work(s: Session) -> Expense:
            expense = s.get(Expense, expense_id, populate_existing=True)
            if expense is None:
                raise ExpenseNotFound(expense_id)
            return expense

        return self._run(work, session)

    def list_all(
        self, *, category_id: Optional[int] = None, session: Optional[Session] = None
    ) -> list[Expense]:
        """List expenses, optionally only those of one category."""

        def work(s: Session) -> list[Expense]:
            statement = select(Expense)
            if category_id is not None:
                statement = statement.where(Expense.category_id == category_id)
            statement = statement.order_by(Expense.id)  # type: ignore[arg-type]
            return list(s.exec(statement).all())

        return self._run(work, session)

    def count_for_category(self, category_id: int, *, session: Optional[Session] = None) -> int:
        def work(s: Session) -> int:
            statement = (
                select(func.count()).select_from(Expense).where(Expense.category_id == category_id)
            )
            return int(s.exec(statement).one())

        return self._run(work, session)

    def _lock(self, s: Session, expense_id: int) -> Expense:
        statement = (
            select(Expense)
            .where(Expense.id == expense_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        expense = s.exec(statement).first()
        if expense is None:
            raise ExpenseNotFound(expense_id)
        return expense

    def update(
        self,
        expense_id: int,
        changes: Mapping[str, Any],
        *,
        session: Optional[Session] = None,
    ) -> Expense:
        """Update only the supplied fields.

        A changed amount posts the difference to the category; a changed
        category reverses the old posting and applies the new one.
        """
        patch = validation.expense_patch(changes)

        def work(s: Session) -> Expense:
            expense = self._lock(s, expense_id)
            old_category, old_amount = expense.category_id, expense.amount
            new_category = patch.get("category_id", old_category)
            new_amount = patch.get("amount", old_amount)

            if new_category != old_category:
                self.reconciler.on_expense_moved(s, old_category, new_category, old_amount, new_amount)
            elif new_amount != old_amount:
                self.reconciler.on_expense_amount_changed(s, old_category, old_amount, new_amount)

            for field, value in patch.items():
                setattr(expense, field, value)
            s.add(expense)
            s.flush()
            return expense

        expense = self._run(work, session)
        logger.info(
            "Expense updated",
            extra={"expense_id": expense_id, "fields": sorted(patch)},
        )
        return expense

    def delete(self, expense_id: int, *, session: Optional[Session] = None) -> None:
        """Delete an expense and give its amount back to the category."""

        def work(s: Session) -> None:
            expense = self._lock(s, expense_id)
            self.reconciler.on_expense_removed(s, expense.category_id, expense.amount)
            s.delete(expense)
            s.flush()

        self._run(work, session)
        logger.info("Expense deleted", extra={"expense_id": expense_id})
