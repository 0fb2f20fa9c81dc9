"""Expense repository protocol."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from sqlmodel import Session

from ...models.expense import Expense


class ExpenseRepository(Protocol):
    """Durable keyed storage for expenses, reconciled against categories."""

    def create(self, payload: Mapping[str, Any], *, session: Optional[Session] = None) -> Expense:
        """Insert an expense and post its amount to the category."""
        ...

    def get(self, expense_id: int, *, session: Optional[Session] = None) -> Expense:
        """Return an expense or raise ExpenseNotFound."""
        ...

    def list_all(
        self, *, category_id: Optional[int] = None, session: Optional[Session] = None
    ) -> list[Expense]:
        """List expenses ordered by id, optionally for one category."""
        ...

    def update(
        self, expense_id: int, changes: Mapping[str, Any], *, session: Optional[Session] = None
    ) -> Expense:
        """Apply only the supplied fields, re-reconciling amount/category changes."""
        ...

    def delete(self, expense_id: int, *, session: Optional[Session] = None) -> None:
        """Delete an expense and reverse its effect on the category."""
        ...

    def count_for_category(self, category_id: int, *, session: Optional[Session] = None) -> int:
        """Number of expenses posted against a category."""
        ...
