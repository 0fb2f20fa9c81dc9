"""SQLModel implementation of the category store."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...errors import CategoryInUse, CategoryNotFound
from ...logging_config import get_logger
from ...models.category import Category
from ...models.expense import Expense
from ...models.money import ZERO
from ...services import validation
from .base import SessionBoundRepository

logger = get_logger("infra.repositories.category")


class SQLModelCategoryRepository(SessionBoundRepository):
    """SQLModel-based category repository implementation."""

    def create(
        self,
        name: str,
        planned_budget: Decimal | int | str = 0,
        *,
        session: Optional[Session] = None,
    ) -> Category:
        """Create a new category with its whole budget remaining."""
        fields = validation.category_create_fields({"name": name, "planned_budget": planned_budget})

        def work(s: Session) -> Category:
            category = Category(
                name=fields["name"],
                planned_budget=fields["planned_budget"],
                remaining_balance=fields["planned_budget"],
                actual_balance=ZERO,
            )
            s.add(category)
            s.flush()
            s.refresh(category)
            return category

        category = self._run(work, session)
        logger.info(
            "Category created",
            extra={"category_id": category.id, "planned_budget": str(category.planned_budget)},
        )
        return category

    def get(self, category_id: int, *, session: Optional[Session] = None) -> Category:
        """Retrieve a category by ID."""

        def work(s: Session) -> Category:
            category = s.get(Category, category_id, populate_existing=True)
            if category is None:
                raise CategoryNotFound(category_id)
            return category

        return self._run(work, session)

    def list_all(self, *, session: Optional[Session] = None) -> list[Category]:
        """List all categories."""

        def work(s: Session) -> list[Category]:
            statement = select(Category).order_by(Category.id)  # type: ignore[arg-type]
            return list(s.exec(statement).all())

        return self._run(work, session)

    def lock_for_update(self, session: Session, *category_ids: int) -> dict[int, Category]:
        """Lock rows in ascending id order and return them keyed by id.

        Raises CategoryNotFound for the lowest missing id before anything is
        written, so callers can abort the unit of work cleanly.
        """
        wanted = sorted(set(category_ids))
        statement = (
            select(Category)
            .where(Category.id.in_(wanted))  # type: ignore[union-attr]
            .order_by(Category.id)  # type: ignore[arg-type]
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        rows = {row.id: row for row in session.exec(statement).all()}
        for category_id in wanted:
            if category_id not in rows:
                raise CategoryNotFound(category_id)
        return rows  # type: ignore[return-value]

    def update(
        self,
        category_id: int,
        changes: Mapping[str, Any],
        *,
        session: Optional[Session] = None,
    ) -> Category:
        """Update only the fields present in ``changes``.

        Only the assigned attributes become dirty, so the emitted UPDATE touches
        just those columns. A new budget re-derives the remaining balance from
        the posted actuals.
        """
        patch = validation.category_patch(changes)

        def work(s: Session) -> Category:
            category = self.lock_for_update(s, category_id)[category_id]
            if "name" in patch:
                category.name = patch["name"]
            if "planned_budget" in patch:
                category.planned_budget = patch["planned_budget"]
                category.remaining_balance = patch["planned_budget"] - category.actual_balance
            s.add(category)
            s.flush()
            return category

        category = self._run(work, session)
        logger.info(
            "Category updated",
            extra={"category_id": category_id, "fields": sorted(patch)},
        )
        return category

    def delete(self, category_id: int, *, session: Optional[Session] = None) -> None:
        """Delete a category by ID; refused while expenses reference it."""

        def work(s: Session) -> None:
            category = self.lock_for_update(s, category_id)[category_id]
            in_use = s.exec(
                select(func.count()).select_from(Expense).where(Expense.category_id == category_id)
            ).one()
            if in_use:
                raise CategoryInUse(category_id, in_use)
            s.delete(category)
            s.flush()

        self._run(work, session)
        logger.info("Category deleted", extra={"category_id": category_id})
