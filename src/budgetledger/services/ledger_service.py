"""Single entry point the HTTP layer and the CLI use to reach the ledger."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ..infra.database import SessionFactory, run_in_transaction
from ..infra.repositories import SQLModelCategoryRepository, SQLModelExpenseRepository
from ..logging_config import get_logger
from ..models.category import Category
from ..models.expense import Expense
from ..models.money import ZERO, quantize
from . import validation
from .reconciler import Reconciler
from .transfers import TransferEngine, TransferResult

logger = get_logger("services.ledger")


@dataclass(frozen=True)
class BalanceDrift:
    """A category whose stored balances disagree with the ledger."""

    category_id: int
    name: str
    issue: str


class LedgerFacade:
    """Compose the category/expense stores, the reconciler and transfers."""

    def __init__(self, session_factory: SessionFactory, *, retries: int = 0):
        self.session_factory = session_factory
        self.retries = retries
        self.categories = SQLModelCategoryRepository(session_factory, retries=retries)
        self.reconciler = Reconciler(self.categories)
        self.expenses = SQLModelExpenseRepository(session_factory, self.reconciler, retries=retries)
        self.transfers = TransferEngine(self.categories, session_factory, retries=retries)

    # Categories -----------------------------------------------------------
    def create_category(self, payload: Mapping[str, Any]) -> Category:
        fields = validation.category_create_fields(payload)
        return self.categories.create(fields["name"], fields["planned_budget"])

    def list_categories(self) -> list[Category]:
        return self.categories.list_all()

    def get_category(self, category_id: object) -> Category:
        return self.categories.get(validation.parse_id(category_id, "category_id"))

    def update_category(self, category_id: object, changes: Mapping[str, Any]) -> Category:
        return self.categories.update(validation.parse_id(category_id, "category_id"), changes)

    def delete_category(self, category_id: object) -> None:
        self.categories.delete(validation.parse_id(category_id, "category_id"))

    # Expenses -------------------------------------------------------------
    def create_expense(self, payload: Mapping[str, Any]) -> Expense:
        return self.expenses.create(payload)

    def list_expenses(self, category_id: Optional[object] = None) -> list[Expense]:
        if category_id is not None:
            category_id = validation.parse_id(category_id, "category_id")
        return self.expenses.list_all(category_id=category_id)  # type: ignore[arg-type]

    def get_expense(self, expense_id: object) -> Expense:
        return self.expenses.get(validation.parse_id(expense_id, "expense_id"))

    def update_expense(self, expense_id: object, changes: Mapping[str, Any]) -> Expense:
        return self.expenses.update(validation.parse_id(expense_id, "expense_id"), changes)

    def delete_expense(self, expense_id: object) -> None:
        self.expenses.delete(validation.parse_id(expense_id, "expense_id"))

    # Transfers ------------------------------------------------------------
    def transfer(self, from_id: object, to_id: object, amount: object) -> TransferResult:
        return self.transfers.transfer(from_id, to_id, amount)

    # Audit ----------------------------------------------------------------
    def verify_balances(self) -> list[BalanceDrift]:
        """Check every category against its invariant and its posted expenses."""

        def work(session: Session) -> list[BalanceDrift]:
            totals: dict[int, Decimal] = {
                category_id: quantize(Decimal(total or 0))
                for category_id, total in session.exec(
                    select(Expense.category_id, func.sum(Expense.amount)).group_by(
                        Expense.category_id
                    )
                ).all()
            }
            drifts: list[BalanceDrift] = []
            for category in session.exec(select(Category).order_by(Category.id)).all():  # type: ignore[arg-type]
                if not category.is_balanced():
                    drifts.append(
                        BalanceDrift(
                            category.id,
                            category.name,
                            f"remaining {category.remaining_balance} != planned "
                            f"{category.planned_budget} - actual {category.actual_balance}",
                        )
                    )
                posted = totals.pop(category.id, ZERO)
                if category.actual_balance != posted:
                    drifts.append(
                        BalanceDrift(
                            category.id,
                            category.name,
                            f"actual {category.actual_balance} != posted expenses {posted}",
                        )
                    )
            for orphan_id in sorted(totals):
                drifts.append(
                    BalanceDrift(orphan_id, "", "expenses reference a missing category")
                )
            return drifts

        drifts = run_in_transaction(self.session_factory, work, retries=self.retries)
        if drifts:
            logger.warning("Balance drift detected", extra={"drift_count": len(drifts)})
        return drifts
