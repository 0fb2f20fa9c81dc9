"""Atomic reallocation of planned budget between two categories."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlmodel import Session

from ..domain.repositories import CategoryRepository
from ..errors import SameCategory
from ..infra.database import SessionFactory, run_in_transaction
from ..logging_config import get_logger
from ..models.category import Category
from ..models.money import format_money
from . import validation

logger = get_logger("services.transfers")


@dataclass(frozen=True)
class TransferResult:
    """Both categories as committed by a transfer."""

    from_category: Category
    to_category: Category
    amount: Decimal

    @property
    def message(self) -> str:
        return (
            f"${format_money(self.amount)} transferred from "
            f"{self.from_category.id} to {self.to_category.id}."
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "amount": format_money(self.amount),
            "fromCategory": self.from_category.to_dict(),
            "toCategory": self.to_category.to_dict(),
        }


class TransferEngine:
    """Move planned budget from one category to another in one transaction.

    Both rows are locked in ascending id order before either is written, so
    opposite-direction transfers running concurrently cannot deadlock. Budgets
    may go negative: there is no floor on the source category.
    """

    def __init__(self, categories: CategoryRepository, session_factory: SessionFactory, *, retries: int = 0):
        self.categories = categories
        self.session_factory = session_factory
        self.retries = retries

    def transfer(self, from_id: object, to_id: object, amount: object) -> TransferResult:
        source_id = validation.parse_id(from_id, "from_id")
        target_id = validation.parse_id(to_id, "to_id")
        value = validation.validate_transfer_amount(amount)
        if source_id == target_id:
            raise SameCategory(f"Cannot transfer from category {source_id} to itself")

        def work(session: Session) -> TransferResult:
            locked = self.categories.lock_for_update(session, source_id, target_id)
            source = self._apply_leg(session, locked[source_id], -value)
            target = self._apply_leg(session, locked[target_id], value)
            return TransferResult(from_category=source, to_category=target, amount=value)

        result = run_in_transaction(self.session_factory, work, retries=self.retries)
        logger.info(
            "Budget transferred",
            extra={
                "from_category_id": source_id,
                "to_category_id": target_id,
                "amount": str(value),
            },
        )
        return result

    def _apply_leg(self, session: Session, category: Category, delta: Decimal) -> Category:
        """Shift planned and remaining budget together so the invariant holds."""
        category.planned_budget = category.planned_budget + delta
        category.remaining_balance = category.remaining_balance + delta
        session.add(category)
        session.flush()
        return category
