"""Budget category table."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, ClassVar, Optional

from sqlmodel import Field, SQLModel

from .money import DECIMAL_PLACES, MAX_DIGITS, ZERO, format_money


class Category(SQLModel, table=True):
    """A named budget envelope.

    ``remaining_balance`` always equals ``planned_budget - actual_balance``
    once a unit of work commits. Only the ledger services write the two
    balance columns.
    """

    __tablename__: ClassVar[str] = "category"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, index=True, max_length=64)
    planned_budget: Decimal = Field(
        default=ZERO, nullable=False, max_digits=MAX_DIGITS, decimal_places=DECIMAL_PLACES
    )
    remaining_balance: Decimal = Field(
        default=ZERO, nullable=False, max_digits=MAX_DIGITS, decimal_places=DECIMAL_PLACES
    )
    actual_balance: Decimal = Field(
        default=ZERO, nullable=False, max_digits=MAX_DIGITS, decimal_places=DECIMAL_PLACES
    )

    def is_balanced(self) -> bool:
        return self.remaining_balance == self.planned_budget - self.actual_balance

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "planned_budget": format_money(self.planned_budget),
            "remaining_balance": format_money(self.remaining_balance),
            "actual_balance": format_money(self.actual_balance),
        }
