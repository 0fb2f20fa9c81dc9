"""Expense postings made against a category."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, ClassVar, Optional

from sqlmodel import Field, SQLModel

from .money import DECIMAL_PLACES, MAX_DIGITS, format_money


class Expense(SQLModel, table=True):
    """A single expense. Positive amounts are spend, negative amounts refunds."""

    __tablename__: ClassVar[str] = "expense"

    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: int = Field(foreign_key="category.id", nullable=False, index=True)
    amount: Decimal = Field(nullable=False, max_digits=MAX_DIGITS, decimal_places=DECIMAL_PLACES)
    date: Optional[dt.date] = Field(default=None, index=True)
    description: Optional[str] = Field(default=None, max_length=255)
    payment_method: Optional[str] = Field(default=None, max_length=64)
    entity_id: Optional[int] = Field(default=None)
    entity_type: Optional[str] = Field(default=None, max_length=64)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category_id": self.category_id,
            "amount": format_money(self.amount),
            "date": self.date.isoformat() if self.date else None,
            "description": self.description,
            "payment_method": self.payment_method,
            "entity_id": self.entity_id,
            "entity_type": self.entity_type,
        }
