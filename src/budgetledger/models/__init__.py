"""SQLModel table exports."""

from .category import Category
from .expense import Expense

__all__ = [
    "Category",
    "Expense",
]
