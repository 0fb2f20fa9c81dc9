"""Concrete repository implementations using SQLModel."""

from .category import SQLModelCategoryRepository
from .expense import SQLModelExpenseRepository

__all__ = [
    "SQLModelCategoryRepository",
    "SQLModelExpenseRepository",
]
