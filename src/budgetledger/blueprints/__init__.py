"""Blueprint exports."""

from . import categories, expenses, home

__all__ = [
    "categories",
    "expenses",
    "home",
]
