"""Category repository protocol."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional, Protocol

from sqlmodel import Session

from ...models.category import Category


class CategoryRepository(Protocol):
    """Durable keyed storage for budget categories.

    Every method accepts ``session=`` to join a caller's unit of work; without
    it the call runs in its own transaction.
    """

    def create(
        self, name: str, planned_budget: Decimal | int | str = 0, *, session: Optional[Session] = None
    ) -> Category:
        """Create a category with remaining = planned and actual = 0."""
        ...

    def get(self, category_id: int, *, session: Optional[Session] = None) -> Category:
        """Return a category or raise CategoryNotFound."""
        ...

    def list_all(self, *, session: Optional[Session] = None) -> list[Category]:
        """List all categories ordered by id."""
        ...

    def update(
        self, category_id: int, changes: Mapping[str, Any], *, session: Optional[Session] = None
    ) -> Category:
        """Apply only the supplied fields."""
        ...

    def delete(self, category_id: int, *, session: Optional[Session] = None) -> None:
        """Delete a category that no expense references."""
        ...

    def lock_for_update(self, session: Session, *category_ids: int) -> dict[int, Category]:
        """Lock the given rows in ascending id order inside ``session``."""
        ...
