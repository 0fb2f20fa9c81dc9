"""Domain exceptions raised by the ledger and mapped to HTTP responses by the API."""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for every failure the ledger reports to its callers."""

    status_code = 500
    code = "ledger_error"
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code, "message": self.message}


class InvalidInput(LedgerError):
    """Caller data is malformed or out of range. Nothing was written."""

    status_code = 400
    code = "invalid_input"


class SameCategory(InvalidInput):
    """A transfer named the same category on both sides."""

    code = "same_category"


class NotFound(LedgerError):
    status_code = 404
    code = "not_found"


class CategoryNotFound(NotFound):
    code = "category_not_found"

    def __init__(self, category_id: int, message: str | None = None) -> None:
        super().__init__(message or f"Category {category_id} not found")
        self.category_id = category_id


class ExpenseNotFound(NotFound):
    code = "expense_not_found"

    def __init__(self, expense_id: int) -> None:
        super().__init__(f"Expense {expense_id} not found")
        self.expense_id = expense_id


class Conflict(LedgerError):
    status_code = 409
    code = "conflict"


class CategoryInUse(Conflict):
    """A category cannot be deleted while expenses still reference it."""

    code = "category_in_use"

    def __init__(self, category_id: int, expense_count: int) -> None:
        super().__init__(
            f"Category {category_id} still has {expense_count} expense(s); "
            "delete or move them first"
        )
        self.category_id = category_id
        self.expense_count = expense_count


class Internal(LedgerError):
    """Storage or transaction failure. The unit of work was rolled back."""

    code = "internal"


class TransactionTimeout(Internal):
    """Waiting for a row or database lock exceeded the configured bound."""

    status_code = 503
    code = "transaction_timeout"
    retryable = True
