"""Input validation shared by the stores, the transfer engine and the API.

Validators accept raw JSON-ish values (strings, ints, floats) as well as
already-typed values, so the stores can re-validate whatever they are handed.
Patch builders only return the keys that were supplied; omitted fields never
appear in the result and therefore are never written.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from ..errors import InvalidInput
from ..models.money import MAX_DIGITS, DECIMAL_PLACES, quantize

NAME_MAX_LENGTH = 64
DESCRIPTION_MAX_LENGTH = 255
LABEL_MAX_LENGTH = 64

_MAX_ABS_AMOUNT = Decimal(10) ** (MAX_DIGITS - DECIMAL_PLACES)

CATEGORY_FIELDS = frozenset({"name", "planned_budget"})
EXPENSE_FIELDS = frozenset(
    {
        "category_id",
        "amount",
        "date",
        "description",
        "payment_method",
        "entity_id",
        "entity_type",
    }
)
_EXPENSE_OPTIONAL_FIELDS = EXPENSE_FIELDS - {"category_id", "amount"}


def parse_amount(raw: object, field: str) -> Decimal:
    """Convert raw input to a finite Decimal rounded to cents."""
    if raw is None or isinstance(raw, bool):
        raise InvalidInput(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError) as exc:
        raise InvalidInput(f"{field} must be a numeric value") from exc
    if not amount.is_finite():
        raise InvalidInput(f"{field} must be a finite number")
    # Bound before rounding: quantize cannot represent huge exponents.
    if abs(amount) >= _MAX_ABS_AMOUNT:
        raise InvalidInput(f"{field} is too large")
    amount = quantize(amount)
    # Rounding can carry into an eleventh integer digit.
    if abs(amount) >= _MAX_ABS_AMOUNT:
        raise InvalidInput(f"{field} is too large")
    return amount


def parse_id(raw: object, field: str) -> int:
    if isinstance(raw, bool):
        raise InvalidInput(f"{field} must be an integer id")
    try:
        value = int(str(raw).strip()) if isinstance(raw, str) else int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{field} must be an integer id") from exc
    if isinstance(raw, float) and raw != value:
        raise InvalidInput(f"{field} must be an integer id")
    if value <= 0:
        raise InvalidInput(f"{field} must be a positive integer id")
    return value


def validate_name(raw: object) -> str:
    if not isinstance(raw, str):
        raise InvalidInput("name must be a string")
    name = raw.strip()
    if not name:
        raise InvalidInput("name cannot be empty")
    if len(name) > NAME_MAX_LENGTH:
        raise InvalidInput(f"name must be at most {NAME_MAX_LENGTH} characters")
    return name


def validate_planned_budget(raw: object) -> Decimal:
    budget = parse_amount(raw, "planned_budget")
    if budget < 0:
        raise InvalidInput("planned_budget must be >= 0")
    return budget


def validate_transfer_amount(raw: object) -> Decimal:
    amount = parse_amount(raw, "amount")
    if amount <= 0:
        raise InvalidInput("amount must be greater than zero")
    return amount


def validate_expense_amount(raw: object) -> Decimal:
    amount = parse_amount(raw, "amount")
    if amount == 0:
        raise InvalidInput("amount cannot be zero")
    return amount


def _optional_text(raw: object, field: str, max_length: int) -> Optional[str]:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise InvalidInput(f"{field} must be a string")
    value = raw.strip()
    if len(value) > max_length:
        raise InvalidInput(f"{field} must be at most {max_length} characters")
    return value or None


def _optional_date(raw: object) -> Optional[dt.date]:
    if raw is None:
        return None
    if isinstance(raw, dt.datetime):
        return raw.date()
    if isinstance(raw, dt.date):
        return raw
    if isinstance(raw, str):
        value = raw.strip()
        if not value:
            return None
        try:
            return dt.datetime.fromisoformat(value).date()
        except ValueError as exc:
            raise InvalidInput("date must be an ISO 8601 date (YYYY-MM-DD)") from exc
    raise InvalidInput("date must be an ISO 8601 date (YYYY-MM-DD)")


def _optional_int(raw: object, field: str) -> Optional[int]:
    if raw is None:
        return None
    return parse_id(raw, field)


_OPTIONAL_VALIDATORS = {
    "date": _optional_date,
    "description": lambda raw: _optional_text(raw, "description", DESCRIPTION_MAX_LENGTH),
    "payment_method": lambda raw: _optional_text(raw, "payment_method", LABEL_MAX_LENGTH),
    "entity_id": lambda raw: _optional_int(raw, "entity_id"),
    "entity_type": lambda raw: _optional_text(raw, "entity_type", LABEL_MAX_LENGTH),
}


def _require_mapping(payload: object) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise InvalidInput("Request body must be a JSON object")
    return payload


def _reject_unknown(payload: Mapping[str, Any], allowed: frozenset[str]) -> None:
    unknown = sorted(set(payload) - allowed)
    if unknown:
        raise InvalidInput(f"Unsupported or read-only field(s): {', '.join(unknown)}")


def category_create_fields(payload: object) -> dict[str, Any]:
    data = _require_mapping(payload)
    _reject_unknown(data, CATEGORY_FIELDS)
    # An omitted budget starts the envelope at zero.
    return {
        "name": validate_name(data.get("name")),
        "planned_budget": validate_planned_budget(data.get("planned_budget", 0)),
    }


def category_patch(payload: object) -> dict[str, Any]:
    """Return only the category fields present in ``payload``, validated."""
    data = _require_mapping(payload)
    _reject_unknown(data, CATEGORY_FIELDS)
    changes: dict[str, Any] = {}
    if "name" in data:
        changes["name"] = validate_name(data["name"])
    if "planned_budget" in data:
        changes["planned_budget"] = validate_planned_budget(data["planned_budget"])
    if not changes:
        raise InvalidInput("No updatable fields supplied")
    return changes


def expense_create_fields(payload: object) -> dict[str, Any]:
    data = _require_mapping(payload)
    _reject_unknown(data, EXPENSE_FIELDS)
    if data.get("category_id") is None:
        raise InvalidInput("category_id is required")
    if data.get("amount") is None:
        raise InvalidInput("amount is required")
    fields: dict[str, Any] = {
        "category_id": parse_id(data["category_id"], "category_id"),
        "amount": validate_expense_amount(data["amount"]),
    }
    for name in _EXPENSE_OPTIONAL_FIELDS:
        fields[name] = _OPTIONAL_VALIDATORS[name](data.get(name))
    return fields


def expense_patch(payload: object) -> dict[str, Any]:
    """Return only the expense fields present in ``payload``, validated.

    An explicit ``null`` clears optional metadata but is rejected for the
    ledger-bearing fields ``amount`` and ``category_id``.
    """
    data = _require_mapping(payload)
    _reject_unknown(data, EXPENSE_FIELDS)
    changes: dict[str, Any] = {}
    if "category_id" in data:
        if data["category_id"] is None:
            raise InvalidInput("category_id cannot be null")
        changes["category_id"] = parse_id(data["category_id"], "category_id")
    if "amount" in data:
        if data["amount"] is None:
            raise InvalidInput("amount cannot be null")
        changes["amount"] = validate_expense_amount(data["amount"])
    for name in _EXPENSE_OPTIONAL_FIELDS & set(data):
        changes[name] = _OPTIONAL_VALIDATORS[name](data[name])
    if not changes:
        raise InvalidInput("No updatable fields supplied")
    return changes
