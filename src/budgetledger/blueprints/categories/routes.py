"""Category and transfer routes."""

from __future__ import annotations

from ...extensions import get_ledger
from ..common import json_body, success
from . import bp


@bp.post("")
def create_category():
    category = get_ledger().create_category(json_body())
    return success(category.to_dict(), 201)


@bp.get("")
def list_categories():
    categories = get_ledger().list_categories()
    return success({"items": [category.to_dict() for category in categories]})


@bp.get("/<category_id>")
def get_category(category_id: str):
    return success(get_ledger().get_category(category_id).to_dict())


@bp.route("/<category_id>", methods=["PUT", "PATCH"])
def update_category(category_id: str):
    category = get_ledger().update_category(category_id, json_body())
    return success(category.to_dict())


@bp.delete("/<category_id>")
def delete_category(category_id: str):
    get_ledger().delete_category(category_id)
    return success({"message": f"Category {category_id} deleted."})


@bp.post("/transfer/<from_id>/<to_id>")
def transfer_budget(from_id: str, to_id: str):
    payload = json_body()
    # Older clients send the amount as ``transferAmt``.
    amount = payload.get("amount", payload.get("transferAmt"))
    result = get_ledger().transfer(from_id, to_id, amount)
    return success(result.to_dict())


@bp.get("/<category_id>/expenses")
def list_category_expenses(category_id: str):
    ledger = get_ledger()
    ledger.get_category(category_id)
    expenses = ledger.list_expenses(category_id=category_id)
    return success(
        {"items": [expense.to_dict() for expense in expenses], "count": len(expenses)},
    )
