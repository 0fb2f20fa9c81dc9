"""Expense routes."""

from __future__ import annotations

from flask import request

from ...extensions import get_ledger
from ..common import json_body, success
from . import bp


@bp.post("")
def create_expense():
    expense = get_ledger().create_expense(json_body())
    return success(expense.to_dict(), 201)


@bp.get("")
def list_expenses():
    category_id = request.args.get("category_id") or None
    expenses = get_ledger().list_expenses(category_id=category_id)
    return success({"items": [expense.to_dict() for expense in expenses]})


@bp.get("/<expense_id>")
def get_expense(expense_id: str):
    return success(get_ledger().get_expense(expense_id).to_dict())


@bp.route("/<expense_id>", methods=["PUT", "PATCH"])
def update_expense(expense_id: str):
    expense = get_ledger().update_expense(expense_id, json_body())
    return success(expense.to_dict())


@bp.delete("/<expense_id>")
def delete_expense(expense_id: str):
    get_ledger().delete_expense(expense_id)
    return success({"message": f"Expense {expense_id} deleted."})
