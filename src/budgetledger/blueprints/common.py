"""Request helpers shared by the JSON blueprints."""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify, request

from ..errors import InvalidInput


def json_body() -> dict[str, Any]:
    if not request.is_json:
        raise InvalidInput("Request content must be application/json")
    data = request.get_json(silent=True)
    if data is None:
        raise InvalidInput("Malformed JSON body")
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object")
    return data


def success(payload: Any, status: int = 200) -> tuple[Response, int]:
    return jsonify(payload), status
