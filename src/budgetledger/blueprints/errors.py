"""Translate ledger exceptions into JSON error responses."""

from __future__ import annotations

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..errors import Internal, InvalidInput, LedgerError, TransactionTimeout
from ..logging_config import get_logger

logger = get_logger("blueprints.errors")

RETRY_AFTER_SECONDS = 1


def register_error_handlers(app: Flask) -> None:
    """Map the ledger error taxonomy onto HTTP status codes."""

    @app.errorhandler(LedgerError)
    def handle_ledger_error(exc: LedgerError):
        extra = {"path": request.path, "method": request.method, "code": exc.code}
        if isinstance(exc, Internal):
            logger.error("Request failed: %s", exc.message, extra=extra)
        elif isinstance(exc, InvalidInput):
            logger.warning("Rejected input: %s", exc.message, extra=extra)
        else:
            logger.info("Request refused: %s", exc.message, extra=extra)
        response = jsonify(exc.to_dict())
        response.status_code = exc.status_code
        if isinstance(exc, TransactionTimeout):
            response.headers["Retry-After"] = str(RETRY_AFTER_SECONDS)
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        response = jsonify({"error": exc.name.lower().replace(" ", "_"), "message": exc.description})
        response.status_code = exc.code or 500
        return response
