"""Database and ledger wiring for the Flask application."""

from __future__ import annotations

from flask import Flask, current_app
from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import bootstrap_database
from .services.ledger_service import LedgerFacade

EXTENSION_KEY = "budgetledger"


def init_db(app: Flask) -> None:
    """Create the engine and schema, then attach a LedgerFacade to the app.

    Nothing is request-scoped: every ledger call opens and closes its own
    unit of work.
    """

    config: BaseConfig = app.config["BUDGETLEDGER_CONFIG"]
    engine, session_factory = bootstrap_database(config)
    app.extensions[EXTENSION_KEY] = {
        "engine": engine,
        "ledger": LedgerFacade(session_factory, retries=config.TX_RETRIES),
    }


def get_ledger() -> LedgerFacade:
    """Return the ledger bound to the current application."""

    return current_app.extensions[EXTENSION_KEY]["ledger"]


def get_engine() -> Engine:
    """Return the initialized SQLModel engine."""

    state = current_app.extensions.get(EXTENSION_KEY)
    if state is None:  # pragma: no cover - exercised in integration tests
        raise RuntimeError("Database engine not initialized")
    return state["engine"]
