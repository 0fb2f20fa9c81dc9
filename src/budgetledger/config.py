"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_number(name: str, default: float, cast=float):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return cast(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be numeric, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "BudgetLedger"
    DB_FILENAME = "budgetledger.db"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}
    DEBUG = False
    TESTING = False

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("BUDGETLEDGER_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("BUDGETLEDGER_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("BUDGETLEDGER_DATABASE_URL", self._build_sqlite_url())
        self.TX_TIMEOUT = _env_number("BUDGETLEDGER_TX_TIMEOUT", 5.0)
        self.TX_RETRIES = _env_number("BUDGETLEDGER_TX_RETRIES", 2, cast=int)
        if self.TX_TIMEOUT <= 0:
            raise ValueError("BUDGETLEDGER_TX_TIMEOUT must be greater than zero.")
        if self.TX_RETRIES < 0:
            raise ValueError("BUDGETLEDGER_TX_RETRIES cannot be negative.")
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("BUDGETLEDGER_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("BUDGETLEDGER_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        engine_options: dict[str, Any] = {"pool_pre_ping": True}
        if self.is_sqlite:
            # pysqlite's timeout is the busy wait applied to every lock acquisition.
            engine_options["connect_args"] = {
                "check_same_thread": False,
                "timeout": self.TX_TIMEOUT,
            }
        return engine_options


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True


class TestConfig(BaseConfig):
    """Configuration used by the test-suite and `create_app("testing")`."""

    __test__ = False
    TESTING = True
