"""Configuration resolution from environment variables."""

from __future__ import annotations

import pytest

from budgetledger import create_app
from budgetledger.config import BaseConfig, DevConfig, TestConfig


def test_defaults_build_sqlite_url_in_data_dir(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("BUDGETLEDGER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("BUDGETLEDGER_DATABASE_URL", raising=False)
    monkeypatch.delenv("BUDGETLEDGER_TX_TIMEOUT", raising=False)
    monkeypatch.delenv("BUDGETLEDGER_TX_RETRIES", raising=False)

    config = BaseConfig()

    assert config.DATA_DIR == (tmp_path / "data").resolve()
    assert config.DATA_DIR.is_dir()
    assert config.DATABASE_URL == f"sqlite:///{config.DATA_DIR / 'budgetledger.db'}"
    assert config.TX_TIMEOUT == 5.0
    assert config.TX_RETRIES == 2
    options = config.sqlalchemy_engine_options()
    assert options["connect_args"] == {"check_same_thread": False, "timeout": 5.0}


def test_non_sqlite_urls_skip_sqlite_connect_args(ledger_config, monkeypatch):
    monkeypatch.setenv("BUDGETLEDGER_DATABASE_URL", "postgresql+psycopg://ledger@localhost/ledger")

    config = BaseConfig()

    assert not config.is_sqlite
    assert "connect_args" not in config.sqlalchemy_engine_options()


@pytest.mark.parametrize(
    "name, value",
    [("BUDGETLEDGER_TX_TIMEOUT", "0"), ("BUDGETLEDGER_TX_TIMEOUT", "soon"), ("BUDGETLEDGER_TX_RETRIES", "-1")],
)
def test_invalid_transaction_settings(ledger_config, monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        BaseConfig()


def test_secret_key_required_outside_dev_mode(ledger_config, monkeypatch):
    monkeypatch.setenv("BUDGETLEDGER_DEV_MODE", "false")
    monkeypatch.delenv("BUDGETLEDGER_SECRET_KEY", raising=False)

    with pytest.raises(ValueError):
        BaseConfig()


@pytest.mark.parametrize(
    "name, expected",
    [("development", DevConfig), ("testing", TestConfig), (None, BaseConfig), ("unknown", BaseConfig)],
)
def test_create_app_resolves_config(ledger_config, name, expected):
    app = create_app(name)
    try:
        assert type(app.config["BUDGETLEDGER_CONFIG"]) is expected
        assert app.config["TESTING"] is (expected is TestConfig)
    finally:
        app.extensions["budgetledger"]["engine"].dispose()
