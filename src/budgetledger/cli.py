"""Flask CLI commands for BudgetLedger."""

from __future__ import annotations

import click


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("budgetledger-init-db")
    def budgetledger_init_db() -> None:
        """Create the category and expense tables."""

        from .extensions import get_engine
        from .infra.database import init_database

        init_database(get_engine())
        click.echo("Database schema is up to date.")

    @app.cli.command("budgetledger-verify")
    def budgetledger_verify() -> None:
        """Audit every category's balances against the expense ledger."""

        from .extensions import get_ledger

        drifts = get_ledger().verify_balances()
        if not drifts:
            click.echo("All category balances reconcile.")
            return
        for drift in drifts:
            click.echo(f"category {drift.category_id} {drift.name}: {drift.issue}", err=True)
        raise click.exceptions.Exit(1)
