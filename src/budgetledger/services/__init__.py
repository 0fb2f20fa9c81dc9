"""Ledger services: validation, reconciliation, transfers and the facade.

Submodules are imported directly (``from budgetledger.services import
validation``) because the stores depend on ``validation`` while the facade
depends on the stores.
"""
