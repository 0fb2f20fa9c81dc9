"""Domain-layer contracts for the ledger."""
