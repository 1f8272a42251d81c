"""Infrastructure layer — ledger gateway, keypairs, and session context."""
