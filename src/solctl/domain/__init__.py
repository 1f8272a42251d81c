"""Domain layer — command hierarchy, errors, units, and ledger state.

This layer depends only on stdlib, pydantic, and solders.
It must never import from services, infrastructure, commands, or config.
"""
