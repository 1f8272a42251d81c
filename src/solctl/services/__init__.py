"""Service layer — validation, transaction building, and orchestration.

Services may import from domain and infrastructure layers.
They must never import from commands, output, or config.settings.
"""
