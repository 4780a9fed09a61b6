"""Service layer: validation, coverage and project orchestration.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
