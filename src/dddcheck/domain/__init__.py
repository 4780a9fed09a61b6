"""Domain layer: node catalog, spec variants, graph model, findings.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
