"""Domain layer: dependency graph, declarations, and resolver errors.

This layer depends only on stdlib and networkx.
It must never import from services, infrastructure, commands, or config.
"""
