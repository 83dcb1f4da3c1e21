"""Service layer — selection pipeline and targeting operations.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
