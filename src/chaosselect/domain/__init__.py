"""Domain layer — pods, selectors, requirement matching, and sampling.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
