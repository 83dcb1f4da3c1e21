"""Infrastructure layer — candidate providers, snapshots, namespace policy.

This layer depends on stdlib, pydantic and ruamel.yaml, and on domain
models for the shapes it returns. It must never import from services,
commands, or output.
"""
