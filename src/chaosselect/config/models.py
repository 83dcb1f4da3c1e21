"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, chaosselect.toml only contains
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel

# --- chaosselect.toml sections ---


class PolicyConfig(BaseModel):
    """[policy] section — namespace allow/deny regexes.

    ``allowed_namespaces`` takes precedence when both are set.
    """

    model_config = {"frozen": True}

    allowed_namespaces: str | None = None
    ignored_namespaces: str | None = None


class SamplingConfig(BaseModel):
    """[sampling] section."""

    model_config = {"frozen": True}

    seed: int | None = None


class ProviderConfig(BaseModel):
    """[provider] section."""

    model_config = {"frozen": True}

    snapshot: str | None = None
    timeout_seconds: float | None = None

