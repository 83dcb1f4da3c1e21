"""Pod and node snapshots.

Both are frozen views fetched fresh per selection call. ``from_manifest``
builds them from Kubernetes-style manifests (``metadata``/``spec``/``status``)
so that ``kubectl get -o json`` output can be used as a snapshot directly.
"""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, Field

from chaosselect.domain.types import PodPhase


class Pod(BaseModel):
    """A managed runtime instance eligible for targeting."""

    model_config = {"frozen": True}

    namespace: str
    name: str
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    phase: PodPhase = PodPhase.PENDING
    node_name: str | None = None

    @property
    def key(self) -> str:
        """``namespace/name`` identity string."""
        return f"{self.namespace}/{self.name}"

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> Self:
        """Build a Pod from a Kubernetes pod manifest.

        Missing sections are treated as empty. ``metadata.namespace``
        defaults to ``default`` like the API server does.
        """
        metadata = manifest.get("metadata") or {}
        spec = manifest.get("spec") or {}
        status = manifest.get("status") or {}
        phase = status.get("phase") or PodPhase.PENDING
        return cls(
            namespace=metadata.get("namespace") or "default",
            name=metadata["name"],
            labels=dict(metadata.get("labels") or {}),
            annotations=dict(metadata.get("annotations") or {}),
            phase=phase,
            node_name=spec.get("nodeName") or None,
        )


class Node(BaseModel):
    """A host machine that may carry zero or more pods."""

    model_config = {"frozen": True}

    name: str
    labels: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> Self:
        """Build a Node from a Kubernetes node manifest."""
        metadata = manifest.get("metadata") or {}
        return cls(name=metadata["name"], labels=dict(metadata.get("labels") or {}))
