"""Snapshot and spec documents on disk.

Both are YAML (JSON is accepted as the YAML subset it is). A snapshot is
either a mapping with ``pods`` and ``nodes`` lists, or a ``kind: List``
document whose ``items`` are sorted into pods and nodes by ``kind``. Items
may be Kubernetes manifests or flat :class:`Pod`/:class:`Node` dicts.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from chaosselect.domain.models import Node, Pod
from chaosselect.domain.spec import TargetSpec


class ClusterSnapshot(BaseModel):
    """Pods and nodes captured at one point in time."""

    model_config = {"frozen": True}

    pods: list[Pod] = Field(default_factory=list)
    nodes: list[Node] = Field(default_factory=list)


def read_document(path: Path) -> Any:
    """Load one YAML/JSON document.

    Raises:
        ValueError: If the file can't be read or parsed.
    """
    try:
        return YAML(typ="safe").load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeError, YAMLError) as exc:
        msg = f"Cannot read {path}: {exc}"
        raise ValueError(msg) from exc


def _pod(item: dict[str, Any]) -> Pod:
    if "metadata" in item:
        return Pod.from_manifest(item)
    return Pod.model_validate(item)


def _node(item: dict[str, Any]) -> Node:
    if "metadata" in item:
        return Node.from_manifest(item)
    return Node.model_validate(item)


def _mappings(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    value = data.get(key) or []
    if not isinstance(value, list):
        msg = f"Snapshot {key} must be a list"
        raise ValueError(msg)
    for item in value:
        if not isinstance(item, dict):
            msg = f"Snapshot {key} must be mappings, got {type(item).__name__}"
            raise ValueError(msg)
    return list(value)


def parse_snapshot(data: Any) -> ClusterSnapshot:
    """Build a snapshot from an already-loaded document.

    Raises:
        ValueError: If the document has an unexpected shape.
    """
    if data is None:
        return ClusterSnapshot()
    if not isinstance(data, dict):
        msg = "Snapshot must be a mapping"
        raise ValueError(msg)

    raw_pods = _mappings(data, "pods")
    raw_nodes = _mappings(data, "nodes")
    for item in _mappings(data, "items"):
        kind = item.get("kind")
        if kind == "Pod":
            raw_pods.append(item)
        elif kind == "Node":
            raw_nodes.append(item)

    try:
        return ClusterSnapshot(
            pods=[_pod(item) for item in raw_pods],
            nodes=[_node(item) for item in raw_nodes],
        )
    except KeyError as exc:
        msg = f"Snapshot item is missing required field {exc}"
        raise ValueError(msg) from exc
    except (AttributeError, TypeError) as exc:
        msg = f"Snapshot item is malformed: {exc}"
        raise ValueError(msg) from exc


def load_snapshot(path: Path) -> ClusterSnapshot:
    """Read and parse a snapshot file.

    Raises:
        ValueError: On unreadable files or malformed content (pydantic's
            ``ValidationError`` is a ``ValueError``).
    """
    return parse_snapshot(read_document(path))


def load_target_spec(path: Path) -> TargetSpec:
    """Read a target spec document (nested ``selector`` or flat).

    Raises:
        ValueError: On unreadable files or invalid specs.
    """
    data = read_document(path)
    if data is None:
        return TargetSpec()
    try:
        return TargetSpec.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid target spec in {path}: {exc}"
        raise ValueError(msg) from exc
