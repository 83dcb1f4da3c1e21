"""CandidateProvider — the read interface onto the cluster.

The selection pipeline depends only on the :class:`CandidateProvider`
protocol. :class:`InMemoryProvider` serves a fixed snapshot and is what the
CLI and the tests use; a live API client would implement the same four
methods.

Contract:
- ``get_pod`` / ``get_node`` return None for not-found.
- Any other failure raises :class:`ProviderError`.
- Every method receives the caller's :class:`CallContext`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Protocol

from chaosselect.domain.errors import ProviderError
from chaosselect.domain.requirements import labels_match

if TYPE_CHECKING:
    from chaosselect.domain.models import Node, Pod
    from chaosselect.infrastructure.context import CallContext
    from chaosselect.infrastructure.snapshot import ClusterSnapshot

logger = logging.getLogger(__name__)


class CandidateProvider(Protocol):
    """Source of pods and nodes for one selection call."""

    def get_pod(self, namespace: str, name: str, *, ctx: CallContext) -> Pod | None: ...

    def list_pods(
        self,
        label_selectors: Mapping[str, str],
        field_selectors: Mapping[str, str],
        *,
        ctx: CallContext,
    ) -> list[Pod]: ...

    def get_node(self, name: str, *, ctx: CallContext) -> Node | None: ...

    def list_nodes(self, label_selectors: Mapping[str, str], *, ctx: CallContext) -> list[Node]: ...


# Field selector paths the in-memory provider can evaluate.
POD_FIELDS: dict[str, Callable[[Pod], str]] = {
    "metadata.name": lambda pod: pod.name,
    "metadata.namespace": lambda pod: pod.namespace,
    "spec.nodeName": lambda pod: pod.node_name or "",
    "status.phase": lambda pod: str(pod.phase),
}


class InMemoryProvider:
    """Snapshot-backed provider. Listing preserves snapshot order."""

    def __init__(self, pods: Iterable[Pod] = (), nodes: Iterable[Node] = ()) -> None:
        self._pods = list(pods)
        self._nodes = list(nodes)
        self._pod_index = {(p.namespace, p.name): p for p in self._pods}
        self._node_index = {n.name: n for n in self._nodes}

    @classmethod
    def from_snapshot(cls, snapshot: ClusterSnapshot) -> InMemoryProvider:
        return cls(snapshot.pods, snapshot.nodes)

    def get_pod(self, namespace: str, name: str, *, ctx: CallContext) -> Pod | None:
        ctx.check("get pod")
        return self._pod_index.get((namespace, name))

    def list_pods(
        self,
        label_selectors: Mapping[str, str],
        field_selectors: Mapping[str, str],
        *,
        ctx: CallContext,
    ) -> list[Pod]:
        ctx.check("list pods")
        unsupported = sorted(set(field_selectors) - set(POD_FIELDS))
        if unsupported:
            msg = f"field label not supported: {', '.join(unsupported)}"
            raise ProviderError(msg, fields=unsupported)

        pods = [
            pod
            for pod in self._pods
            if labels_match(label_selectors, pod.labels)
            and all(POD_FIELDS[path](pod) == value for path, value in field_selectors.items())
        ]
        logger.debug("Listed %d of %d pods", len(pods), len(self._pods))
        return pods

    def get_node(self, name: str, *, ctx: CallContext) -> Node | None:
        ctx.check("get node")
        return self._node_index.get(name)

    def list_nodes(self, label_selectors: Mapping[str, str], *, ctx: CallContext) -> list[Node]:
        ctx.check("list nodes")
        return [node for node in self._nodes if labels_match(label_selectors, node.labels)]
