"""SelectionPipeline — turn a SelectorSpec into the list of candidate pods.

Stages, in order:
1. Explicit pick: ``selector.pods`` non-empty → fetch each listed pod and
   return immediately. No other stage runs, even if the selector also sets
   labels, namespaces, annotations or phases.
2. Bulk fetch by label and field selectors.
3. Node filter (explicit node names and/or node label selectors).
4. Namespace allow/deny policy.
5. Namespace requirement expression against ``{namespace: ""}``.
6. Annotation requirement expression against the pod's annotations.
7. Phase requirement expression against ``{phase: ""}``.

The membership tester (:func:`check_pod_meets_selector`) evaluates a single
pod without a provider. It covers the explicit pick, labels, and stages 5-7;
field selectors, nodes and the namespace policy are NOT evaluated there.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from chaosselect.domain.errors import ProviderError, SelectionError
from chaosselect.domain.requirements import (
    RequirementExpression,
    annotation_key_set,
    labels_match,
    namespace_key_set,
    parse_requirements,
    phase_key_set,
)
from chaosselect.infrastructure.context import CallContext
from chaosselect.infrastructure.policy import ALLOW_ALL
from chaosselect.services.telemetry import record_counts, trace_span

if TYPE_CHECKING:
    from chaosselect.domain.models import Node, Pod
    from chaosselect.domain.spec import SelectorSpec
    from chaosselect.infrastructure.policy import NamespacePolicy
    from chaosselect.infrastructure.provider import CandidateProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedSelector:
    """The three requirement expressions of a selector, parsed once."""

    namespaces: RequirementExpression
    annotations: RequirementExpression
    phases: RequirementExpression

    @classmethod
    def from_spec(cls, selector: SelectorSpec) -> ParsedSelector:
        return cls(
            namespaces=parse_requirements(selector.namespace_expression()),
            annotations=parse_requirements(selector.annotation_expression()),
            phases=parse_requirements(selector.phase_expression()),
        )

    def apply(self, pods: list[Pod]) -> list[Pod]:
        """Run the namespace, annotation and phase filters in order."""
        with trace_span("filter_namespaces") as span:
            pods = self.namespaces.filter(pods, namespace_key_set)
            record_counts(span, pods=len(pods))
        with trace_span("filter_annotations") as span:
            pods = self.annotations.filter(pods, annotation_key_set)
            record_counts(span, pods=len(pods))
        with trace_span("filter_phases") as span:
            pods = self.phases.filter(pods, phase_key_set)
            record_counts(span, pods=len(pods))
        return pods


def check_pod_meets_selector(pod: Pod, selector: SelectorSpec) -> bool:
    """Whether a single *pod* satisfies *selector*.

    Cheaper than a full selection: no provider is consulted. Field
    selectors, node constraints and the namespace policy are not checked.

    Raises:
        SelectorParseError: If an expression is malformed.
        UnsupportedOperatorError: If an expression uses a non-existence operator.
    """
    if selector.pods:
        names = selector.pods.get(pod.namespace)
        if names is None or pod.name not in names:
            return False

    if selector.label_selectors and (
        not pod.labels or not labels_match(selector.label_selectors, pod.labels)
    ):
        return False

    parsed = ParsedSelector.from_spec(selector)
    return bool(parsed.apply([pod]))


class SelectionPipeline:
    """Runs the selection stages against a provider.

    Holds no per-call state; one pipeline may serve concurrent calls as
    long as its provider and policy are safe for concurrent use.
    """

    def __init__(
        self,
        provider: CandidateProvider,
        policy: NamespacePolicy | None = None,
    ) -> None:
        self._provider = provider
        self._policy = policy if policy is not None else ALLOW_ALL

    # ------------------------------------------------------------------
    # provider access
    # ------------------------------------------------------------------

    def _call[R](self, operation: str, ctx: CallContext, fn: Callable[..., R], *args: Any) -> R:
        """Invoke a provider method, honouring *ctx* and normalizing errors."""
        ctx.check(operation)
        try:
            return fn(*args, ctx=ctx)
        except SelectionError:
            raise
        except Exception as exc:
            msg = f"{operation} failed: {exc}"
            raise ProviderError(msg, operation=operation) from exc

    # ------------------------------------------------------------------
    # select_pods
    # ------------------------------------------------------------------

    def select_pods(
        self,
        selector: SelectorSpec,
        *,
        ctx: CallContext | None = None,
        warnings: list[str] | None = None,
    ) -> list[Pod]:
        """Return the pods matching *selector*, in provider order.

        Args:
            selector: What to select.
            ctx: Cancellation/deadline for provider calls.
            warnings: If given, not-found explicit picks are appended here.

        Raises:
            ProviderError: On provider failure or cancellation.
            SelectorParseError: If an expression is malformed.
            UnsupportedOperatorError: If an expression uses a non-existence operator.
        """
        ctx = ctx if ctx is not None else CallContext()

        if selector.pods:
            return self._pick_explicit(selector.pods, ctx, warnings)

        parsed = ParsedSelector.from_spec(selector)

        with trace_span("list_pods") as span:
            pods = self._call(
                "list pods",
                ctx,
                self._provider.list_pods,
                selector.label_selectors,
                selector.field_selectors,
            )
            record_counts(span, pods=len(pods))

        if selector.has_node_constraints:
            with trace_span("filter_nodes") as span:
                nodes = self._resolve_nodes(selector, ctx)
                pods = filter_pods_by_node(pods, nodes)
                record_counts(span, nodes=len(nodes), pods=len(pods))

        with trace_span("filter_policy") as span:
            pods = self._filter_by_policy(pods)
            record_counts(span, pods=len(pods))

        pods = parsed.apply(pods)
        logger.debug("Selected %d pods", len(pods))
        return pods

    def check_pod_meets_selector(self, pod: Pod, selector: SelectorSpec) -> bool:
        """See :func:`check_pod_meets_selector`."""
        return check_pod_meets_selector(pod, selector)

    # ------------------------------------------------------------------
    # stages
    # ------------------------------------------------------------------

    def _pick_explicit(
        self,
        picks: dict[str, list[str]],
        ctx: CallContext,
        warnings: list[str] | None,
    ) -> list[Pod]:
        pods: list[Pod] = []
        with trace_span("pick_explicit") as span:
            for namespace, names in picks.items():
                if not self._policy.is_allowed(namespace):
                    # explicit picks bypass every filter, the policy included
                    logger.info("Explicit pick in namespace %s is outside policy", namespace)
                for name in names:
                    pod = self._call("get pod", ctx, self._provider.get_pod, namespace, name)
                    if pod is None:
                        logger.warning("Pod %s/%s is not found, skipping", namespace, name)
                        if warnings is not None:
                            warnings.append(f"Pod {namespace}/{name} not found")
                        continue
                    pods.append(pod)
            record_counts(span, pods=len(pods))
        return pods

    def _resolve_nodes(self, selector: SelectorSpec, ctx: CallContext) -> list[Node]:
        """Explicit node names (not-found ignored) plus label-selected nodes."""
        nodes: list[Node] = []
        for name in selector.nodes:
            node = self._call("get node", ctx, self._provider.get_node, name)
            if node is None:
                logger.debug("Node %s is not found, ignoring", name)
                continue
            nodes.append(node)
        if selector.node_selectors:
            nodes.extend(
                self._call("list nodes", ctx, self._provider.list_nodes, selector.node_selectors)
            )
        return nodes

    def _filter_by_policy(self, pods: list[Pod]) -> list[Pod]:
        kept: list[Pod] = []
        for pod in pods:
            if self._policy.is_allowed(pod.namespace):
                kept.append(pod)
            else:
                logger.info("Filtered pod %s by namespace policy", pod.key)
        return kept


def filter_pods_by_node(pods: list[Pod], nodes: list[Node]) -> list[Pod]:
    """Keep pods scheduled on one of *nodes*. No nodes → no pods."""
    names = {node.name for node in nodes}
    if not names:
        return []
    return [pod for pod in pods if pod.node_name in names]
