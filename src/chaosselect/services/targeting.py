"""TargetingService — select, sample and check pods for an experiment.

Four surfaces, all returning ServiceResult:
- select_pods: run the selection pipeline only
- select_and_filter_pods: pipeline, then the mode's sampler
- check_pod: membership test of a single pod
- parse_expression: show how a requirement expression is parsed
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from chaosselect.domain.errors import EmptyPoolError, SelectionError
from chaosselect.domain.requirements import parse_requirements
from chaosselect.domain.sampling import Sampler
from chaosselect.services.base import BaseService
from chaosselect.services.contracts import (
    CheckPodResultData,
    ParseResultData,
    PodItem,
    SelectAndFilterResultData,
    SelectPodsResultData,
    dump_validated,
)
from chaosselect.services.result import ServiceResult
from chaosselect.services.selector import SelectionPipeline
from chaosselect.services.telemetry import record_counts, trace_span, traced

if TYPE_CHECKING:
    from chaosselect.domain.models import Pod
    from chaosselect.domain.spec import SelectorSpec, TargetSpec
    from chaosselect.infrastructure.context import CallContext
    from chaosselect.infrastructure.policy import NamespacePolicy
    from chaosselect.infrastructure.provider import CandidateProvider


def select_and_filter_pods(
    target: TargetSpec,
    pipeline: SelectionPipeline,
    sampler: Sampler,
    *,
    ctx: CallContext | None = None,
    warnings: list[str] | None = None,
) -> tuple[list[Pod], list[Pod]]:
    """Select candidates for *target* and sample the final targets.

    Returns ``(candidates, targets)``.

    Raises:
        EmptyPoolError: If the pipeline selects no pod.
        SelectionError: Any pipeline or sampling error.
    """
    candidates = pipeline.select_pods(target.selector, ctx=ctx, warnings=warnings)
    if not candidates:
        msg = "no pod is selected"
        raise EmptyPoolError(msg)
    with trace_span("sample") as span:
        targets = sampler.sample(candidates, target.mode, target.value)
        record_counts(span, mode=str(target.mode), pods=len(targets))
    return candidates, targets


class TargetingService(BaseService):
    """Answers "which pods does this experiment act on, and how many"."""

    def __init__(
        self,
        provider: CandidateProvider,
        *,
        policy: NamespacePolicy | None = None,
        sampler: Sampler | None = None,
    ) -> None:
        super().__init__(provider, policy=policy)
        self._pipeline = SelectionPipeline(provider, self._policy)
        self._sampler = sampler if sampler is not None else Sampler()

    @property
    def pipeline(self) -> SelectionPipeline:
        return self._pipeline

    # ------------------------------------------------------------------
    # select_pods: pipeline only
    # ------------------------------------------------------------------

    @traced
    def select_pods(
        self,
        selector: SelectorSpec,
        *,
        ctx: CallContext | None = None,
    ) -> ServiceResult:
        """Run the selection pipeline. An empty selection is a success."""
        op = "select_pods"
        warnings: list[str] = []
        with structlog.contextvars.bound_contextvars(op=op):
            try:
                pods = self._pipeline.select_pods(selector, ctx=ctx, warnings=warnings)
            except SelectionError as exc:
                return self._fail(op, exc, warnings)

        data = dump_validated(
            SelectPodsResultData,
            {"count": len(pods), "pods": [PodItem.from_pod(p) for p in pods]},
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    # ------------------------------------------------------------------
    # select_and_filter_pods: pipeline + sampler
    # ------------------------------------------------------------------

    @traced
    def select_and_filter_pods(
        self,
        target: TargetSpec,
        *,
        ctx: CallContext | None = None,
    ) -> ServiceResult:
        """Select candidates and sample the final targets by ``target.mode``.

        Fails with ``NO_POD_SELECTED`` when nothing matches.
        """
        op = "select_and_filter_pods"
        warnings: list[str] = []
        with structlog.contextvars.bound_contextvars(op=op, mode=str(target.mode)):
            try:
                candidates, targets = select_and_filter_pods(
                    target,
                    self._pipeline,
                    self._sampler,
                    ctx=ctx,
                    warnings=warnings,
                )
            except SelectionError as exc:
                return self._fail(op, exc, warnings)

        data = dump_validated(
            SelectAndFilterResultData,
            {
                "mode": str(target.mode),
                "value": target.value,
                "candidates": len(candidates),
                "count": len(targets),
                "pods": [PodItem.from_pod(p) for p in targets],
            },
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    # ------------------------------------------------------------------
    # check_pod: single-pod membership
    # ------------------------------------------------------------------

    @traced
    def check_pod(self, pod: Pod, selector: SelectorSpec) -> ServiceResult:
        """Whether *pod* meets *selector* (no field/node/policy checks)."""
        op = "check_pod"
        try:
            meets = self._pipeline.check_pod_meets_selector(pod, selector)
        except SelectionError as exc:
            return self._fail(op, exc)

        data = dump_validated(
            CheckPodResultData,
            {"namespace": pod.namespace, "name": pod.name, "meets": meets},
        )
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # parse_expression
    # ------------------------------------------------------------------

    def parse_expression(self, text: str) -> ServiceResult:
        """Parse *text* and list its requirements.

        Non-existence operators are reported as a warning since the matcher
        would reject them.
        """
        op = "parse_expression"
        try:
            expression = parse_requirements(text)
        except SelectionError as exc:
            return self._fail(op, exc)

        warnings = [
            f"Operator {req.operator.value!r} in {str(req)!r} is not supported by the matcher"
            for req in expression.requirements
            if not req.operator.is_existence
        ]
        data = dump_validated(
            ParseResultData,
            {
                "expression": str(expression),
                "requirements": [
                    {"key": req.key, "operator": req.operator.name, "values": list(req.values)}
                    for req in expression.requirements
                ],
            },
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
