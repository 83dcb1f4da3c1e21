"""Typed payload contracts for service and adapter boundaries.

These models validate operation payload shapes before they leave the
service layer so key regressions (for example ``pods`` vs ``items``)
fail fast in tests and during development.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from chaosselect.domain.models import Pod


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class PodItem(BaseModel):
    """One selected pod."""

    namespace: str
    name: str
    phase: str
    node: str | None = None

    @classmethod
    def from_pod(cls, pod: Pod) -> PodItem:
        return cls(namespace=pod.namespace, name=pod.name, phase=str(pod.phase), node=pod.node_name)


class SelectPodsResultData(BaseModel):
    """Payload contract for ``TargetingService.select_pods``."""

    count: int
    pods: list[PodItem]


class SelectAndFilterResultData(BaseModel):
    """Payload contract for ``TargetingService.select_and_filter_pods``."""

    mode: str
    value: str
    candidates: int
    count: int
    pods: list[PodItem]


class CheckPodResultData(BaseModel):
    """Payload contract for ``TargetingService.check_pod``."""

    namespace: str
    name: str
    meets: bool


class ParseResultData(BaseModel):
    """Payload contract for ``TargetingService.parse_expression``."""

    expression: str
    requirements: list[dict[str, Any]]
