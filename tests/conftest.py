"""Shared pytest fixtures and test helpers for chaosselect tests."""

from __future__ import annotations

import json
import logging
import random
from collections.abc import Callable, Generator, Mapping
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from chaosselect.domain.models import Node, Pod
from chaosselect.domain.sampling import Sampler
from chaosselect.domain.types import PodPhase
from chaosselect.infrastructure.provider import InMemoryProvider
from chaosselect.services.telemetry import _current_span, disable_telemetry


@pytest.fixture(autouse=True)
def _reset_global_state() -> Generator[None]:
    """Undo what AppContext does to process-wide state.

    ``-v`` enables telemetry through a ContextVar and every CLI invocation
    reconfigures logging; neither may leak into the next test.
    """
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    app_logger = logging.getLogger("chaosselect")
    app_level = app_logger.level
    yield
    disable_telemetry()
    _current_span.set(None)
    structlog.contextvars.clear_contextvars()
    root.handlers = original_handlers
    root.setLevel(original_level)
    app_logger.setLevel(app_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run from an empty temp dir with no CHAOSSELECT_* variables.

    Use via ``@pytest.mark.usefixtures("_isolated_cwd")`` so config
    discovery never finds a chaosselect.toml outside the test.
    """
    monkeypatch.chdir(tmp_path)
    for name in ("CHAOSSELECT_CONFIG", "CHAOSSELECT_SEED"):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Pods, nodes and providers
# ---------------------------------------------------------------------------


def make_pod(
    namespace: str = "default",
    name: str = "pod-0",
    *,
    labels: Mapping[str, str] | None = None,
    annotations: Mapping[str, str] | None = None,
    phase: PodPhase | str = PodPhase.RUNNING,
    node: str | None = None,
) -> Pod:
    return Pod(
        namespace=namespace,
        name=name,
        labels=dict(labels or {}),
        annotations=dict(annotations or {}),
        phase=phase,
        node_name=node,
    )


@pytest.fixture
def pod_factory() -> Callable[..., Pod]:
    return make_pod


@pytest.fixture
def cluster_pods() -> list[Pod]:
    """Five pods across three namespaces and three nodes, in listing order."""
    return [
        make_pod(
            "default",
            "web-0",
            labels={"app": "web"},
            annotations={"chaos.io/target": "yes"},
            node="node-a",
        ),
        make_pod("default", "web-1", labels={"app": "web"}, node="node-b"),
        make_pod(
            "default",
            "db-0",
            labels={"app": "db"},
            annotations={"backup": "daily"},
            phase=PodPhase.PENDING,
            node="node-a",
        ),
        make_pod("kube-system", "coredns-0", labels={"app": "dns"}, node="node-b"),
        make_pod(
            "staging",
            "web-0",
            labels={"app": "web"},
            phase=PodPhase.SUCCEEDED,
            node="node-c",
        ),
    ]


@pytest.fixture
def cluster_nodes() -> list[Node]:
    return [
        Node(name="node-a", labels={"zone": "us-east"}),
        Node(name="node-b", labels={"zone": "us-west"}),
        Node(name="node-c", labels={"zone": "us-east", "role": "gpu"}),
    ]


@pytest.fixture
def provider(cluster_pods: list[Pod], cluster_nodes: list[Node]) -> InMemoryProvider:
    """In-memory provider over the standard test cluster."""
    return InMemoryProvider(cluster_pods, cluster_nodes)


class FailingProvider(InMemoryProvider):
    """Provider whose listed operations raise *error*."""

    def __init__(self, error: Exception, *, fail_on: tuple[str, ...] = ("list_pods",)) -> None:
        super().__init__([make_pod("default", "web-0")], [Node(name="node-a")])
        self.error = error
        self.fail_on = fail_on
        self.calls: list[str] = []

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise self.error

    def get_pod(self, namespace, name, *, ctx):  # type: ignore[no-untyped-def]
        self._maybe_fail("get_pod")
        return super().get_pod(namespace, name, ctx=ctx)

    def list_pods(self, label_selectors, field_selectors, *, ctx):  # type: ignore[no-untyped-def]
        self._maybe_fail("list_pods")
        return super().list_pods(label_selectors, field_selectors, ctx=ctx)

    def get_node(self, name, *, ctx):  # type: ignore[no-untyped-def]
        self._maybe_fail("get_node")
        return super().get_node(name, ctx=ctx)

    def list_nodes(self, label_selectors, *, ctx):  # type: ignore[no-untyped-def]
        self._maybe_fail("list_nodes")
        return super().list_nodes(label_selectors, ctx=ctx)


@pytest.fixture
def failing_provider_factory() -> Callable[..., FailingProvider]:
    return FailingProvider


@pytest.fixture
def sampler() -> Sampler:
    """Deterministic sampler."""
    return Sampler(random.Random(1234))


# ---------------------------------------------------------------------------
# Files for CLI tests
# ---------------------------------------------------------------------------


@pytest.fixture
def snapshot_file(tmp_path: Path, cluster_pods: list[Pod], cluster_nodes: list[Node]) -> Path:
    """The standard cluster written as a flat JSON snapshot."""
    path = tmp_path / "cluster.json"
    payload = {
        "pods": [p.model_dump(mode="json") for p in cluster_pods],
        "nodes": [n.model_dump(mode="json") for n in cluster_nodes],
    }
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture
def write_spec(tmp_path: Path) -> Callable[..., Path]:
    """Write a target spec dict as JSON and return its path."""

    def _write(spec: dict[str, Any], name: str = "experiment.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(spec), encoding="utf-8")
        return path

    return _write
