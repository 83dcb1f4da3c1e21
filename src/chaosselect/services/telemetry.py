"""Stage telemetry for the selection pipeline.

Every service entry point decorated with :func:`traced` opens a root span;
each pipeline stage (``list_pods``, ``filter_nodes``, ``filter_policy``,
the three requirement filters, ``sample``) opens a child span through
:func:`trace_span` and records how many pods survived it.  The finished
tree lands in ``ServiceResult.meta["telemetry"]``.

Telemetry is off unless ``--verbose`` is passed; when off, every helper
costs a single ``ContextVar.get``.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from chaosselect.services.result import ServiceResult

log = structlog.get_logger("chaosselect.telemetry")

_verbose_enabled: ContextVar[bool] = ContextVar("_verbose_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


@dataclass
class Span:
    """One timed stage, its sub-stages, and the counts it recorded."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return 0.0 if self.end_time is None else (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        node: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            node["annotations"] = dict(self.annotations)
        if self.children:
            node["children"] = [child.to_dict() for child in self.children]
        return node


def record_counts(span: Span | None, **counts: Any) -> None:
    """Annotate *span* with stage counts; no-op for the disabled ``None`` span."""
    if span is None:
        return
    for key, value in counts.items():
        span.annotate(key, value)


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Open a stage span under the active root.

    Yields None when telemetry is disabled or no traced call is active, so
    pipeline code can be exercised directly without a service wrapper.
    """
    parent = _current_span.get() if _verbose_enabled.get() else None
    if parent is None:
        yield None
        return

    stage = Span(name=name, parent=parent)
    parent.children.append(stage)
    token = _current_span.set(stage)
    try:
        yield stage
    finally:
        stage.end()
        _current_span.reset(token)


def _with_telemetry(result: ServiceResult, span: Span) -> ServiceResult:
    # ServiceResult is frozen
    meta = {**(result.meta or {}), "telemetry": span.to_dict()}
    return result.model_copy(update={"meta": meta})


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Open a root span around a service method and attach its tree to the result."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _verbose_enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        token = _current_span.set(root)
        ok = False
        try:
            result = func(*args, **kwargs)
            ok = result.ok if isinstance(result, ServiceResult) else True
        finally:
            root.end()
            _current_span.reset(token)
            log.debug(
                "span.complete",
                span_name=root.name,
                duration_ms=round(root.duration_ms, 2),
                ok=ok,
                stages=len(root.children),
            )

        if isinstance(result, ServiceResult):
            return _with_telemetry(result, root)  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn on stage tracing (``--verbose``)."""
    _verbose_enabled.set(True)


def disable_telemetry() -> None:
    _verbose_enabled.set(False)


def get_current_span() -> Span | None:
    """Return the innermost active span, or None when tracing is off."""
    if not _verbose_enabled.get():
        return None
    return _current_span.get()
