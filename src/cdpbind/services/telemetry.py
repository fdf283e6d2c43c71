"""Phase timing for ``cdpbind -v``.

A ``@traced`` service method opens a root span; ``trace_span`` blocks
inside it (``load``, ``compile``, ``render``) become its children. The
finished tree, with per-phase counts attached via :meth:`Span.annotate`,
lands in ``ServiceResult.meta["telemetry"]`` and is drawn by the rich
renderer. Without ``-v`` nothing is recorded: each call costs one
ContextVar lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import structlog

from cdpbind.services.result import ServiceResult

log = structlog.get_logger("cdpbind.telemetry")

_enabled: ContextVar[bool] = ContextVar("_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


@dataclass
class Span:
    """One timed phase of a service call."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = self.annotations
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Time a phase as a child of the running service span.

    Yields ``None`` outside ``-v`` or outside a ``@traced`` call, so
    callers guard their ``annotate`` calls with ``if span:``.
    """
    parent = _current_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    span = Span(name=name, parent=parent)
    parent.children.append(span)
    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.end()
        _current_span.reset(token)


def _with_telemetry(result: ServiceResult, span: Span) -> ServiceResult:
    meta = {**(result.meta or {}), "telemetry": span.to_dict()}
    return result.model_copy(update={"meta": meta})


def _log_span(span: Span, *, ok: bool) -> None:
    log.debug(
        "span.complete",
        span_name=span.name,
        duration_ms=round(span.duration_ms, 2),
        ok=ok,
        phases=[child.name for child in span.children],
    )


def traced[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Time a service method; under ``-v`` attach its phase tree to the result."""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        if not _enabled.get():
            return func(*args, **kwargs)

        span = Span(name=func.__qualname__)
        token = _current_span.set(span)
        ok = False
        try:
            result = func(*args, **kwargs)
            ok = getattr(result, "ok", True)
        finally:
            span.end()
            _current_span.reset(token)
            _log_span(span, ok=ok)

        if isinstance(result, ServiceResult):
            result = _with_telemetry(result, span)  # type: ignore[assignment]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Switch span recording on; ``AppContext`` calls this for ``-v``."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
