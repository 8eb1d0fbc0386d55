"""Trace ids carried alongside log records."""

from __future__ import annotations

from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from uuid import uuid4


@dataclass(frozen=True)
class TraceContext:
    """Trace and span id of the current operation, plus extra log fields."""

    trace_id: str
    span_id: str
    attributes: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))

    def with_span(self, span_id: str) -> TraceContext:
        return replace(self, span_id=span_id)


_current: ContextVar[TraceContext | None] = ContextVar("hanami_search_trace", default=None)


def new_trace() -> TraceContext:
    """Start a fresh trace (32 hex chars) with a fresh span (16 hex chars)."""
    ctx = TraceContext(trace_id=uuid4().hex, span_id=uuid4().hex[:16])
    _current.set(ctx)
    return ctx


def get_trace_context() -> TraceContext:
    ctx = _current.get()
    if ctx is None or not ctx.trace_id:
        return new_trace()
    return ctx


def set_trace_context(trace_id: str, span_id: str, **attributes: object) -> TraceContext:
    ctx = TraceContext(trace_id=trace_id, span_id=span_id, attributes=MappingProxyType(attributes))
    _current.set(ctx)
    return ctx


def update_span_id(span_id: str) -> None:
    """Point the current trace at a new span."""
    _current.set(get_trace_context().with_span(span_id))
