"""Observability storage protocol.

Defines the ObservabilityStorage protocol that every span storage backend must
implement. HTTP handlers, the scoring worker and exporters only talk to this
contract, so SQL or columnar engines can replace the in-memory one without
touching the query codec or the handlers.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from ._models import (
    CreateSpanRecord,
    TraceRecord,
    TracesPaginatedArg,
    TracesPaginatedResult,
    TracingStorageStrategy,
    UpdateSpanRecord,
)
from ._scores import ListScoresResult


@dataclass(frozen=True, slots=True)
class TracingStrategy:
    """Write strategies a backend can serve, and the one it prefers."""

    preferred: TracingStorageStrategy
    supported: tuple[TracingStorageStrategy, ...]


@dataclass(frozen=True, slots=True)
class SpanUpdate:
    """One entry of a batch update."""

    trace_id: str
    span_id: str
    updates: UpdateSpanRecord | Mapping[str, Any]


@runtime_checkable
class ObservabilityStorage(Protocol):
    """Protocol for span storage backends.

    Implementations: ObservabilityInMemory (reference engine, testing).
    """

    @property
    def tracing_strategy(self) -> TracingStrategy:
        """Write strategies supported by this backend."""
        ...

    async def create_span(self, span: CreateSpanRecord) -> None:
        """Store a new span. Raises ValidationError if span_id or trace_id is missing."""
        ...

    async def batch_create_spans(self, records: Sequence[CreateSpanRecord]) -> None:
        """Store many spans."""
        ...

    async def get_trace(self, trace_id: str) -> TraceRecord | None:
        """Return every span of a trace ordered by started_at, or None when no span matches."""
        ...

    async def get_traces_paginated(self, args: TracesPaginatedArg | None = None) -> TracesPaginatedResult:
        """Filter and paginate root spans."""
        ...

    async def update_span(self, trace_id: str, span_id: str, updates: UpdateSpanRecord | Mapping[str, Any]) -> None:
        """Merge updates into a stored span. Raises NotFoundError if the span does not exist."""
        ...

    async def batch_update_spans(self, records: Sequence[SpanUpdate]) -> None:
        """Apply many updates."""
        ...

    async def batch_delete_traces(self, trace_ids: Sequence[str]) -> None:
        """Remove every span belonging to any listed trace."""
        ...

    async def list_scores_by_span(self, trace_id: str, span_id: str, *, page: int = 0, per_page: int = 10) -> ListScoresResult:
        """Return one page of scores recorded for a span."""
        ...
