"""Span storage protocol, data model and backends for trace observability."""

from ._models import (
    CreateSpanRecord,
    DateRange,
    EntityType,
    PaginationArgs,
    PaginationInfo,
    SortDirection,
    SpanRecord,
    SpanStatus,
    SpanType,
    TraceRecord,
    TracesFilter,
    TracesOrderBy,
    TracesOrderByField,
    TracesPaginatedArg,
    TracesPaginatedResult,
    TracingStorageStrategy,
    UpdateSpanRecord,
    get_span_status,
    json_values_equal,
)
from ._scores import ListScoresResult, MemoryScoresStore, ScoreRecord, ScoresStorage
from .factory import create_observability_storage
from .memory import ObservabilityInMemory
from .protocol import ObservabilityStorage, SpanUpdate, TracingStrategy

__all__ = [
    "CreateSpanRecord",
    "DateRange",
    "EntityType",
    "ListScoresResult",
    "MemoryScoresStore",
    "ObservabilityInMemory",
    "ObservabilityStorage",
    "PaginationArgs",
    "PaginationInfo",
    "ScoreRecord",
    "ScoresStorage",
    "SortDirection",
    "SpanRecord",
    "SpanStatus",
    "SpanType",
    "SpanUpdate",
    "TraceRecord",
    "TracesFilter",
    "TracesOrderBy",
    "TracesOrderByField",
    "TracesPaginatedArg",
    "TracesPaginatedResult",
    "TracingStorageStrategy",
    "TracingStrategy",
    "UpdateSpanRecord",
    "create_observability_storage",
    "get_span_status",
    "json_values_equal",
]
