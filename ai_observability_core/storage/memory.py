"""In-memory observability storage.

Reference implementation of the ObservabilityStorage protocol. Spans live in a
dict keyed by ``(trace_id, span_id)`` that is injected by the owner, so tests
and applications control its lifecycle explicitly. All data is lost when the
process exits.

Every query is an O(n) scan over the collection; there are no secondary
indexes.
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime
from threading import Lock
from typing import Any, TypeAlias

from pydantic import ValidationError as PydanticValidationError

from ai_observability_core.exceptions import FieldError, NotFoundError, UnavailableError, ValidationError, field_errors_from_pydantic
from ai_observability_core.logging import get_pipeline_logger

from ._models import (
    CreateSpanRecord,
    DateRange,
    PaginationArgs,
    PaginationInfo,
    SortDirection,
    SpanRecord,
    SpanStatus,
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
from ._scores import ListScoresResult, ScoresStorage
from .protocol import SpanUpdate, TracingStrategy

logger = get_pipeline_logger(__name__)

SpanKey: TypeAlias = tuple[str, str]

DEFAULT_PAGE = 0
DEFAULT_PER_PAGE = 10

_SCALAR_FILTER_FIELDS = (
    "span_type",
    "entity_type",
    "entity_id",
    "entity_name",
    "user_id",
    "organization_id",
    "resource_id",
    "run_id",
    "session_id",
    "thread_id",
    "request_id",
    "environment",
    "source",
    "service_name",
    "deployment_id",
)
_MAP_FILTER_FIELDS = ("metadata", "scope", "version_info")
_SPAN_FIELDS = set(CreateSpanRecord.model_fields)
_EPOCH = datetime.min.replace(tzinfo=UTC)


def _in_range(value: datetime | None, window: DateRange | None) -> bool:
    if window is None or (window.start is None and window.end is None):
        return True
    if value is None:
        return False
    if window.start is not None and value < window.start:
        return False
    return not (window.end is not None and value > window.end)


def _map_contains(actual: Mapping[str, Any] | None, expected: Mapping[str, Any]) -> bool:
    if actual is None:
        return not expected
    return all(key in actual and json_values_equal(actual[key], value) for key, value in expected.items())


def _matches(span: SpanRecord, filters: TracesFilter, child_error_traces: set[str]) -> bool:
    for name in _SCALAR_FILTER_FIELDS:
        expected = getattr(filters, name)
        if expected and getattr(span, name) != expected:
            return False

    if filters.status is not None and get_span_status(span) != filters.status:
        return False

    if filters.has_child_error is not None and (span.trace_id in child_error_traces) != filters.has_child_error:
        return False

    # Any-of: one shared tag is enough
    if filters.tags and not (span.tags and set(filters.tags).intersection(span.tags)):
        return False

    for name in _MAP_FILTER_FIELDS:
        expected = getattr(filters, name)
        if expected and not _map_contains(getattr(span, name), expected):
            return False

    return _in_range(span.started_at, filters.started_at) and _in_range(span.ended_at, filters.ended_at)


def _sort_spans(spans: list[SpanRecord], order_by: TracesOrderBy | None) -> None:
    field = TracesOrderByField.STARTED_AT
    direction = SortDirection.DESC
    if order_by is not None:
        field = order_by.field or field
        direction = order_by.direction or direction

    attr = "started_at" if field is TracesOrderByField.STARTED_AT else "ended_at"

    # None sorts after every timestamp, so running spans lead a DESC listing
    def key(span: SpanRecord) -> tuple[bool, datetime]:
        value = getattr(span, attr)
        return (value is None, value or _EPOCH)

    spans.sort(key=key, reverse=direction is SortDirection.DESC)


class ObservabilityInMemory:
    """Dict-based span storage.

    Storage layout: one SpanRecord per ``(trace_id, span_id)`` key.

    Concurrency: a single store-wide lock serializes writers and guards read
    snapshots, so each call sees a consistent collection. No isolation is
    provided across calls: page 2 of a listing may reflect writes made after
    page 1 was read.

    Records are copied on the way in and on the way out; callers never hold
    references into the collection.
    """

    def __init__(
        self,
        *,
        collection: dict[SpanKey, SpanRecord] | None = None,
        scores: ScoresStorage | None = None,
    ) -> None:
        self._collection: dict[SpanKey, SpanRecord] = collection if collection is not None else {}
        self._scores = scores
        self._lock = Lock()

    @property
    def tracing_strategy(self) -> TracingStrategy:
        return TracingStrategy(
            preferred=TracingStorageStrategy.REALTIME,
            supported=(
                TracingStorageStrategy.REALTIME,
                TracingStorageStrategy.BATCH_WITH_UPDATES,
                TracingStorageStrategy.INSERT_ONLY,
            ),
        )

    # --- Writes ---

    @staticmethod
    def _prepare(span: CreateSpanRecord, now: datetime) -> SpanRecord:
        errors = []
        if not getattr(span, "span_id", None):
            errors.append(FieldError(field="spanId", message="Span ID is required for creating a span"))
        if not getattr(span, "trace_id", None):
            errors.append(FieldError(field="traceId", message="Trace ID is required for creating a span"))
        if errors:
            raise ValidationError("Span is missing required identifiers", errors)
        return SpanRecord.model_validate({**span.model_dump(include=_SPAN_FIELDS), "created_at": now, "updated_at": now})

    async def create_span(self, span: CreateSpanRecord) -> None:
        """Store a span, stamping created_at and updated_at. An existing key is overwritten."""
        record = self._prepare(span, datetime.now(UTC))
        with self._lock:
            self._collection[(record.trace_id, record.span_id)] = record

    async def batch_create_spans(self, records: Sequence[CreateSpanRecord]) -> None:
        """Store many spans, all-or-nothing.

        Every record is validated before the first write, so a batch with one
        invalid span leaves the collection untouched.
        """
        now = datetime.now(UTC)
        prepared = [self._prepare(span, now) for span in records]
        with self._lock:
            for record in prepared:
                self._collection[(record.trace_id, record.span_id)] = record
        logger.debug("Stored %d spans", len(prepared))

    @staticmethod
    def _apply_update(current: SpanRecord, updates: UpdateSpanRecord | Mapping[str, Any], now: datetime) -> SpanRecord:
        try:
            patch = updates if isinstance(updates, UpdateSpanRecord) else UpdateSpanRecord.model_validate(updates)
            merged = SpanRecord.model_validate(
                {
                    **current.model_dump(include=_SPAN_FIELDS | {"created_at"}),
                    **patch.model_dump(exclude_unset=True),
                    "updated_at": now,
                }
            )
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid update for span '{current.span_id}'", field_errors_from_pydantic(exc)) from exc

        before = get_span_status(current)
        after = get_span_status(merged)
        if before is not SpanStatus.RUNNING and after is not before:
            raise ValidationError(
                f"Span '{current.span_id}' already finished with status '{before}'",
                [FieldError(field="status", message=f"Cannot transition from '{before}' to '{after}'")],
            )
        return merged

    def _lookup(self, trace_id: str, span_id: str, staged: Mapping[SpanKey, SpanRecord]) -> SpanRecord:
        key = (trace_id, span_id)
        current = staged.get(key) or self._collection.get(key)
        if current is None:
            raise NotFoundError(f"Span '{span_id}' in trace '{trace_id}' not found for update")
        return current

    async def update_span(self, trace_id: str, span_id: str, updates: UpdateSpanRecord | Mapping[str, Any]) -> None:
        """Merge explicitly set fields of ``updates`` into a stored span and refresh updated_at.

        Raises:
            NotFoundError: The span does not exist; nothing is written.
            ValidationError: The update is malformed or would move a finished span
                out of its terminal status.
        """
        now = datetime.now(UTC)
        with self._lock:
            current = self._lookup(trace_id, span_id, {})
            self._collection[(trace_id, span_id)] = self._apply_update(current, updates, now)

    async def batch_update_spans(self, records: Sequence[SpanUpdate]) -> None:
        """Apply many updates, all-or-nothing. Later entries see earlier entries of the same batch."""
        now = datetime.now(UTC)
        with self._lock:
            staged: dict[SpanKey, SpanRecord] = {}
            for record in records:
                current = self._lookup(record.trace_id, record.span_id, staged)
                staged[(record.trace_id, record.span_id)] = self._apply_update(current, record.updates, now)
            self._collection.update(staged)

    async def batch_delete_traces(self, trace_ids: Iterable[str]) -> None:
        """Remove every span whose trace_id is listed."""
        doomed = set(trace_ids)
        with self._lock:
            keys = [key for key in self._collection if key[0] in doomed]
            for key in keys:
                del self._collection[key]
        logger.debug("Deleted %d spans from %d traces", len(keys), len(doomed))

    # --- Reads ---

    def _snapshot(self) -> list[SpanRecord]:
        with self._lock:
            return list(self._collection.values())

    async def get_trace(self, trace_id: str) -> TraceRecord | None:
        spans = [span.model_copy(deep=True) for span in self._snapshot() if span.trace_id == trace_id]
        if not spans:
            return None
        spans.sort(key=lambda span: span.started_at)
        return TraceRecord(trace_id=trace_id, spans=spans)

    async def get_traces_paginated(self, args: TracesPaginatedArg | None = None) -> TracesPaginatedResult:
        """List root spans matching the filters, one page at a time.

        Pipeline: root spans -> filters -> pagination date_range on started_at
        -> total -> order -> page slice. Defaults: page 0, 10 per page,
        ordered by started_at descending.
        """
        args = args or TracesPaginatedArg()
        filters = args.filters or TracesFilter()
        pagination = args.pagination or PaginationArgs()

        spans = self._snapshot()
        child_error_traces: set[str] = set()
        if filters.has_child_error is not None:
            child_error_traces = {s.trace_id for s in spans if s.parent_span_id is not None and s.error is not None}

        roots = [
            span
            for span in spans
            if span.parent_span_id is None
            and _matches(span, filters, child_error_traces)
            and _in_range(span.started_at, pagination.date_range)
        ]
        total = len(roots)
        _sort_spans(roots, args.order_by)

        page = pagination.page if pagination.page is not None else DEFAULT_PAGE
        per_page = pagination.per_page if pagination.per_page is not None else DEFAULT_PER_PAGE
        start = page * per_page
        end = start + per_page

        return TracesPaginatedResult(
            pagination=PaginationInfo(total=total, page=page, per_page=per_page, has_more=end < total),
            spans=[span.model_copy(deep=True) for span in roots[start:end]],
        )

    async def list_scores_by_span(self, trace_id: str, span_id: str, *, page: int = 0, per_page: int = 10) -> ListScoresResult:
        if self._scores is None:
            raise UnavailableError("Scores storage is not configured")
        return await self._scores.list_scores_by_span(trace_id, span_id, page=page, per_page=per_page)
