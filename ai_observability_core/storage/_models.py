"""Pydantic models and enums for spans, traces, and trace listing queries.

Python attributes are snake_case; the wire format (JSON bodies and query
strings) is camelCase through field aliases. Both spellings are accepted on
input.
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, JsonValue, Strict, computed_field
from pydantic.alias_generators import to_camel

__all__ = [
    "CreateSpanRecord",
    "DateRange",
    "EntityType",
    "PaginationArgs",
    "PaginationInfo",
    "SortDirection",
    "SpanRecord",
    "SpanStatus",
    "SpanType",
    "TraceRecord",
    "TracesFilter",
    "TracesOrderBy",
    "TracesOrderByField",
    "TracesPaginatedArg",
    "TracesPaginatedResult",
    "TracingStorageStrategy",
    "UpdateSpanRecord",
    "get_span_status",
    "json_values_equal",
]


class SpanType(StrEnum):
    """Span type classification."""

    AGENT_RUN = "agent_run"
    GENERIC = "generic"
    MODEL_GENERATION = "model_generation"
    MODEL_STEP = "model_step"
    MODEL_CHUNK = "model_chunk"
    MCP_TOOL_CALL = "mcp_tool_call"
    PROCESSOR_RUN = "processor_run"
    TOOL_CALL = "tool_call"
    WORKFLOW_RUN = "workflow_run"
    WORKFLOW_STEP = "workflow_step"
    WORKFLOW_CONDITIONAL = "workflow_conditional"
    WORKFLOW_CONDITIONAL_EVAL = "workflow_conditional_eval"
    WORKFLOW_PARALLEL = "workflow_parallel"
    WORKFLOW_LOOP = "workflow_loop"
    WORKFLOW_SLEEP = "workflow_sleep"
    WORKFLOW_WAIT_EVENT = "workflow_wait_event"


class EntityType(StrEnum):
    """Kind of framework entity that produced a span."""

    AGENT = "agent"
    WORKFLOW = "workflow"
    TOOL = "tool"
    NETWORK = "network"
    STEP = "step"


class SpanStatus(StrEnum):
    """Derived span status. Computed from error/ended_at, never stored."""

    SUCCESS = "success"
    ERROR = "error"
    RUNNING = "running"


class TracesOrderByField(StrEnum):
    STARTED_AT = "startedAt"
    ENDED_AT = "endedAt"


class SortDirection(StrEnum):
    ASC = "ASC"
    DESC = "DESC"


class TracingStorageStrategy(StrEnum):
    """How an exporter should push spans into a storage backend."""

    REALTIME = "realtime"
    BATCH_WITH_UPDATES = "batch-with-updates"
    INSERT_ONLY = "insert-only"


# --- Field types ---


def _parse_iso_datetime(value: Any) -> Any:
    # Only ISO-8601 strings are accepted; pydantic would also take "1700000000" as epoch seconds.
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _parse_query_bool(value: Any) -> Any:
    if isinstance(value, str):
        return {"true": True, "false": False}.get(value, value)
    return value


def _split_tags(value: Any) -> Any:
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return value


UtcDatetime = Annotated[datetime, BeforeValidator(_parse_iso_datetime), AfterValidator(_ensure_utc)]
"""Timezone-aware UTC datetime parsed strictly from ISO-8601 strings."""

QueryBool = Annotated[bool, Strict(), BeforeValidator(_parse_query_bool)]
"""Boolean that accepts real bools and the literal strings "true"/"false" only."""

TagList = Annotated[list[str], BeforeValidator(_split_tags)]
"""List of tags; a comma-separated string is split as a fallback."""

JsonMap = dict[str, JsonValue]


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Span records ---


class CreateSpanRecord(_WireModel):
    """A span as submitted by an exporter, before storage timestamps are assigned."""

    trace_id: str
    span_id: str
    parent_span_id: str | None = None
    name: str
    span_type: SpanType

    # Entity identification
    entity_type: EntityType | None = None
    entity_id: str | None = None
    entity_name: str | None = None

    # Identity & tenancy
    user_id: str | None = None
    organization_id: str | None = None
    resource_id: str | None = None

    # Correlation IDs
    run_id: str | None = None
    session_id: str | None = None
    thread_id: str | None = None
    request_id: str | None = None

    # Deployment context
    environment: str | None = None
    source: str | None = None
    service_name: str | None = None
    deployment_id: str | None = None
    version_info: JsonMap | None = None
    scope: JsonMap | None = None

    # Span data
    attributes: JsonMap | None = None
    metadata: JsonMap | None = None
    tags: list[str] | None = None
    links: Any = None
    input: Any = None
    output: Any = None
    error: Any = None
    is_event: bool = False

    started_at: UtcDatetime
    ended_at: UtcDatetime | None = None


class SpanRecord(CreateSpanRecord):
    """A stored span. ``status`` is derived on every read."""

    created_at: UtcDatetime | None = None
    updated_at: UtcDatetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> SpanStatus:
        return get_span_status(self)


class UpdateSpanRecord(_WireModel):
    """Partial span update. Only explicitly set fields are merged into the stored record."""

    parent_span_id: str | None = None
    name: str | None = None
    span_type: SpanType | None = None
    entity_type: EntityType | None = None
    entity_id: str | None = None
    entity_name: str | None = None
    user_id: str | None = None
    organization_id: str | None = None
    resource_id: str | None = None
    run_id: str | None = None
    session_id: str | None = None
    thread_id: str | None = None
    request_id: str | None = None
    environment: str | None = None
    source: str | None = None
    service_name: str | None = None
    deployment_id: str | None = None
    version_info: JsonMap | None = None
    scope: JsonMap | None = None
    attributes: JsonMap | None = None
    metadata: JsonMap | None = None
    tags: list[str] | None = None
    links: Any = None
    input: Any = None
    output: Any = None
    error: Any = None
    is_event: bool | None = None
    started_at: UtcDatetime | None = None
    ended_at: UtcDatetime | None = None


class TraceRecord(_WireModel):
    """All spans sharing a trace id, ordered by started_at ascending."""

    trace_id: str
    spans: list[SpanRecord]


def get_span_status(span: CreateSpanRecord) -> SpanStatus:
    """Derive span status: error if an error is recorded, running if not ended, else success."""
    if span.error is not None:
        return SpanStatus.ERROR
    if span.ended_at is None:
        return SpanStatus.RUNNING
    return SpanStatus.SUCCESS


def json_values_equal(left: Any, right: Any) -> bool:
    """Compare two JSON values without Python's bool/int conflation (``True != 1``)."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(json_values_equal(left[key], right[key]) for key in left)
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(json_values_equal(a, b) for a, b in zip(left, right))
    return left == right


# --- Listing queries ---


class DateRange(_WireModel):
    """Inclusive time window."""

    start: UtcDatetime | None = None
    end: UtcDatetime | None = None


class PaginationArgs(_WireModel):
    page: int | None = Field(default=None, ge=0, description="Zero-indexed page number")
    per_page: int | None = Field(default=None, ge=1, description="Number of items per page")
    date_range: DateRange | None = Field(default=None, description="Window applied to started_at")


class TracesOrderBy(_WireModel):
    field: TracesOrderByField | None = None
    direction: SortDirection | None = None


class TracesFilter(_WireModel):
    """Filters for trace listings. Every set field must match (AND), tags match any-of."""

    started_at: DateRange | None = None
    ended_at: DateRange | None = None

    span_type: SpanType | None = None

    entity_type: EntityType | None = None
    entity_id: str | None = None
    entity_name: str | None = None

    user_id: str | None = None
    organization_id: str | None = None
    resource_id: str | None = None

    run_id: str | None = None
    session_id: str | None = None
    thread_id: str | None = None
    request_id: str | None = None

    environment: str | None = None
    source: str | None = None
    service_name: str | None = None
    deployment_id: str | None = None

    metadata: JsonMap | None = None
    tags: TagList | None = None
    scope: JsonMap | None = None
    version_info: JsonMap | None = None

    status: SpanStatus | None = None
    has_child_error: QueryBool | None = Field(
        default=None,
        description="True = some child span in the trace has an error, even if the root succeeded",
    )


class TracesPaginatedArg(_WireModel):
    filters: TracesFilter | None = None
    pagination: PaginationArgs | None = None
    order_by: TracesOrderBy | None = None


class PaginationInfo(_WireModel):
    total: int
    page: int
    per_page: int
    has_more: bool


class TracesPaginatedResult(_WireModel):
    pagination: PaginationInfo
    spans: list[SpanRecord]
