"""Span builders shared by storage, scoring and server tests."""

from datetime import UTC, datetime, timedelta
from typing import Any

from ai_observability_core.storage import CreateSpanRecord, SpanType

BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


def at(minutes: int) -> datetime:
    """A timestamp ``minutes`` after BASE_TIME."""
    return BASE_TIME + timedelta(minutes=minutes)


def make_span(
    trace_id: str = "t1",
    span_id: str = "s1",
    *,
    parent_span_id: str | None = None,
    started: int = 0,
    ended: int | None = None,
    span_type: SpanType = SpanType.AGENT_RUN,
    **fields: Any,
) -> CreateSpanRecord:
    """Build a span starting ``started`` minutes after BASE_TIME."""
    return CreateSpanRecord(
        trace_id=trace_id,
        span_id=span_id,
        parent_span_id=parent_span_id,
        name=fields.pop("name", f"span-{span_id}"),
        span_type=span_type,
        started_at=at(started),
        ended_at=at(ended) if ended is not None else None,
        **fields,
    )
