"""AI Observability Core - trace storage, query codec and scoring for AI pipelines.

@public

AI Observability Core stores spans emitted by agents, tools, workflows and model
calls, and serves them back as traces. A single storage contract sits between
the HTTP routes, the background scorer and any exporter, so the in-memory
engine shipped here can be replaced by a persistent one without touching the
rest of the stack.

Core Capabilities:
    - **Span Storage**: ObservabilityStorage protocol with an in-memory reference engine
    - **Query Codec**: Bracket-notation query strings to and from TracesPaginatedArg
    - **Trace Listings**: Root-span filtering, ordering and pagination
    - **Scoring**: Fire-and-forget scoring of traces on a background worker
    - **HTTP API**: FastAPI routes with structured 400/404/500 error bodies

Quick Start:
    >>> from datetime import UTC, datetime
    >>> from ai_observability_core import CreateSpanRecord, ObservabilityInMemory, SpanType
    >>>
    >>> storage = ObservabilityInMemory(collection={})
    >>> await storage.create_span(
    ...     CreateSpanRecord(
    ...         trace_id="t1",
    ...         span_id="s1",
    ...         name="root",
    ...         span_type=SpanType.AGENT_RUN,
    ...         started_at=datetime.now(UTC),
    ...     )
    ... )
    >>> trace = await storage.get_trace("t1")

Serving the API:
    >>> from ai_observability_core.server import create_app
    >>> app = create_app()  # uvicorn module:app

Optional Environment Variables:
    - OBSERVABILITY_STORAGE: Storage backend name (default "memory")
    - AI_OBSERVABILITY_LOGGING_CONFIG: Path to a YAML logging configuration
"""

from .exceptions import FieldError, NotFoundError, ObservabilityCoreError, UnavailableError, ValidationError
from .logging import LoggingConfig, get_pipeline_logger, setup_logging
from .query import ParseResult, parse_traces_query_params, serialize_traces_params
from .scoring import Scorer, ScorerRegistry, ScoreResult, ScoringInput, ScoringTarget, ScoringWorker, score_traces
from .settings import Settings, settings
from .storage import (
    CreateSpanRecord,
    EntityType,
    ObservabilityInMemory,
    ObservabilityStorage,
    SpanRecord,
    SpanStatus,
    SpanType,
    TraceRecord,
    TracesPaginatedArg,
    TracesPaginatedResult,
    UpdateSpanRecord,
    create_observability_storage,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "Settings",
    "settings",
    # Exceptions
    "FieldError",
    "NotFoundError",
    "ObservabilityCoreError",
    "UnavailableError",
    "ValidationError",
    # Logging
    "LoggingConfig",
    "get_pipeline_logger",
    "setup_logging",
    # Storage
    "CreateSpanRecord",
    "EntityType",
    "ObservabilityInMemory",
    "ObservabilityStorage",
    "SpanRecord",
    "SpanStatus",
    "SpanType",
    "TraceRecord",
    "TracesPaginatedArg",
    "TracesPaginatedResult",
    "UpdateSpanRecord",
    "create_observability_storage",
    # Query codec
    "ParseResult",
    "parse_traces_query_params",
    "serialize_traces_params",
    # Scoring
    "ScoreResult",
    "Scorer",
    "ScorerRegistry",
    "ScoringInput",
    "ScoringTarget",
    "ScoringWorker",
    "score_traces",
]
