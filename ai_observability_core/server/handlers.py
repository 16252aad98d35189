"""Observability routes.

Thin adapters over the query codec, the storage protocol and the scoring
trigger. Every storage call is bounded by ``settings.storage_timeout_seconds``.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, Query, Request

from ai_observability_core.exceptions import NotFoundError, UnavailableError, ValidationError
from ai_observability_core.logging import get_pipeline_logger
from ai_observability_core.query import parse_traces_query_params
from ai_observability_core.scoring import ScorerRegistry, ScoreTracesResult, ScoringTarget, ScoringWorker, score_traces
from ai_observability_core.settings import Settings
from ai_observability_core.storage import (
    ListScoresResult,
    ObservabilityStorage,
    PaginationArgs,
    TraceRecord,
    TracesPaginatedArg,
    TracesPaginatedResult,
)

from .schemas import ErrorResponse, ScoreTracesBody

logger = get_pipeline_logger(__name__)

T = TypeVar("T")

router = APIRouter(
    tags=["Observability"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _storage(request: Request) -> ObservabilityStorage:
    storage: ObservabilityStorage | None = getattr(request.app.state, "storage", None)
    if storage is None:
        raise UnavailableError("Storage is not available")
    return storage


async def _bounded(request: Request, call: Awaitable[T]) -> T:
    timeout = _settings(request).storage_timeout_seconds
    try:
        async with asyncio.timeout(timeout):
            return await call
    except TimeoutError as exc:
        raise UnavailableError(f"Storage did not respond within {timeout:g}s") from exc


def _with_default_page_size(args: TracesPaginatedArg, per_page: int) -> TracesPaginatedArg:
    pagination = args.pagination or PaginationArgs()
    if pagination.per_page is not None:
        return args
    return args.model_copy(update={"pagination": pagination.model_copy(update={"per_page": per_page})})


@router.get("/traces", response_model=TracesPaginatedResult, summary="Get AI traces")
async def get_traces_paginated(request: Request) -> TracesPaginatedResult:
    """Paginated root spans, filterable by type, dates, entity, status, tags, metadata and more."""
    storage = _storage(request)
    parsed = parse_traces_query_params(request.url.query)
    if not parsed.success:
        raise ValidationError("Validation failed", parsed.errors)
    assert parsed.data is not None

    args = _with_default_page_size(parsed.data, _settings(request).default_per_page)
    logger.debug("Listing traces: %s", args.model_dump(by_alias=True, exclude_none=True))
    return await _bounded(request, storage.get_traces_paginated(args))


@router.post("/traces/score", response_model=ScoreTracesResult, summary="Score traces")
async def score_traces_route(request: Request, body: ScoreTracesBody) -> ScoreTracesResult:
    """Start scoring one or more traces. Returns immediately; scoring runs in the background."""
    _storage(request)
    worker: ScoringWorker | None = getattr(request.app.state, "scoring_worker", None)
    if worker is None:
        raise UnavailableError("Scoring is not configured")
    registry: ScorerRegistry = request.app.state.scorers

    return score_traces(
        worker=worker,
        registry=registry,
        scorer_name=body.scorer_name,
        targets=[ScoringTarget(trace_id=t.trace_id, span_id=t.span_id) for t in body.targets],
    )


@router.get("/traces/{trace_id}", response_model=TraceRecord, responses={404: {"model": ErrorResponse}}, summary="Get AI trace by ID")
async def get_trace(request: Request, trace_id: str) -> TraceRecord:
    """A complete trace with all its spans."""
    storage = _storage(request)
    trace = await _bounded(request, storage.get_trace(trace_id))
    if trace is None:
        raise NotFoundError(f"Trace with ID '{trace_id}' not found")
    return trace


@router.get("/traces/{trace_id}/{span_id}/scores", response_model=ListScoresResult, summary="List scores by span")
async def list_scores_by_span(
    request: Request,
    trace_id: str,
    span_id: str,
    page: int = Query(default=0, ge=0),
    per_page: int = Query(default=10, ge=1, alias="perPage"),
) -> ListScoresResult:
    """Scores recorded for one span of a trace, newest first."""
    storage = _storage(request)
    return await _bounded(request, storage.list_scores_by_span(trace_id, span_id, page=page, per_page=per_page))
