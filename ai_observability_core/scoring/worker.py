"""Background worker that scores traces without blocking the request that asked for it."""

import asyncio
import contextlib
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Event, Thread
from typing import TypeAlias

from opentelemetry import context as otel_context
from opentelemetry.context import Context

from ai_observability_core.exceptions import NotFoundError
from ai_observability_core.logging import get_pipeline_logger
from ai_observability_core.storage import ObservabilityStorage, ScoreRecord, ScoresStorage

from ._types import Scorer, ScoringInput, ScoringTarget

logger = get_pipeline_logger(__name__)

_SENTINEL = object()


@dataclass(frozen=True, slots=True)
class ScoringFailure:
    """One target that could not be scored."""

    scorer_id: str
    target: ScoringTarget
    error: Exception


ScoringErrorSink: TypeAlias = Callable[[ScoringFailure], None]
"""Receives every background scoring failure. Must not raise; exceptions are logged and dropped."""


def log_scoring_failure(failure: ScoringFailure) -> None:
    logger.error(
        "Background trace scoring failed for scorer '%s' on trace '%s': %s",
        failure.scorer_id,
        failure.target.trace_id,
        failure.error,
    )


@dataclass(frozen=True, slots=True)
class _ScoringJob:
    scorer: Scorer
    targets: tuple[ScoringTarget, ...]
    parent_otel_context: Context | None = field(default=None, hash=False, compare=False)


class ScoringWorker:
    """Background daemon thread that runs scorers and writes scores to the scores store.

    Runs jobs on its own asyncio event loop; targets of a batch are scored in
    parallel. ``submit()`` is thread-safe, never blocks and never raises into
    the caller. Failures go to ``on_error`` and are never surfaced to whoever
    submitted the job.
    """

    def __init__(
        self,
        *,
        storage: ObservabilityStorage,
        scores: ScoresStorage,
        on_error: ScoringErrorSink = log_scoring_failure,
    ) -> None:
        self._storage = storage
        self._scores = scores
        self._on_error = on_error
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[_ScoringJob | Event | object] | None = None
        self._thread: Thread | None = None
        self._ready = Event()

    @property
    def is_running(self) -> bool:
        return self._loop is not None and self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background daemon thread for trace scoring."""
        if self._thread is not None:
            return
        self._ready.clear()
        self._thread = Thread(target=self._thread_main, name="scoring-worker", daemon=True)
        self._thread.start()
        if not self._ready.wait(timeout=5.0):
            logger.warning("Scoring worker thread did not start within 5 seconds")

    def _thread_main(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._queue = asyncio.Queue()
        self._ready.set()
        try:
            self._loop.run_until_complete(self._run())
        finally:
            self._loop.close()
            self._loop = None

    async def _run(self) -> None:
        assert self._queue is not None
        while True:
            item = await self._queue.get()
            if item is _SENTINEL:
                break
            if isinstance(item, Event):
                item.set()
                continue
            assert isinstance(item, _ScoringJob)
            await self._process_job(item)

    async def _process_job(self, job: _ScoringJob) -> None:
        token = otel_context.attach(job.parent_otel_context) if job.parent_otel_context is not None else None
        try:
            await asyncio.gather(*[self._process_target(job.scorer, target) for target in job.targets])
        finally:
            if token is not None:
                otel_context.detach(token)

    async def _process_target(self, scorer: Scorer, target: ScoringTarget) -> None:
        try:
            await self._score_target(scorer, target)
        except Exception as e:
            self._report(ScoringFailure(scorer_id=scorer.id, target=target, error=e))

    async def _score_target(self, scorer: Scorer, target: ScoringTarget) -> None:
        trace = await self._storage.get_trace(target.trace_id)
        if trace is None:
            raise NotFoundError(f"Trace '{target.trace_id}' not found")

        if target.span_id is not None:
            span = next((s for s in trace.spans if s.span_id == target.span_id), None)
        else:
            span = next((s for s in trace.spans if s.parent_span_id is None), None)
        if span is None:
            raise NotFoundError(f"Span '{target.span_id or 'root'}' not found in trace '{target.trace_id}'")

        result = await scorer.run(ScoringInput(trace=trace, span=span))
        await self._scores.save_score(
            ScoreRecord(
                scorer_id=scorer.id,
                trace_id=trace.trace_id,
                span_id=span.span_id,
                score=result.score,
                reason=result.reason,
                metadata=result.metadata,
            )
        )
        logger.debug("Scored span '%s' of trace '%s' with '%s'", span.span_id, trace.trace_id, scorer.id)

    def _report(self, failure: ScoringFailure) -> None:
        try:
            self._on_error(failure)
        except Exception:
            logger.exception("Scoring error sink raised while reporting a failure for trace '%s'", failure.target.trace_id)

    def submit(self, scorer: Scorer, targets: list[ScoringTarget]) -> bool:
        """Queue a scoring job. Thread-safe, non-blocking.

        Returns:
            True if the job was queued, False if the worker is not running.
        """
        if self._loop is None or self._queue is None:
            return False
        job = _ScoringJob(scorer=scorer, targets=tuple(targets), parent_otel_context=otel_context.get_current())
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, job)
        except RuntimeError:
            return False
        return True

    def flush(self, timeout: float = 60.0) -> None:
        """Block until all queued jobs are processed."""
        if self._loop is None or self._queue is None:
            return
        barrier = Event()
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, barrier)
        except RuntimeError:
            return
        if not barrier.wait(timeout=timeout):
            logger.warning("Scoring worker flush timed out after %.0fs, some traces may still be scoring", timeout)

    def shutdown(self, timeout: float = 60.0) -> None:
        """Send stop sentinel and join the worker thread. Pending jobs are drained before stop."""
        if self._loop is not None and self._queue is not None:
            with contextlib.suppress(RuntimeError):
                self._loop.call_soon_threadsafe(self._queue.put_nowait, _SENTINEL)
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
