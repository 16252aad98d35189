"""FastAPI application factory for the observability API."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ai_observability_core.logging import get_pipeline_logger
from ai_observability_core.scoring import ScorerRegistry, ScoringErrorSink, ScoringWorker, log_scoring_failure
from ai_observability_core.settings import Settings
from ai_observability_core.settings import settings as default_settings
from ai_observability_core.storage import MemoryScoresStore, ObservabilityStorage, ScoresStorage, create_observability_storage

from .errors import register_error_handlers
from .handlers import router

logger = get_pipeline_logger(__name__)


def create_app(
    storage: ObservabilityStorage | None = None,
    *,
    scores: ScoresStorage | None = None,
    scorers: ScorerRegistry | None = None,
    on_scoring_error: ScoringErrorSink = log_scoring_failure,
    settings: Settings = default_settings,
) -> FastAPI:
    """Build the observability API.

    When ``storage`` is omitted, one is created from ``settings``. A caller
    passing its own ``storage`` should pass the ``scores`` store it reads from,
    otherwise new scores land in a store the score route never sees. The scoring
    worker lives as long as the application: it starts on startup and drains
    pending jobs on shutdown.
    """
    scores = scores if scores is not None else MemoryScoresStore()
    if storage is None:
        storage = create_observability_storage(settings, scores=scores)
    worker = ScoringWorker(storage=storage, scores=scores, on_error=on_scoring_error)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        worker.start()
        logger.info("Observability API ready (storage: %s)", type(storage).__name__)
        try:
            yield
        finally:
            worker.shutdown(timeout=settings.scoring_shutdown_timeout_seconds)
            logger.info("Observability API stopped")

    app = FastAPI(title="AI Observability", lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage
    app.state.scorers = scorers if scorers is not None else ScorerRegistry()
    app.state.scoring_worker = worker

    app.include_router(router, prefix=settings.api_prefix)
    register_error_handlers(app)
    return app
