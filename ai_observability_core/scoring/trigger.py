"""Fire-and-forget entry point used by the score endpoint."""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ai_observability_core.exceptions import FieldError, NotFoundError, UnavailableError, ValidationError
from ai_observability_core.logging import get_pipeline_logger

from ._types import ScorerRegistry, ScoringTarget
from .worker import ScoringWorker

logger = get_pipeline_logger(__name__)


class ScoreTracesResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: str
    message: str
    trace_count: int


def score_traces(
    *,
    worker: ScoringWorker,
    registry: ScorerRegistry,
    scorer_name: str,
    targets: Sequence[ScoringTarget],
) -> ScoreTracesResult:
    """Queue scoring of ``targets`` and return immediately.

    Only request problems raise here (missing scorer name or targets, unknown
    scorer, stopped worker). Anything that goes wrong while scoring is reported
    to the worker's error sink and never reaches the caller.
    """
    if not scorer_name:
        raise ValidationError("Scorer ID is required", [FieldError(field="scorerName", message="Scorer ID is required")])
    if not targets:
        raise ValidationError("At least one target is required", [FieldError(field="targets", message="At least one target is required")])

    scorer = registry.get(scorer_name)
    if scorer is None:
        raise NotFoundError(f"Scorer '{scorer_name}' not found")

    if not worker.submit(scorer, list(targets)):
        raise UnavailableError("Scoring worker is not running")

    count = len(targets)
    logger.info("Queued scoring of %d trace(s) with '%s'", count, scorer.id)
    return ScoreTracesResult(
        status="success",
        message=f"Scoring started for {count} {'trace' if count == 1 else 'traces'}",
        trace_count=count,
    )
