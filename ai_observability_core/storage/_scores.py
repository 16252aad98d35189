"""Score records and the scores store consulted by list_scores_by_span."""

from datetime import UTC, datetime
from threading import Lock
from typing import Protocol, runtime_checkable
from uuid import uuid4

from pydantic import Field

from ._models import JsonMap, PaginationInfo, UtcDatetime, _WireModel

__all__ = ["ListScoresResult", "MemoryScoresStore", "ScoreRecord", "ScoresStorage"]


class ScoreRecord(_WireModel):
    """Result of running one scorer against one span."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    scorer_id: str
    trace_id: str
    span_id: str
    score: float
    reason: str | None = None
    metadata: JsonMap | None = None
    created_at: UtcDatetime = Field(default_factory=lambda: datetime.now(UTC))


class ListScoresResult(_WireModel):
    pagination: PaginationInfo
    scores: list[ScoreRecord]


@runtime_checkable
class ScoresStorage(Protocol):
    """Protocol for score backends."""

    async def save_score(self, score: ScoreRecord) -> None:
        """Persist a score."""
        ...

    async def list_scores_by_span(self, trace_id: str, span_id: str, *, page: int = 0, per_page: int = 10) -> ListScoresResult:
        """Return one page of scores for a span, newest first."""
        ...


class MemoryScoresStore:
    """Dict-based scores store. All data is lost when the process exits."""

    def __init__(self, scores: dict[str, ScoreRecord] | None = None) -> None:
        self._scores: dict[str, ScoreRecord] = scores if scores is not None else {}
        self._lock = Lock()

    async def save_score(self, score: ScoreRecord) -> None:
        with self._lock:
            self._scores[score.id] = score.model_copy(deep=True)

    async def list_scores_by_span(self, trace_id: str, span_id: str, *, page: int = 0, per_page: int = 10) -> ListScoresResult:
        with self._lock:
            matching = [s for s in self._scores.values() if s.trace_id == trace_id and s.span_id == span_id]
        matching.sort(key=lambda s: s.created_at, reverse=True)

        total = len(matching)
        start = page * per_page
        end = start + per_page
        return ListScoresResult(
            pagination=PaginationInfo(total=total, page=page, per_page=per_page, has_more=end < total),
            scores=[s.model_copy(deep=True) for s in matching[start:end]],
        )
