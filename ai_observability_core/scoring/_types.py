"""Scorer definitions and the registry handlers resolve scorer names against."""

from collections.abc import Callable, Coroutine, Iterator
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from ai_observability_core.storage import SpanRecord, TraceRecord


@dataclass(frozen=True, slots=True)
class ScoringTarget:
    """A trace to score. Without ``span_id`` the root span is scored."""

    trace_id: str
    span_id: str | None = None


@dataclass(frozen=True, slots=True)
class ScoringInput:
    trace: TraceRecord
    span: SpanRecord


@dataclass(frozen=True, slots=True)
class ScoreResult:
    score: float
    reason: str | None = None
    metadata: dict[str, Any] | None = None


ScorerFn: TypeAlias = Callable[[ScoringInput], Coroutine[None, None, ScoreResult]]
"""Async callable: (trace + span under evaluation) -> score."""


@dataclass(frozen=True, slots=True)
class Scorer:
    """A named scoring function. How it scores is up to the caller."""

    id: str
    run: ScorerFn = field(compare=False)
    name: str = ""


class ScorerRegistry:
    """Scorers addressable by id or, as a fallback, by display name."""

    def __init__(self, scorers: list[Scorer] | None = None) -> None:
        self._scorers: dict[str, Scorer] = {}
        for scorer in scorers or []:
            self.register(scorer)

    def register(self, scorer: Scorer) -> None:
        self._scorers[scorer.id] = scorer

    def get(self, id_or_name: str) -> Scorer | None:
        if scorer := self._scorers.get(id_or_name):
            return scorer
        return next((s for s in self._scorers.values() if s.name and s.name == id_or_name), None)

    def __contains__(self, id_or_name: object) -> bool:
        return isinstance(id_or_name, str) and self.get(id_or_name) is not None

    def __iter__(self) -> Iterator[Scorer]:
        return iter(self._scorers.values())

    def __len__(self) -> int:
        return len(self._scorers)
