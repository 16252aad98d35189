"""Asynchronous trace scoring."""

from ._types import Scorer, ScorerFn, ScorerRegistry, ScoreResult, ScoringInput, ScoringTarget
from .trigger import ScoreTracesResult, score_traces
from .worker import ScoringErrorSink, ScoringFailure, ScoringWorker, log_scoring_failure

__all__ = [
    "ScoreResult",
    "ScoreTracesResult",
    "Scorer",
    "ScorerFn",
    "ScorerRegistry",
    "ScoringErrorSink",
    "ScoringFailure",
    "ScoringInput",
    "ScoringTarget",
    "ScoringWorker",
    "log_scoring_failure",
    "score_traces",
]
