"""Factory function for creating observability storage instances based on settings."""

from ai_observability_core.exceptions import UnavailableError
from ai_observability_core.settings import Settings

from ._scores import MemoryScoresStore, ScoresStorage
from .protocol import ObservabilityStorage


def create_observability_storage(
    settings: Settings,
    *,
    scores: ScoresStorage | None = None,
) -> ObservabilityStorage:
    """Create an ObservabilityStorage based on settings.

    Selects ObservabilityInMemory when ``observability_storage`` is "memory",
    with a fresh MemoryScoresStore unless ``scores`` is given. Persistent
    engines plug in here; an unknown backend name raises UnavailableError.

    Backends are imported lazily to avoid circular imports.
    """
    backend = settings.observability_storage.strip().lower()
    if backend == "memory":
        from ai_observability_core.storage.memory import ObservabilityInMemory

        return ObservabilityInMemory(collection={}, scores=scores if scores is not None else MemoryScoresStore())

    raise UnavailableError(f"Observability storage backend '{settings.observability_storage}' is not available")
